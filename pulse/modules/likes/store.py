from supabase import AsyncClient
from pulse.modules.likes.schemas import Like, ToggleLikeResult
from collections import Counter
from typing import Dict, List, Tuple
from fastapi import HTTPException
import asyncio
import logging

logger = logging.getLogger(__name__)


class LikeStore:
    """Global like-edge set, indexed by (user_id, post_id) with per-post counts kept incrementally."""

    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.loading = True
        self._likes: Dict[Tuple[str, str], Like] = {}
        self._counts: Counter = Counter()
        self._lock = asyncio.Lock()

    @property
    def likes(self) -> List[Like]:
        return list(self._likes.values())

    def _add(self, like: Like) -> None:
        key = (like.user_id, like.post_id)
        if key not in self._likes:
            self._counts[like.post_id] += 1
        self._likes[key] = like

    def _remove(self, user_id: str, post_id: str) -> None:
        if self._likes.pop((user_id, post_id), None) is not None:
            self._counts[post_id] -= 1
            if self._counts[post_id] <= 0:
                del self._counts[post_id]

    async def fetch_likes(self) -> List[Like]:
        """Reload the full like set and rebuild the index"""
        async with self._lock:
            try:
                result = await self.supabase.table("likes")\
                    .select("*")\
                    .order("created_at", desc=True)\
                    .execute()
            except Exception as e:
                logger.error(f"Error fetching likes: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            self._likes = {}
            self._counts = Counter()
            for row in result.data or []:
                self._add(Like(**row))
            self.loading = False
            return self.likes

    async def toggle_like(self, post_id: str) -> ToggleLikeResult:
        """Unlike if the viewer already likes the post, like it otherwise"""
        if self.loading:
            # Pre-check reads the loaded index
            await self.fetch_likes()
        async with self._lock:
            existing = self._likes.get((self.user_id, post_id))
            try:
                if existing is not None:
                    await self.supabase.table("likes")\
                        .delete()\
                        .eq("id", existing.id)\
                        .execute()
                    self._remove(self.user_id, post_id)
                    return ToggleLikeResult(action="unliked")

                result = await self.supabase.table("likes").insert({
                    "user_id": self.user_id,
                    "post_id": post_id
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to like post")
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Toggle like error on post {post_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            self._add(Like(**result.data[0]))
            return ToggleLikeResult(action="liked")

    def is_liked(self, post_id: str) -> bool:
        return (self.user_id, post_id) in self._likes

    def get_like_count(self, post_id: str) -> int:
        return self._counts.get(post_id, 0)
