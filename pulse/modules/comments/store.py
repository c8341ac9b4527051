from supabase import AsyncClient
from pulse.core.joins import fetch_own_summary, fetch_profile_summaries
from pulse.modules.comments.schemas import Comment
from typing import List
from fastapi import HTTPException
import asyncio
import logging

logger = logging.getLogger(__name__)


class CommentStore:
    """Comments of a single post, oldest first."""

    def __init__(self, supabase: AsyncClient, user_id: str, post_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.post_id = post_id
        self.comments: List[Comment] = []
        self.loading = True
        self._lock = asyncio.Lock()

    async def fetch_comments(self) -> List[Comment]:
        try:
            result = await self.supabase.table("comments")\
                .select("*")\
                .eq("post_id", self.post_id)\
                .order("created_at", desc=False)\
                .execute()
            rows = result.data or []
            authors = await fetch_profile_summaries(self.supabase, (row["user_id"] for row in rows))
        except Exception as e:
            logger.error(f"Error fetching comments for post {self.post_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        self.comments = [Comment(**row, user=authors.get(row["user_id"])) for row in rows]
        self.loading = False
        return self.comments

    async def add_comment(self, content: str) -> Comment:
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Comment cannot be empty")

        async with self._lock:
            try:
                result = await self.supabase.table("comments").insert({
                    "user_id": self.user_id,
                    "post_id": self.post_id,
                    "content": content
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to add comment")
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Add comment error on post {self.post_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            author = await fetch_own_summary(self.supabase, self.user_id)
            comment = Comment(**result.data[0], user=author)
            self.comments = self.comments + [comment]
            return comment
