from supabase import AsyncClient
from pulse.core.joins import fetch_profile_summaries
from pulse.core.single_flight import SingleFlight
from pulse.modules.follows.schemas import Follow, FollowLists
from typing import List, Set
from fastapi import HTTPException
import asyncio
import logging

logger = logging.getLogger(__name__)


class FollowStore:
    """
    Follow edges touching the viewer. Every follow/unfollow is followed by a
    full re-sync of both edge lists rather than a local patch.
    """

    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.followers: List[Follow] = []
        self.following: List[Follow] = []
        self.loading = True
        self._following_ids: Set[str] = set()
        self._lock = asyncio.Lock()
        self._refresh = SingleFlight(self._load, name=f"follows:{user_id}")

    async def fetch_follows(self) -> FollowLists:
        return await self._refresh.run()

    async def _load(self) -> FollowLists:
        try:
            followers_result = await self.supabase.table("follows")\
                .select("*")\
                .eq("following_id", self.user_id)\
                .execute()
            following_result = await self.supabase.table("follows")\
                .select("*")\
                .eq("follower_id", self.user_id)\
                .execute()

            followers_data = followers_result.data or []
            following_data = following_result.data or []
            profiles = await fetch_profile_summaries(
                self.supabase,
                [f["follower_id"] for f in followers_data] + [f["following_id"] for f in following_data],
            )
        except Exception as e:
            logger.error(f"Error fetching follows for {self.user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        self.followers = [Follow(**f, follower=profiles.get(f["follower_id"])) for f in followers_data]
        self.following = [Follow(**f, following=profiles.get(f["following_id"])) for f in following_data]
        self._following_ids = {f.following_id for f in self.following}
        self.loading = False
        return FollowLists(followers=self.followers, following=self.following)

    async def follow_user(self, user_id: str) -> Follow:
        if user_id == self.user_id:
            raise HTTPException(status_code=400, detail="Cannot follow yourself")
        if self.loading:
            await self.fetch_follows()

        async with self._lock:
            if self.is_following(user_id):
                raise HTTPException(status_code=400, detail="Already following this user")
            try:
                result = await self.supabase.table("follows").insert({
                    "follower_id": self.user_id,
                    "following_id": user_id
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to follow user")
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Error following {user_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))
            self._following_ids.add(user_id)

        logger.info(f"{self.user_id} is now following {user_id}")
        await self._resync()
        return Follow(**result.data[0])

    async def unfollow_user(self, user_id: str) -> bool:
        async with self._lock:
            try:
                await self.supabase.table("follows")\
                    .delete()\
                    .eq("follower_id", self.user_id)\
                    .eq("following_id", user_id)\
                    .execute()
            except Exception as e:
                logger.error(f"Error unfollowing {user_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))
            self._following_ids.discard(user_id)

        logger.info(f"{self.user_id} unfollowed {user_id}")
        await self._resync()
        return True

    async def _resync(self) -> None:
        try:
            await self.fetch_follows()
        except HTTPException as e:
            # The write already landed; the local index was patched above
            logger.warning(f"Follow re-sync failed for {self.user_id}: {e.detail}")

    def is_following(self, user_id: str) -> bool:
        return user_id in self._following_ids
