from supabase import AsyncClient
from pulse.config.settings import settings
from pulse.modules.profiles.schemas import Profile, ProfileUpdate, ProfileSummary
from pulse.modules.media.schemas import MediaFile
from pulse.modules.media.storage import MediaStorage, validate_media
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import asyncio
import logging

logger = logging.getLogger(__name__)

SEARCH_MIN_CHARS = 2


def filter_profiles(profiles: List[Profile], term: str) -> List[Profile]:
    """Case-insensitive match on display name, username or bio"""
    needle = term.strip().lower()
    if not needle:
        return list(profiles)
    return [
        p for p in profiles
        if any(needle in (value or "").lower() for value in (p.display_name, p.username, p.bio))
    ]


class ProfileStore:
    """The signed-in user's profile record, plus profile lookups for other views."""

    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.profile: Optional[Profile] = None
        self.loading = True
        self._lock = asyncio.Lock()
        self.storage = MediaStorage(supabase)

    async def fetch_profile(self, user_id: Optional[str] = None) -> Profile:
        """Get a profile by ID (the viewer's own when omitted)"""
        target_id = user_id or self.user_id
        try:
            result = await self.supabase.table("profiles")\
                .select("*")\
                .eq("id", target_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profile {target_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        self.loading = False

        if result is None or not result.data:
            raise HTTPException(status_code=404, detail="User not found")

        profile = Profile(**result.data)
        if target_id == self.user_id:
            self.profile = profile
        return profile

    async def fetch_profile_by_username(self, username: str) -> Profile:
        try:
            result = await self.supabase.table("profiles")\
                .select("*")\
                .eq("username", username)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching profile @{username}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        if result is None or not result.data:
            raise HTTPException(status_code=404, detail="User not found")
        return Profile(**result.data)

    async def _ensure_username_free(self, username: str) -> None:
        existing = await self.supabase.table("profiles")\
            .select("id")\
            .eq("username", username)\
            .neq("id", self.user_id)\
            .execute()
        if existing.data:
            raise HTTPException(status_code=400, detail="Username already taken")

    async def update_profile(self, updates: ProfileUpdate) -> Profile:
        """Update the viewer's profile; the returned row replaces local state"""
        update_data = updates.model_dump(exclude_none=True)
        if "username" in update_data:
            update_data["username"] = update_data["username"].strip().lstrip("@")
            if not update_data["username"]:
                raise HTTPException(status_code=400, detail="Username cannot be empty")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

        async with self._lock:
            try:
                if "username" in update_data:
                    await self._ensure_username_free(update_data["username"])

                result = await self.supabase.table("profiles")\
                    .update(update_data)\
                    .eq("id", self.user_id)\
                    .execute()

                if not result.data:
                    raise HTTPException(status_code=404, detail="User not found")
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Error updating profile {self.user_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            self.profile = Profile(**result.data[0])
            logger.info(f"Profile {self.user_id} updated: {sorted(update_data)}")
            return self.profile

    async def upload_avatar(self, file: MediaFile) -> str:
        """Upload to avatars/{user_id}/avatar.{ext}, overwriting the previous one, and point the profile at it"""
        validate_media(file, settings.get_allowed_image_types())
        path = f"{self.user_id}/avatar.{file.extension}"
        upload = await self.storage.upload_file(settings.avatars_bucket, path, file, upsert=True)
        await self.update_profile(ProfileUpdate(avatar_url=upload.public_url))
        return upload.public_url

    async def list_profiles(self) -> List[Profile]:
        """Everyone except the viewer, most followed first"""
        try:
            result = await self.supabase.table("profiles")\
                .select("*")\
                .neq("id", self.user_id)\
                .order("followers_count", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error listing profiles: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return [Profile(**p) for p in (result.data or [])]

    async def search_profiles(self, query: str, limit: int = 10) -> List[ProfileSummary]:
        """Username / display name search used for tagging users"""
        query = query.strip()
        if len(query) < SEARCH_MIN_CHARS:
            return []
        # PostgREST's or() syntax reserves these characters
        pattern = "".join(c for c in query if c not in ",()%*")
        if not pattern:
            return []
        try:
            result = await self.supabase.table("profiles")\
                .select("id, username, display_name, avatar_url")\
                .or_(f"username.ilike.%{pattern}%,display_name.ilike.%{pattern}%")\
                .limit(limit)\
                .execute()
        except Exception as e:
            logger.error(f"Error searching profiles for '{query}': {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return [ProfileSummary(**p) for p in (result.data or [])]
