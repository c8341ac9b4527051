from supabase import AsyncClient
from pulse.config.settings import settings
from pulse.core.joins import fetch_own_summary, fetch_profile_summaries
from pulse.modules.posts.ranking import rank_by_interests
from pulse.modules.posts.schemas import Post, PostCreate
from pulse.modules.media.schemas import MediaFile
from pulse.modules.media.storage import MediaStorage, timestamped_path, validate_media
from typing import List, Optional
from fastapi import HTTPException
import asyncio
import logging

logger = logging.getLogger(__name__)


class PostStore:
    """Global feed cache: fetched once, new posts prepended locally."""

    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.posts: List[Post] = []
        self.loading = True
        self._lock = asyncio.Lock()
        self.storage = MediaStorage(supabase)

    async def fetch_posts(self) -> List[Post]:
        """All posts newest first, with author summaries joined client-side"""
        try:
            result = await self.supabase.table("posts")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching posts: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        rows = result.data or []
        try:
            authors = await fetch_profile_summaries(self.supabase, (row["user_id"] for row in rows))
        except Exception as e:
            logger.error(f"Error fetching post authors: {e}")
            authors = {}

        self.posts = [Post(**row, profiles=authors.get(row["user_id"])) for row in rows]
        self.loading = False
        return self.posts

    def _validate(self, post_data: PostCreate, media: Optional[MediaFile]) -> None:
        has_caption = bool(post_data.caption and post_data.caption.strip())
        has_url = bool(post_data.image_url or post_data.video_url)
        if not has_caption and not has_url and media is None:
            raise HTTPException(status_code=400, detail="Nothing to post. Please add some content or select a file")
        if post_data.image_url and post_data.video_url:
            raise HTTPException(status_code=400, detail="A post can carry an image or a video, not both")
        if media is not None:
            if has_url:
                raise HTTPException(status_code=400, detail="A post can carry only one media file")
            validate_media(media)

    async def create_post(self, post_data: PostCreate, media: Optional[MediaFile] = None) -> Post:
        """Create a post, uploading its media file first when one is given"""
        self._validate(post_data, media)

        insert_data = {
            "user_id": self.user_id,
            "caption": (post_data.caption or "").strip() or None,
            "location": (post_data.location or "").strip() or None,
            "mood": (post_data.mood or "").strip() or None,
            "is_disappearing": post_data.is_disappearing,
            "likes_count": 0,
            "comments_count": 0,
        }
        if post_data.image_url:
            insert_data["image_url"] = post_data.image_url
        if post_data.video_url:
            insert_data["video_url"] = post_data.video_url

        uploaded_path = None
        if media is not None:
            bucket = settings.videos_bucket if media.is_video else settings.images_bucket
            upload = await self.storage.upload_file(bucket, timestamped_path(self.user_id, media), media)
            uploaded_path = f"{upload.bucket}/{upload.path}"
            insert_data["video_url" if media.is_video else "image_url"] = upload.public_url

        async with self._lock:
            try:
                result = await self.supabase.table("posts").insert(insert_data).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to create post")
            except HTTPException:
                if uploaded_path:
                    logger.warning(f"Post insert failed; uploaded object {uploaded_path} is orphaned")
                raise
            except Exception as e:
                if uploaded_path:
                    logger.warning(f"Post insert failed; uploaded object {uploaded_path} is orphaned")
                logger.error(f"Error creating post: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            author = await fetch_own_summary(self.supabase, self.user_id)
            post = Post(**result.data[0], profiles=author)
            self.posts = [post] + self.posts
            logger.info(f"Post {post.id} created by {self.user_id}")
            return post

    def personalized_feed(self, interests: Optional[List[str]]) -> List[Post]:
        return rank_by_interests(self.posts, interests)

    def posts_by_author(self, user_id: str) -> List[Post]:
        return [p for p in self.posts if p.user_id == user_id]
