from supabase import AsyncClient
from fastapi import HTTPException
from pulse.config.settings import settings
from pulse.modules.media.schemas import MediaFile, UploadResponse
from typing import List, Optional
import time
import logging

logger = logging.getLogger(__name__)


def validate_media(file: MediaFile, allowed_types: Optional[List[str]] = None) -> None:
    """Reject wrong-type or oversized files before anything touches the network."""
    if allowed_types is None:
        allowed_types = settings.get_allowed_image_types() + settings.get_allowed_video_types()
    if file.content_type not in allowed_types:
        raise HTTPException(status_code=400, detail="Invalid file type. Please select an image or video file")
    if file.size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise HTTPException(status_code=400, detail=f"File too large. Please select a file smaller than {limit_mb}MB")
    if file.size == 0:
        raise HTTPException(status_code=400, detail="File is empty")


def timestamped_path(user_id: str, file: MediaFile) -> str:
    return f"{user_id}/{int(time.time() * 1000)}.{file.extension}"


class MediaStorage:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def upload_file(self, bucket: str, path: str, file: MediaFile, upsert: bool = False) -> UploadResponse:
        """Upload to a storage bucket and return the object's public URL"""
        try:
            await self.supabase.storage.from_(bucket).upload(
                path,
                file.content,
                {"content-type": file.content_type, "upsert": "true" if upsert else "false"},
            )
            public_url = await self.supabase.storage.from_(bucket).get_public_url(path)
        except Exception as e:
            logger.error(f"Failed to upload {path} to bucket {bucket}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")
        return UploadResponse(bucket=bucket, path=path, public_url=public_url, content_type=file.content_type)
