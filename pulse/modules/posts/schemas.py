from pydantic import BaseModel, computed_field, model_validator
from typing import Optional
from datetime import datetime, timedelta
from pulse.config.settings import settings
from pulse.modules.profiles.schemas import ProfileSummary


class PostCreate(BaseModel):
    caption: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    location: Optional[str] = None
    mood: Optional[str] = None
    is_disappearing: bool = False

    @model_validator(mode="after")
    def at_most_one_media(self):
        if self.image_url and self.video_url:
            raise ValueError("A post can carry an image or a video, not both")
        return self


class Post(BaseModel):
    id: str
    user_id: str
    caption: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    location: Optional[str] = None
    mood: Optional[str] = None
    is_disappearing: Optional[bool] = False
    likes_count: Optional[int] = 0
    comments_count: Optional[int] = 0
    created_at: datetime
    updated_at: Optional[datetime] = None
    profiles: Optional[ProfileSummary] = None  # author

    @computed_field
    @property
    def expires_at(self) -> Optional[datetime]:
        """Lifetime hint for disappearing posts; nothing deletes them server-side"""
        if not self.is_disappearing:
            return None
        return self.created_at + timedelta(hours=settings.disappearing_post_ttl_hours)

    class Config:
        from_attributes = True

