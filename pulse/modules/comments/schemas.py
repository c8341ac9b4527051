from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from pulse.modules.profiles.schemas import ProfileSummary


class CommentCreate(BaseModel):
    content: str


class Comment(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    user: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True
