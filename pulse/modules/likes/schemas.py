from pydantic import BaseModel
from typing import Literal
from datetime import datetime


class Like(BaseModel):
    id: str
    user_id: str
    post_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class ToggleLikeResult(BaseModel):
    action: Literal["liked", "unliked"]


class LikeStatus(BaseModel):
    post_id: str
    liked: bool
    count: int
