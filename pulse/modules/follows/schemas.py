from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from pulse.modules.profiles.schemas import ProfileSummary


class Follow(BaseModel):
    id: str
    follower_id: str
    following_id: str
    created_at: datetime
    follower: Optional[ProfileSummary] = None
    following: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True


class FollowLists(BaseModel):
    followers: List[Follow]
    following: List[Follow]


class FollowStatus(BaseModel):
    user_id: str
    is_following: bool
