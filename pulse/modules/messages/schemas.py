from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from pulse.modules.profiles.schemas import ProfileSummary


class MessageCreate(BaseModel):
    content: str


class Message(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    created_at: datetime
    read_at: Optional[datetime] = None
    sender: Optional[ProfileSummary] = None

    class Config:
        from_attributes = True


class UnreadSummary(BaseModel):
    sender_id: str
    count: int
    latest_message: str
    latest_at: datetime
    sender: Optional[ProfileSummary] = None


class InboxResponse(BaseModel):
    total_unread: int
    conversations: List[UnreadSummary]
