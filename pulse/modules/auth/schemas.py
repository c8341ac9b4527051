from pydantic import BaseModel
from typing import Optional


class CurrentUserResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    session_active: bool
    unread_messages: int = 0
