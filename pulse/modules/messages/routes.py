from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_session
from pulse.core.sessions import UserSession
from pulse.modules.messages.schemas import InboxResponse, Message, MessageCreate
from typing import List

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("/unread", response_model=InboxResponse)
async def get_unread(
    refresh: bool = False,
    session: UserSession = Depends(get_session),
):
    """Unread messages grouped by sender, kept current by the realtime subscription"""
    inbox = session.inbox
    if refresh or inbox.loading or not inbox.subscribed:
        await inbox.refresh()
    return InboxResponse(total_unread=inbox.total_unread, conversations=inbox.conversations)


@router.get("/{peer_id}", response_model=List[Message])
async def open_thread(
    peer_id: str,
    session: UserSession = Depends(get_session),
):
    """Thread with a peer, oldest first; opening it marks the peer's messages read"""
    return await session.open_thread(peer_id)


@router.post("/{peer_id}", response_model=Message, status_code=201)
async def send_message(
    peer_id: str,
    message: MessageCreate,
    session: UserSession = Depends(get_session),
):
    return await session.thread(peer_id).send_message(message.content)
