from supabase import AsyncClient
from pulse.core.joins import fetch_own_summary, fetch_profile_summaries
from pulse.modules.messages.schemas import Message
from typing import List
from fastapi import HTTPException
from datetime import datetime, timezone
import asyncio
import logging

logger = logging.getLogger(__name__)


class MessageStore:
    """Direct-message thread between the viewer and one peer, oldest first."""

    def __init__(self, supabase: AsyncClient, user_id: str, peer_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.peer_id = peer_id
        self.messages: List[Message] = []
        self.loading = True
        self._lock = asyncio.Lock()

    def _thread_filter(self) -> str:
        me, peer = self.user_id, self.peer_id
        return (
            f"and(sender_id.eq.{me},receiver_id.eq.{peer}),"
            f"and(sender_id.eq.{peer},receiver_id.eq.{me})"
        )

    async def fetch_messages(self) -> List[Message]:
        logger.debug(f"Fetching messages between {self.user_id} and {self.peer_id}")
        try:
            result = await self.supabase.table("messages")\
                .select("*")\
                .or_(self._thread_filter())\
                .order("created_at", desc=False)\
                .execute()
            rows = result.data or []
            senders = await fetch_profile_summaries(self.supabase, (row["sender_id"] for row in rows))
        except Exception as e:
            logger.error(f"Error fetching messages with {self.peer_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        messages = [Message(**row, sender=senders.get(row["sender_id"])) for row in rows]
        # Stable sort keeps the server's order for equal timestamps
        self.messages = sorted(messages, key=lambda m: m.created_at)
        self.loading = False
        return self.messages

    async def send_message(self, content: str) -> Message:
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Message cannot be empty")

        async with self._lock:
            try:
                result = await self.supabase.table("messages").insert({
                    "sender_id": self.user_id,
                    "receiver_id": self.peer_id,
                    "content": content
                }).execute()
                if not result.data:
                    raise HTTPException(status_code=500, detail="Failed to send message")
            except HTTPException:
                raise
            except Exception as e:
                logger.error(f"Send message error to {self.peer_id}: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            sender = await fetch_own_summary(self.supabase, self.user_id)
            message = Message(**result.data[0], sender=sender)
            self.messages = self.messages + [message]
            return message

    async def mark_read(self) -> int:
        """Stamp read_at on the peer's unread messages to the viewer. Returns how many rows changed."""
        read_at = datetime.now(timezone.utc).isoformat()
        async with self._lock:
            try:
                result = await self.supabase.table("messages")\
                    .update({"read_at": read_at})\
                    .eq("sender_id", self.peer_id)\
                    .eq("receiver_id", self.user_id)\
                    .is_("read_at", "null")\
                    .execute()
            except Exception as e:
                logger.error(f"Error marking messages from {self.peer_id} read: {e}")
                raise HTTPException(status_code=500, detail=str(e))

            updated = {row["id"]: row for row in (result.data or [])}
            if updated:
                self.messages = [
                    Message(**updated[m.id], sender=m.sender)
                    if m.id in updated else m
                    for m in self.messages
                ]
            return len(updated)
