from supabase import AsyncClient
from pulse.core.joins import fetch_profile_summaries
from pulse.core.single_flight import SingleFlight
from pulse.modules.messages.schemas import UnreadSummary
from typing import Any, Dict, List, Optional, Set
from fastapi import HTTPException
import asyncio
import logging

logger = logging.getLogger(__name__)


class MessageInbox:
    """
    Unread-message aggregate for the viewer, one entry per sender.

    Realtime INSERT notifications on messages addressed to the viewer and
    explicit refreshes both go through a single SingleFlight, so a burst of
    notifications arriving while a refresh is running produces one follow-up
    refresh instead of one refresh per event. Reconnection and backfill are
    left to the realtime client.
    """

    def __init__(self, supabase: AsyncClient, user_id: str):
        self.supabase = supabase
        self.user_id = user_id
        self.summaries: Dict[str, UnreadSummary] = {}
        self.loading = True
        self._channel = None
        self._refresh = SingleFlight(self._load, name=f"inbox:{user_id}")
        self._event_tasks: Set[asyncio.Task] = set()

    @property
    def total_unread(self) -> int:
        return sum(s.count for s in self.summaries.values())

    @property
    def conversations(self) -> List[UnreadSummary]:
        """Most recent unread conversation first"""
        return sorted(self.summaries.values(), key=lambda s: s.latest_at, reverse=True)

    @property
    def subscribed(self) -> bool:
        return self._channel is not None

    async def refresh(self) -> Dict[str, UnreadSummary]:
        return await self._refresh.run()

    async def _load(self) -> Dict[str, UnreadSummary]:
        try:
            result = await self.supabase.table("messages")\
                .select("*")\
                .eq("receiver_id", self.user_id)\
                .is_("read_at", "null")\
                .order("created_at", desc=True)\
                .execute()
            rows = result.data or []
            senders = await fetch_profile_summaries(self.supabase, (row["sender_id"] for row in rows))
        except Exception as e:
            logger.error(f"Error fetching unread messages for {self.user_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        summaries: Dict[str, UnreadSummary] = {}
        for row in rows:
            sender_id = row["sender_id"]
            if sender_id in summaries:
                summaries[sender_id].count += 1
                continue
            # Rows arrive newest first, so the first row per sender is its latest
            summaries[sender_id] = UnreadSummary(
                sender_id=sender_id,
                count=1,
                latest_message=row["content"],
                latest_at=row["created_at"],
                sender=senders.get(sender_id),
            )
        self.summaries = summaries
        self.loading = False
        return self.summaries

    def _on_insert(self, payload: Dict[str, Any]) -> None:
        logger.debug(f"New message notification for {self.user_id}")
        task = asyncio.get_running_loop().create_task(self._refresh_from_event())
        self._event_tasks.add(task)
        task.add_done_callback(self._event_tasks.discard)

    async def _refresh_from_event(self) -> None:
        try:
            await self.refresh()
        except HTTPException as e:
            logger.warning(f"Inbox refresh after notification failed for {self.user_id}: {e.detail}")

    async def start(self) -> None:
        """Load the aggregate and subscribe to new messages addressed to the viewer"""
        if self._channel is not None:
            return
        await self.refresh()
        channel = self.supabase.channel(f"unread-messages-{self.user_id}")
        channel.on_postgres_changes(
            "INSERT",
            callback=self._on_insert,
            table="messages",
            schema="public",
            filter=f"receiver_id=eq.{self.user_id}",
        )
        await channel.subscribe()
        self._channel = channel
        logger.info(f"Subscribed to new messages for {self.user_id}")

    async def stop(self) -> None:
        channel: Optional[Any] = self._channel
        if channel is None:
            return
        self._channel = None
        try:
            await self.supabase.remove_channel(channel)
        except Exception as e:
            logger.warning(f"Error removing message channel for {self.user_id}: {e}")
        for task in list(self._event_tasks):
            task.cancel()
        logger.info(f"Unsubscribed from new messages for {self.user_id}")
