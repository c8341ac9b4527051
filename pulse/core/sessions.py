"""Per-user sessions: one set of stores per signed-in user, kept in memory between requests."""
import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from supabase import AsyncClient

from pulse.config.settings import settings
from pulse.modules.comments.store import CommentStore
from pulse.modules.follows.store import FollowStore
from pulse.modules.likes.store import LikeStore
from pulse.modules.messages.inbox import MessageInbox
from pulse.modules.messages.schemas import Message
from pulse.modules.messages.store import MessageStore
from pulse.modules.posts.store import PostStore
from pulse.modules.profiles.store import ProfileStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Awaitable[AsyncClient]]


class UserSession:
    """
    Composes the stores for one user. Stores never talk to each other; cross-store
    flows (opening a thread clears its unread count) live here.
    """

    def __init__(self, supabase: AsyncClient, user_id: str, access_token: Optional[str] = None):
        self.supabase = supabase
        self.user_id = user_id
        self.access_token = access_token
        self.profile = ProfileStore(supabase, user_id)
        self.posts = PostStore(supabase, user_id)
        self.likes = LikeStore(supabase, user_id)
        self.follows = FollowStore(supabase, user_id)
        self.inbox = MessageInbox(supabase, user_id)
        self._comments: Dict[str, CommentStore] = {}
        self._threads: Dict[str, MessageStore] = {}
        self.last_used = time.monotonic()

    def touch(self) -> None:
        self.last_used = time.monotonic()

    def comments(self, post_id: str) -> CommentStore:
        if post_id not in self._comments:
            self._comments[post_id] = CommentStore(self.supabase, self.user_id, post_id)
        return self._comments[post_id]

    def thread(self, peer_id: str) -> MessageStore:
        if peer_id not in self._threads:
            self._threads[peer_id] = MessageStore(self.supabase, self.user_id, peer_id)
        return self._threads[peer_id]

    async def open_thread(self, peer_id: str) -> List[Message]:
        """Load the thread, mark the peer's messages read, then refresh the unread aggregate"""
        thread = self.thread(peer_id)
        await thread.fetch_messages()
        marked = await thread.mark_read()
        if marked:
            logger.debug(f"Marked {marked} message(s) from {peer_id} read for {self.user_id}")
        await self.inbox.refresh()
        return thread.messages

    async def close(self) -> None:
        await self.inbox.stop()


class SessionRegistry:
    """
    Open sessions keyed by user id. Lookups of an existing session never wait;
    opening one (client creation, inbox start) runs outside the registry lock,
    and concurrent opens for the same user and token share a single task.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        idle_ttl_sec: Optional[int] = None,
        max_count: Optional[int] = None,
    ):
        self._client_factory = client_factory
        self._idle_ttl_sec = idle_ttl_sec if idle_ttl_sec is not None else settings.session_idle_ttl_sec
        self._max_count = max_count if max_count is not None else settings.session_max_count
        self._sessions: Dict[str, UserSession] = {}
        self._opening: Dict[Tuple[str, str], asyncio.Task] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, user_id: str) -> Optional[UserSession]:
        return self._sessions.get(user_id)

    async def get_or_create(self, user_id: str, access_token: str) -> UserSession:
        """A new access token means a new client; the old session's caches go with it."""
        session = self._sessions.get(user_id)
        if session is not None and session.access_token == access_token:
            session.touch()
            return session

        key = (user_id, access_token)
        task = self._opening.get(key)
        if task is None:
            task = asyncio.ensure_future(self._open(user_id, access_token))
            self._opening[key] = task
            task.add_done_callback(lambda done: self._forget_opening(key, done))
        return await asyncio.shield(task)

    def _forget_opening(self, key: Tuple[str, str], task: asyncio.Task) -> None:
        if self._opening.get(key) is task:
            del self._opening[key]

    async def _open(self, user_id: str, access_token: str) -> UserSession:
        client = await self._client_factory(access_token)
        session = UserSession(client, user_id, access_token)
        try:
            await session.inbox.start()
        except Exception as e:
            logger.warning(f"Unread notifications unavailable for {user_id}: {e}")

        async with self._lock:
            retired = []
            previous = self._sessions.pop(user_id, None)
            if previous is not None:
                logger.debug(f"Access token rotated for {user_id}, rebuilding session")
                retired.append(previous)
            retired.extend(self._evict_locked())
            self._sessions[user_id] = session
            active = len(self._sessions)

        for old in retired:
            await old.close()
        logger.info(f"Session opened for {user_id} ({active} active)")
        return session

    async def drop(self, user_id: str) -> bool:
        async with self._lock:
            session = self._sessions.pop(user_id, None)
        if session is None:
            return False
        await session.close()
        logger.info(f"Session closed for {user_id}")
        return True

    def _evict_locked(self) -> List[UserSession]:
        """Remove idle sessions, then the least recently used ones, to make room for one more"""
        evicted = []
        now = time.monotonic()
        expired = [uid for uid, s in self._sessions.items() if now - s.last_used > self._idle_ttl_sec]
        for uid in expired:
            evicted.append(self._sessions.pop(uid))
            logger.debug(f"Evicted idle session for {uid}")
        while self._sessions and len(self._sessions) >= self._max_count:
            oldest = min(self._sessions, key=lambda uid: self._sessions[uid].last_used)
            evicted.append(self._sessions.pop(oldest))
            logger.debug(f"Evicted least recently used session for {oldest}")
        return evicted

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            await session.close()
