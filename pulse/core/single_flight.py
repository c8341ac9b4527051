"""Coalescing refresher: overlapping refresh triggers collapse into one in-flight fetch plus at most one follow-up."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class SingleFlight:
    def __init__(self, fetch: Callable[[], Awaitable[Any]], name: str = "refresh"):
        self._fetch = fetch
        self._name = name
        self._task: Optional[asyncio.Task] = None
        self._pending = False

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> Any:
        """Trigger a refresh and wait for a result that is at least as new as this trigger."""
        if self.in_flight:
            # The running fetch may have read remote state before this trigger; ask for one more pass.
            self._pending = True
            logger.debug(f"{self._name}: coalesced trigger into in-flight refresh")
        else:
            self._task = asyncio.ensure_future(self._drain())
        return await asyncio.shield(self._task)

    async def _drain(self) -> Any:
        while True:
            self._pending = False
            result = await self._fetch()
            if not self._pending:
                return result
            logger.debug(f"{self._name}: running follow-up refresh")
