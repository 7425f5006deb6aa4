"""Process-wide expiry timers for live-stream discounts.

One pending timer per stream id. Scheduling again for the same stream cancels
the pending timer first, so the newest discount always owns the expiry. Timers
live on the event loop, not on any view, and keep running with no observer.
"""

import asyncio
from functools import lru_cache
from typing import Callable, Optional

from libs.common.logging import get_logger

logger = get_logger(__name__)


class DiscountScheduler:
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, stream_id: str) -> bool:
        return stream_id in self._handles

    def schedule(
        self, stream_id: str, delay_seconds: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        """Run ``callback`` after ``delay_seconds``, replacing any pending timer.

        Must be called from inside a running event loop unless one was given.
        """
        self.cancel(stream_id)
        loop = self._loop or asyncio.get_running_loop()
        handle = loop.call_later(max(delay_seconds, 0), self._fire, stream_id, callback)
        self._handles[stream_id] = handle
        logger.debug("Scheduled discount expiry for stream %s in %.1fs", stream_id, delay_seconds)
        return handle

    def _fire(self, stream_id: str, callback: Callable[[], None]) -> None:
        self._handles.pop(stream_id, None)
        try:
            callback()
        except Exception:
            logger.exception("Discount expiry for stream %s failed", stream_id)

    def cancel(self, stream_id: str) -> bool:
        handle = self._handles.pop(stream_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        count = len(self._handles)
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        if count:
            logger.info("Cancelled %d pending discount timer(s)", count)
        return count


@lru_cache
def get_discount_scheduler() -> DiscountScheduler:
    """The process-wide scheduler shared by every store in this process."""
    return DiscountScheduler()
