"""Spacing of consecutive requests to the changeset API."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from typing import AsyncIterator, Awaitable, Callable

LOGGER = logging.getLogger(__name__)


class RateLimiter:
    """Async limiter that keeps ``min_interval`` seconds between requests.

    The API throttles or bans clients that send parallel requests, so a
    request holds the limiter from the moment it is cleared to go until it
    completes. The next request starts no earlier than ``min_interval``
    seconds after that, whichever user it belongs to.
    """

    def __init__(
        self,
        min_interval: float = 1.1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._lock = asyncio.Lock()
        self._min_interval = max(min_interval, 0.0)
        self._clock = clock
        self._sleep = sleep
        self._last_call: float | None = None

    @contextlib.asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold the only request slot for the duration of the ``async with`` block."""

        async with self._lock:
            if self._last_call is not None:
                delay = self._min_interval - (self._clock() - self._last_call)
                if delay > 0:
                    LOGGER.debug("Waiting %.2fs before next changeset request", delay)
                    sleep = self._sleep or asyncio.sleep
                    await sleep(delay)
            try:
                yield
            finally:
                self._last_call = self._clock()


__all__ = ["RateLimiter"]
