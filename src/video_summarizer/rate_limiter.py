"""Sliding-window rate limiting for AI providers and site requests.

The limiter keeps the timestamps of granted calls in a deque. Timestamps older
than the window are pruned before every check, so the cap applies to any
rolling window rather than to fixed buckets.
"""

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RateLimiter:
    """Admission gate granting at most ``max_requests`` calls per window.

    Attributes:
        max_requests: Maximum grants inside any rolling window.
        window_seconds: Length of the rolling window in seconds.
        name: Label used in log events.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock
        self._sleep = sleep
        self._grants: deque[float] = deque()
        self._lock = asyncio.Lock()

    def _prune(self, now: float) -> None:
        while self._grants and now - self._grants[0] >= self.window_seconds:
            self._grants.popleft()

    @property
    def in_window(self) -> int:
        """Number of grants currently inside the window."""
        self._prune(self._clock())
        return len(self._grants)

    async def admit(self) -> float:
        """Wait until a call may proceed, then record it.

        Returns:
            Seconds spent waiting (0.0 when admitted immediately).
        """
        async with self._lock:
            waited = 0.0
            now = self._clock()
            self._prune(now)

            # After a prune the oldest grant is always younger than the window,
            # so the wait below is strictly positive.
            while len(self._grants) >= self.max_requests:
                wait_time = self._grants[0] + self.window_seconds - now
                logger.debug(
                    "rate_limit_reached",
                    limiter=self.name,
                    wait_seconds=round(wait_time, 3),
                )
                await self._sleep(wait_time)
                waited += wait_time
                now = self._clock()
                self._prune(now)

            # Grant time is taken after any wait
            self._grants.append(now)
            return waited

    async def execute(
        self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Admit one call through the limiter and await it."""
        await self.admit()
        return await fn(*args, **kwargs)
