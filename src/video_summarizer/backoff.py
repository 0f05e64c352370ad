"""Exponential backoff policy shared by AI calls and page navigation."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class BackoffPolicy:
    """Retry an async call with a delay that doubles on every attempt.

    The delay before retry ``n`` (1-based) is ``base_delay * 2 ** (n - 1)``,
    capped at ``max_delay``. At most ``max_retries`` retries are made after
    the first call; the last error is re-raised once the ceiling is hit.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 2.0,
        max_delay: float = 120.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def delay_for(self, retry_number: int) -> float:
        """Delay in seconds before the given 1-based retry."""
        return min(self.base_delay * (2 ** (retry_number - 1)), self.max_delay)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retry_scheduled",
            operation=getattr(retry_state.fn, "__qualname__", "call"),
            attempt=retry_state.attempt_number,
            max_retries=self.max_retries,
            delay_seconds=round(retry_state.upcoming_sleep, 2),
            error_type=type(error).__name__ if error else None,
            error=str(error) if error else None,
        )

    async def run(
        self,
        fn: Callable[..., Awaitable[T]],
        *args: Any,
        retry_on: tuple[type[BaseException], ...],
        **kwargs: Any,
    ) -> T:
        """Call ``fn`` and retry it on the given exception types.

        Args:
            fn: Coroutine function to call.
            *args: Positional arguments for ``fn``.
            retry_on: Exception types that trigger a retry. Anything else
                propagates immediately.
            **kwargs: Keyword arguments for ``fn``.

        Returns:
            The result of the first successful call.

        Raises:
            The last ``retry_on`` error once the retry ceiling is exceeded, or
            any other error immediately.
        """
        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.max_retries + 1),
            wait=lambda state: self.delay_for(state.attempt_number),
            retry=retry_if_exception_type(retry_on),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(fn, *args, **kwargs)
