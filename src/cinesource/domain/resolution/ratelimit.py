"""Per-source request budgets, a global in-flight cap and the rate-limit retry."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

from cinesource.domain.ports.sources import SourceRateLimitedError, SourceUnavailableError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

log = logging.getLogger(__name__)


class SourceRateLimiter:
    """Shared by every entity resolved concurrently.

    A ``SourceRateLimitedError`` is retried exactly once after
    ``max(retry_after, backoff_seconds)`` capped at ``max_backoff_seconds``. A
    second rate limit propagates to the caller.
    """

    def __init__(
        self,
        *,
        max_in_flight: int = 8,
        backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 30.0,
        default_timeout: float | None = 10.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        if max_in_flight < 1:
            raise ValueError("max_in_flight must be at least 1")
        self._in_flight = asyncio.Semaphore(max_in_flight)
        self._limiters: dict[str, AsyncLimiter] = {}
        self._timeouts: dict[str, float | None] = {}
        self._backoff = backoff_seconds
        self._max_backoff = max_backoff_seconds
        self._default_timeout = default_timeout
        self._sleep = sleep

    def register(
        self,
        source_id: str,
        *,
        max_calls: int | None = None,
        per_seconds: float = 1.0,
        timeout_seconds: float | None = None,
    ) -> None:
        if max_calls is not None:
            self._limiters[source_id] = AsyncLimiter(max_calls, per_seconds)
        if timeout_seconds is not None:
            self._timeouts[source_id] = timeout_seconds

    def backoff_for(self, error: SourceRateLimitedError) -> float:
        delay = max(error.retry_after or 0.0, self._backoff)
        return min(delay, self._max_backoff)

    async def call[T](self, source_id: str, operation: Callable[[], Awaitable[T]]) -> T:
        try:
            return await self._attempt(source_id, operation)
        except SourceRateLimitedError as exc:
            delay = self.backoff_for(exc)
            log.info("%s rate limited; retrying once in %.2fs", source_id, delay)
            await self._sleep(delay)
        return await self._attempt(source_id, operation)

    async def _attempt[T](self, source_id: str, operation: Callable[[], Awaitable[T]]) -> T:
        timeout = self._timeouts.get(source_id, self._default_timeout)
        async with self._in_flight:
            limiter = self._limiters.get(source_id)
            if limiter is not None:
                await limiter.acquire()
            try:
                async with asyncio.timeout(timeout):
                    return await operation()
            except TimeoutError as exc:
                raise SourceUnavailableError(source_id, f"timed out after {timeout}s") from exc
