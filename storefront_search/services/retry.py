"""Bounded exponential-backoff retry for transient candidate fetch failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_MARKERS = (
    "connection terminated",
    "connection reset",
    "server closed the connection",
    "timeout",
    "timed out",
    "too many clients",
    "remaining connection slots",
    "connection pool",
    "pool timeout",
    "temporarily unavailable",
    "service unavailable",
    "upstream error",
)


def is_transient_error(exc: BaseException) -> bool:
    message = f"{type(exc).__name__}: {exc}".lower()
    return any(marker in message for marker in TRANSIENT_MARKERS)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 0.2,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying transient failures with ``base_delay * 2**(n-1)`` waits."""
    attempts = max(1, max_attempts)
    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= attempts or not is_transient_error(exc):
                raise
            delay = base_delay * 2 ** (attempt - 1)
            logger.warning(
                "candidate_fetch_retry attempt=%s delay=%.3fs error=%s",
                attempt,
                delay,
                exc,
            )
            await sleep(delay)
            attempt += 1
