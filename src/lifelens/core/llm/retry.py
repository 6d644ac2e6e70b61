"""Retry with exponential backoff and jitter for transient LLM failures."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_TRANSIENT_IN_MESSAGE = re.compile(r"\b(429|500|502|503|504)\b")


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to try one model, and how long to wait in between."""

    attempts: int = 3
    base_ms: float = 600.0
    jitter_ms: float = 150.0

    def delay_seconds(self, attempt: int, jitter: float) -> float:
        """Backoff before retry number ``attempt`` (0-based); ``jitter`` in [0, 1)."""
        return (self.base_ms * (2 ** attempt) + jitter * self.jitter_ms) / 1000


def is_transient(exc: BaseException) -> bool:
    """Rate limits and 5xx gateway errors are worth retrying; nothing else is."""
    status = getattr(exc, "status_code", None)
    if status is None:
        status = getattr(exc, "status", None)
    if isinstance(status, int):
        return status in TRANSIENT_STATUS_CODES
    return bool(_TRANSIENT_IN_MESSAGE.search(str(exc)))


async def with_retries(
    fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    jitter: Callable[[], float] = random.random,
) -> T:
    """Await ``fn()`` up to ``policy.attempts`` times.

    Stops at the first non-transient error. Re-raises the last error when
    attempts run out.
    """
    if policy.attempts < 1:
        raise ValueError("RetryPolicy.attempts must be >= 1")

    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:
            if not is_transient(exc) or attempt == policy.attempts - 1:
                raise
            delay = policy.delay_seconds(attempt, jitter())
            logger.debug(
                "Transient LLM error (attempt %d/%d), retrying in %.2fs: %s",
                attempt + 1,
                policy.attempts,
                delay,
                exc,
            )
            await sleep(delay)
        attempt += 1
