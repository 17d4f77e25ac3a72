"""Linear back-off for rate-limited / transient Figma API calls.

Wait before retry n (1-based) is min(n * step, cap): 10s, 20s, 30s, ... 60s.
A budget of `max_retries` allows at most max_retries + 1 calls; once it is
spent the last error is re-raised.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from ..settings import RATE_LIMIT_BACKOFF_CAP, RATE_LIMIT_BACKOFF_STEP
from .figma_client import FigmaClientError

logger = logging.getLogger("design_pipeline.integrations.retry")

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


def backoff_delay(
    attempt: int,
    step: float = RATE_LIMIT_BACKOFF_STEP,
    cap: float = RATE_LIMIT_BACKOFF_CAP,
) -> float:
    """Delay in seconds before retry number `attempt` (1-based)."""
    return min(attempt * step, cap)


async def call_with_backoff(
    call: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    step: float = RATE_LIMIT_BACKOFF_STEP,
    cap: float = RATE_LIMIT_BACKOFF_CAP,
    sleep: Optional[Sleep] = None,
    label: str = "figma",
) -> T:
    """Run `call`, retrying retryable FigmaClientErrors with linear back-off.

    Non-retryable errors propagate immediately. Retries for one logical
    request are sequential; independent requests back off independently.
    """
    sleep = sleep or asyncio.sleep
    attempt = 0
    while True:
        try:
            return await call()
        except FigmaClientError as e:
            if not e.retryable or attempt >= max_retries:
                if e.retryable:
                    logger.error(f"{label}: giving up after {attempt + 1} attempts: {e}")
                raise
            attempt += 1
            delay = backoff_delay(attempt, step, cap)
            logger.warning(
                f"{label}: {'rate limited' if e.rate_limited else 'transient error'}, "
                f"waiting {delay:.0f}s (retry {attempt}/{max_retries}): {e}"
            )
            await sleep(delay)
