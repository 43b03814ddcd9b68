"""Bounded retry with per-attempt timeout for persistence calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from islanders.core.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    op: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    base_delay: float = 0.2,
    timeout: float = 3.0,
    label: str = "store call",
) -> T:
    """
    Run `op` with a timeout per attempt, retrying with exponential backoff.

    Args:
        op: Zero-arg coroutine factory (called once per attempt).
        attempts: Total attempts, at least 1.
        base_delay: Delay before the 2nd attempt; doubles each retry.
        timeout: Seconds allowed per attempt.
        label: Used in log lines and the final error.

    Raises:
        PersistenceError: when every attempt failed or timed out.
    """
    attempts = max(1, attempts)
    last_exc: BaseException | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.wait_for(op(), timeout=timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            last_exc = e
            logger.warning("%s failed (attempt %s/%s): %r", label, attempt, attempts, e)
            if attempt < attempts:
                await asyncio.sleep(base_delay * (2 ** (attempt - 1)))

    raise PersistenceError(f"{label} failed after {attempts} attempts: {last_exc!r}") from last_exc
