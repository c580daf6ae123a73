"""
Provider call retry policy.

Transient provider faults (connection, rate limit, server errors) are
retried with exponential backoff; anything else propagates immediately.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from src.domain.errors import TransientProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0


async def with_provider_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    label: str = "provider call",
) -> T:
    attempt = 0
    delay = base_delay
    while True:
        attempt += 1
        try:
            return await operation()
        except TransientProviderError as exc:
            if attempt >= max_attempts:
                logger.error(f"{label} failed after {attempt} attempts: {exc.message}")
                raise
            logger.warning(
                f"{label} transient failure ({attempt}/{max_attempts}), "
                f"retrying in {delay:.1f}s: {exc.message}"
            )
            await asyncio.sleep(delay)
            delay *= 2
