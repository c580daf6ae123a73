"""
Optimistic transaction retry.

Wraps a read-then-conditional-write operation in a unit of work and reruns
it with exponential backoff when a conditional write loses a race.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import WriteConflictError
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.05


async def read_modify_write(
    uow: UnitOfWork,
    operation: Callable[[], Awaitable[Result]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
) -> Result:
    """
    Run operation inside a fresh transaction and commit if it returns ok.

    operation reads through uow repositories and raises WriteConflictError
    when a conditional write matched no row. The whole read/write is then
    rolled back and retried, up to max_attempts.

    Returns:
        The operation's Result, or TRANSACTION_CONFLICT when every attempt
        lost its race
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            async with uow:
                result = await operation()
                if result.is_ok():
                    await uow.commit()
                return result
        except WriteConflictError as exc:
            if attempt >= max_attempts:
                logger.warning(f"Write conflict not resolved after {attempt} attempts: {exc}")
                return Return.err(
                    Error(
                        "TRANSACTION_CONFLICT",
                        "Concurrent update, please retry",
                        reason=str(exc),
                    )
                )
            delay = base_delay * (2 ** (attempt - 1))
            logger.info(f"Write conflict on attempt {attempt}, retrying in {delay:.3f}s")
            await asyncio.sleep(delay)
