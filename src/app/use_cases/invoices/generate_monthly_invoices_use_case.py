"""
Generate Monthly Invoices Use Case

Monthly invoice run over all registered users, or a subset for manual
re-runs.
"""

import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from src.app.services.transaction import DEFAULT_BASE_DELAY, DEFAULT_MAX_ATTEMPTS
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.libs.result import Error, Result, Return

from .dtos import GenerateInvoicesResponse, ProcessUserResponse
from .period import DEFAULT_BILLING_TIMEZONE, billing_period, billing_period_for
from .process_user_sessions_use_case import ProcessUserSessionsUseCase

logger = logging.getLogger(__name__)


class GenerateMonthlyInvoicesUseCase:
    """
    Use case for the monthly invoice run.

    Business Rules:
    - Default period is the previous calendar month in the billing timezone
    - A full run is a no-op once any invoice exists for the period
    - Users are processed concurrently, each in its own unit of work
    - One user's failure never aborts the others; failures are counted
    """

    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        concurrency: int = 5,
        timezone: str = DEFAULT_BILLING_TIMEZONE,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
    ):
        self.uow_factory = uow_factory
        self.concurrency = max(1, concurrency)
        self.timezone = timezone
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def execute(
        self,
        now: Optional[datetime] = None,
        period_string: Optional[str] = None,
        user_ids: Optional[List[str]] = None,
    ) -> Result[GenerateInvoicesResponse]:
        """
        Execute monthly invoice run.

        Args:
            now: Reference time used to pick the previous month
            period_string: Explicit YYYY-MM period (overrides now)
            user_ids: Restrict the run to these users

        Returns:
            Result with GenerateInvoicesResponse counts, or Error
        """
        now = now or utc_now()
        try:
            if period_string:
                period = billing_period_for(period_string, self.timezone)
            else:
                period = billing_period(now, self.timezone)
        except ValueError as exc:
            return Return.err(Error("INVALID_PERIOD", "Invalid billing period", reason=str(exc)))

        response = GenerateInvoicesResponse(
            period_string=period.period_string,
            period_start=period.start,
            period_end=period.end,
        )

        uow = self.uow_factory()
        async with uow:
            if not user_ids and await uow.invoices.exists_for_period(period.period_string):
                logger.info(f"Invoices for {period.period_string} already generated, skipping run")
                response.already_generated = True
                return Return.ok(response)

            users = await uow.users.list_billable(user_ids)
            target_ids = [user.id for user in users]

        logger.info(
            f"Generating invoices for {period.period_string}: {len(target_ids)} user(s)"
        )

        semaphore = asyncio.Semaphore(self.concurrency)

        async def process(user_id: str) -> Tuple[str, Result[ProcessUserResponse]]:
            async with semaphore:
                try:
                    use_case = ProcessUserSessionsUseCase(
                        self.uow_factory(),
                        max_attempts=self.max_attempts,
                        retry_base_delay=self.retry_base_delay,
                    )
                    return user_id, await use_case.execute(user_id, period, now)
                except Exception as exc:
                    logger.exception(f"Invoice processing crashed for user {user_id}")
                    return user_id, Return.err(Error("INTERNAL_ERROR", str(exc)))

        outcomes = await asyncio.gather(*(process(user_id) for user_id in target_ids))

        for user_id, result in outcomes:
            if result.is_err():
                logger.error(
                    f"Invoice for user {user_id} in {period.period_string} failed: "
                    f"{result.error.code} {result.error.message}"
                )
                response.failed += 1
                response.failed_user_ids.append(user_id)
            elif result.value.created:
                response.created += 1
                response.invoice_ids.append(result.value.invoice_id)
            else:
                response.skipped += 1

        logger.info(
            f"Invoice run {period.period_string} done: created={response.created}, "
            f"skipped={response.skipped}, failed={response.failed}"
        )
        return Return.ok(response)
