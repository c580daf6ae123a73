"""
Pipeline worker.

Drains the outbox (usage record anchoring, invoice settlement) and starts
the monthly invoice run once a new billing period is due.

Usage:
    python worker.py --once
    python worker.py --loop --sleep 5
"""

import argparse
import asyncio
import logging
from datetime import datetime
from typing import Optional

from config import ApplicationConfig
from src.app.use_cases.invoices import GenerateMonthlyInvoicesUseCase, billing_period
from src.app.use_cases.pipeline import DispatchPendingEventsUseCase
from src.depends import (
    blob_storage,
    build_event_handlers,
    create_tables,
    ledger_client,
    new_unit_of_work,
    payment_gateway,
)
from src.domain.base import utc_now

logger = logging.getLogger("worker")


class MonthlyInvoiceSchedule:
    """
    Fires the invoice run for the previous month whenever the current
    billing period differs from the last one handled by this process.
    The run itself is idempotent, so firing on startup is harmless.
    """

    def __init__(self, timezone: str):
        self.timezone = timezone
        self.last_period: Optional[str] = None

    def due(self, now: datetime) -> bool:
        return billing_period(now, self.timezone).period_string != self.last_period

    async def run(self, now: datetime) -> None:
        use_case = GenerateMonthlyInvoicesUseCase(
            new_unit_of_work,
            concurrency=ApplicationConfig.INVOICE_CONCURRENCY,
            timezone=self.timezone,
            max_attempts=ApplicationConfig.TRANSACTION_MAX_ATTEMPTS,
            retry_base_delay=ApplicationConfig.TRANSACTION_RETRY_BASE_DELAY,
        )
        result = await use_case.execute(now=now)
        if result.is_err():
            logger.error(f"Monthly invoice run failed: {result.error.code} {result.error.message}")
            return
        self.last_period = result.value.period_string


async def process_once(limit: int, schedule: Optional[MonthlyInvoiceSchedule]) -> int:
    if schedule is not None:
        now = utc_now()
        if schedule.due(now):
            await schedule.run(now)

    dispatcher = DispatchPendingEventsUseCase(
        new_unit_of_work(),
        build_event_handlers(new_unit_of_work, blob_storage, ledger_client, payment_gateway),
        batch_size=limit,
        max_attempts=ApplicationConfig.OUTBOX_MAX_ATTEMPTS,
    )
    result = await dispatcher.execute()
    return result.value.processed


async def run(args: argparse.Namespace) -> None:
    if args.init_db:
        await create_tables()
    schedule = None if args.no_schedule else MonthlyInvoiceSchedule(ApplicationConfig.BILLING_TIMEZONE)
    try:
        if args.loop:
            logger.info(f"Starting worker loop (sleep={args.sleep}s, batch={args.limit})")
            while True:
                try:
                    processed = await process_once(args.limit, schedule)
                    if processed:
                        logger.info(f"Processed {processed} event(s)")
                except Exception:
                    logger.exception("Worker iteration failed")
                await asyncio.sleep(args.sleep)
        else:
            processed = await process_once(args.limit, schedule)
            logger.info(f"Processed {processed} event(s)")
    finally:
        await ledger_client.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Seat billing pipeline worker")
    parser.add_argument("--once", action="store_true", help="Drain pending events once and exit")
    parser.add_argument("--loop", action="store_true", help="Run in continuous loop")
    parser.add_argument(
        "--limit",
        type=int,
        default=ApplicationConfig.OUTBOX_BATCH_SIZE,
        help="Batch size per iteration",
    )
    parser.add_argument(
        "--sleep",
        type=float,
        default=ApplicationConfig.WORKER_POLL_SECONDS,
        help="Seconds to sleep between loops (when --loop)",
    )
    parser.add_argument(
        "--no-schedule",
        action="store_true",
        help="Do not start monthly invoice runs from this worker",
    )
    parser.add_argument("--init-db", action="store_true", help="Create missing tables first")
    args = parser.parse_args()

    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
