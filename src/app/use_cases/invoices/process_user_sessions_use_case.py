"""
Process User Sessions Use Case

Builds one user's invoice for one billing period.
"""

import logging
from datetime import datetime
from typing import Optional

from src.app.services.transaction import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    read_modify_write,
)
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.coupons import CouponLedger
from src.domain.base import utc_now
from src.domain.entities import (
    Invoice,
    InvoiceStatus,
    OutboxEvent,
    OutboxEventType,
    invoice_id_for,
)
from src.domain.usage_record import format_timestamp
from src.libs.result import Error, Result, Return

from .dtos import InvoiceResponse, ProcessUserResponse
from .period import BillingPeriod

logger = logging.getLogger(__name__)


class ProcessUserSessionsUseCase:
    """
    Use case for aggregating one user's ended sessions into an invoice.

    Business Rules:
    - Invoice id is deterministic; an existing invoice means the user is done
    - Only ended sessions with end_time inside the period are billed
    - Line amount = hour_blocks * the seat's hourly_rate
    - final = max(0, subtotal - coupon discount)
    - Invoice, coupon consumption and the invoice_created outbox event
      commit together or not at all
    """

    def __init__(
        self,
        uow: UnitOfWork,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
    ):
        self.uow = uow
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def execute(
        self, user_id: str, period: BillingPeriod, now: Optional[datetime] = None
    ) -> Result[ProcessUserResponse]:
        now = now or utc_now()
        return await read_modify_write(
            self.uow,
            lambda: self._process(user_id, period, now),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
        )

    async def _process(
        self, user_id: str, period: BillingPeriod, now: datetime
    ) -> Result[ProcessUserResponse]:
        invoice_id = invoice_id_for(period.period_string, user_id)

        if await self.uow.invoices.get_by_id(invoice_id):
            return Return.ok(
                ProcessUserResponse(
                    user_id=user_id, invoice_id=invoice_id, created=False, reason="exists"
                )
            )

        user = await self.uow.users.get_by_id(user_id)
        if not user:
            return Return.err(Error("USER_NOT_FOUND", "User not found", reason=user_id))

        sessions = await self.uow.sessions.get_completed_in_period(
            user_id, period.start, period.end
        )
        if not sessions:
            return Return.ok(
                ProcessUserResponse(
                    user_id=user_id, invoice_id=invoice_id, created=False, reason="no_sessions"
                )
            )

        seat_ids = sorted({session.seat_id for session in sessions})
        seats = {seat.id: seat for seat in await self.uow.seats.get_by_ids(seat_ids)}

        line_items = []
        subtotal = 0
        for session in sessions:
            seat = seats.get(session.seat_id)
            if not seat:
                return Return.err(
                    Error(
                        "SEAT_NOT_FOUND",
                        "Seat of a billed session no longer exists",
                        reason=f"session={session.id}, seat={session.seat_id}",
                    )
                )

            amount = session.hour_blocks * seat.hourly_rate
            subtotal += amount
            line_items.append(
                {
                    "session_id": session.id,
                    "start_time": format_timestamp(session.start_time),
                    "end_time": format_timestamp(session.end_time),
                    "hour_blocks": session.hour_blocks,
                    "hourly_rate": seat.hourly_rate,
                    "amount": amount,
                    "seat_id": seat.id,
                    "seat_name": seat.name,
                    "branch_name": seat.branch_name,
                    "anchor_tx_id": session.anchor_tx_id,
                }
            )

        applied_coupons, discount = await CouponLedger(self.uow).apply_discounts(
            user_id, subtotal, period.period_string, now
        )

        invoice = Invoice(
            id=invoice_id,
            user_id=user_id,
            user_email=user.email,
            period_string=period.period_string,
            period_start=period.start,
            period_end=period.end,
            sessions=line_items,
            applied_coupons=applied_coupons,
            subtotal_amount=subtotal,
            discount_amount=discount,
            final_amount=max(0, subtotal - discount),
            status=InvoiceStatus.pending_settlement,
            created_at=now,
            updated_at=now,
        )
        await self.uow.invoices.create(invoice)

        await self.uow.outbox_events.create(
            OutboxEvent(
                event_type=OutboxEventType.invoice_created,
                aggregate_id=invoice.id,
                payload={"userId": user_id, "periodString": period.period_string},
                created_at=now,
            )
        )

        logger.info(
            f"Invoice {invoice.id} created: {len(line_items)} session(s), "
            f"subtotal={subtotal}, discount={discount}, final={invoice.final_amount}"
        )
        return Return.ok(
            ProcessUserResponse(
                user_id=user_id,
                invoice_id=invoice.id,
                created=True,
                invoice=InvoiceResponse.from_entity(invoice),
            )
        )
