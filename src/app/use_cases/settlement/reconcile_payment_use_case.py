"""
Reconcile Payment Use Case

Applies verified payment provider webhook events to invoices.
"""

import logging
from datetime import datetime
from typing import Optional

from src.app.services.payment_gateway import (
    INVOICE_PAID,
    INVOICE_PAYMENT_FAILED,
    PaymentWebhookEvent,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import InvoiceStatus
from src.libs.result import Error, Result, Return

from .dtos import ReconcileResponse

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_MESSAGE = "Payment failed"


class ReconcilePaymentUseCase:
    """
    Business Rules:
    - invoice.paid is the only path that sets an invoice paid
    - A paid invoice is never moved back to failed
    - Redelivered events are no-ops
    - Events without an invoiceId in metadata are acknowledged and ignored
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, event: PaymentWebhookEvent, now: Optional[datetime] = None
    ) -> Result[ReconcileResponse]:
        response = ReconcileResponse(event_id=event.event_id, event_type=event.event_type)

        if event.event_type not in (INVOICE_PAID, INVOICE_PAYMENT_FAILED):
            response.ignored = True
            return Return.ok(response)

        invoice_id = (event.metadata or {}).get("invoiceId")
        if not invoice_id:
            logger.warning(f"Payment event {event.event_id} carries no invoiceId, ignoring")
            response.ignored = True
            return Return.ok(response)

        response.invoice_id = invoice_id
        now = now or utc_now()

        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            if not invoice:
                return Return.err(
                    Error("INVOICE_NOT_FOUND", "Invoice not found", reason=invoice_id)
                )

            if invoice.status == InvoiceStatus.paid:
                response.status = invoice.status.value
                return Return.ok(response)

            if event.event_type == INVOICE_PAID:
                invoice.status = InvoiceStatus.paid
                invoice.paid_at = now
                invoice.error_message = None
            else:
                invoice.status = InvoiceStatus.failed
                invoice.error_message = event.failure_message or DEFAULT_FAILURE_MESSAGE

            if not invoice.external_ref and event.external_invoice_id:
                invoice.external_ref = event.external_invoice_id
            invoice.updated_at = now

            await self.uow.invoices.update(invoice)
            await self.uow.commit()

        logger.info(f"Invoice {invoice_id} -> {invoice.status.value} ({event.event_type})")
        response.status = invoice.status.value
        response.changed = True
        return Return.ok(response)
