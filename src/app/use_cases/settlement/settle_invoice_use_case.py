"""
Settle Invoice Use Case

Pushes a pending invoice to the payment provider and charges the user's
payment method on file.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from src.app.services.payment_gateway import PROVIDER_PAID_STATUS, IPaymentGateway
from src.app.services.retry import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    with_provider_retry,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import InvoiceStatus
from src.domain.errors import ProviderError, TransientProviderError
from src.libs.result import Error, Result, Return

from .dtos import SettlementResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SettleInvoiceUseCase:
    """
    Use case for settling an invoice with the payment provider.

    Business Rules:
    - Only invoices in pending_settlement are settled; others are skipped
    - The user must have a customer and a default payment method
    - Draft -> settling -> one aggregated line item -> finalize -> pay
    - The pay call is skipped when finalization already settled the invoice
      (nothing due, e.g. coupons covered the charge)
    - Transient provider faults are retried with backoff; any final error
      marks the invoice failed with the provider's message
    - paid is set only by the payment webhook
    """

    def __init__(
        self,
        uow: UnitOfWork,
        gateway: IPaymentGateway,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
    ):
        self.uow = uow
        self.gateway = gateway
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def execute(self, invoice_id: str) -> Result[SettlementResponse]:
        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            if not invoice:
                return Return.err(Error("INVOICE_NOT_FOUND", "Invoice not found"))

            if invoice.status != InvoiceStatus.pending_settlement:
                logger.info(f"Invoice {invoice_id} is {invoice.status.value}, skipping settlement")
                return Return.ok(
                    SettlementResponse(
                        invoice_id=invoice.id,
                        status=invoice.status.value,
                        external_ref=invoice.external_ref,
                        external_url=invoice.external_url,
                        skipped=True,
                    )
                )

            user_id = invoice.user_id
            user = await self.uow.users.get_by_id(user_id)
            customer_ref = user.payment_customer_ref if user else None
            payment_method_ref = user.default_payment_method_ref if user else None

            period_string = invoice.period_string
            final_amount = invoice.final_amount
            total_hours = sum(item.get("hour_blocks", 0) for item in invoice.sessions or [])

        if not customer_ref or not payment_method_ref:
            message = "User has no payment customer or default payment method"
            await self._mark_failed(invoice_id, message)
            return Return.err(
                Error("PAYMENT_SETUP_INCOMPLETE", message, reason=f"user={user_id}")
            )

        metadata = {"invoiceId": invoice_id, "periodString": period_string}
        description = f"Seat usage {period_string}"

        try:
            draft = await self._call(
                "create draft invoice",
                invoice_id,
                lambda: self.gateway.create_draft_invoice(
                    customer_ref,
                    payment_method_ref,
                    description,
                    metadata,
                    idempotency_key=invoice_id,
                ),
            )
        except ProviderError as exc:
            return await self._fail_with_provider_error(invoice_id, exc)

        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            invoice.status = InvoiceStatus.settling
            invoice.external_ref = draft.id
            invoice.updated_at = utc_now()
            await self.uow.invoices.update(invoice)
            await self.uow.commit()

        try:
            await self._call(
                "add line item",
                invoice_id,
                lambda: self.gateway.add_line_item(
                    customer_ref,
                    draft.id,
                    final_amount,
                    f"Usage {period_string}: {total_hours} hour(s)",
                    metadata,
                ),
            )
            finalized = await self._call(
                "finalize invoice", invoice_id, lambda: self.gateway.finalize_invoice(draft.id)
            )
            if finalized.status == PROVIDER_PAID_STATUS:
                # zero-amount invoices are settled by the provider on finalize
                logger.info(f"Invoice {invoice_id} settled by the provider on finalization")
                paid = finalized
            else:
                paid = await self._call(
                    "pay invoice", invoice_id, lambda: self.gateway.pay_invoice(draft.id)
                )
        except ProviderError as exc:
            return await self._fail_with_provider_error(invoice_id, exc)

        external_url = paid.hosted_url or finalized.hosted_url
        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            invoice.external_url = external_url
            invoice.updated_at = utc_now()
            await self.uow.invoices.update(invoice)
            await self.uow.commit()

        logger.info(
            f"Invoice {invoice_id} submitted for payment: external={draft.id}, "
            f"amount={final_amount}, provider status={paid.status}"
        )
        return Return.ok(
            SettlementResponse(
                invoice_id=invoice_id,
                status=InvoiceStatus.settling.value,
                external_ref=draft.id,
                external_url=external_url,
            )
        )

    async def _call(
        self, label: str, invoice_id: str, operation: Callable[[], Awaitable[T]]
    ) -> T:
        return await with_provider_retry(
            operation,
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            label=f"{label} for {invoice_id}",
        )

    async def _fail_with_provider_error(
        self, invoice_id: str, exc: ProviderError
    ) -> Result[SettlementResponse]:
        await self._mark_failed(invoice_id, exc.message)
        code = "PROVIDER_UNAVAILABLE" if isinstance(exc, TransientProviderError) else "PROVIDER_REJECTED"
        return Return.err(Error(code, "Payment provider error", reason=exc.message))

    async def _mark_failed(self, invoice_id: str, message: str) -> None:
        logger.error(f"Settlement of invoice {invoice_id} failed: {message}")
        async with self.uow:
            invoice = await self.uow.invoices.get_by_id(invoice_id)
            if invoice.status == InvoiceStatus.paid:
                return
            invoice.status = InvoiceStatus.failed
            invoice.error_message = message
            invoice.updated_at = utc_now()
            await self.uow.invoices.update(invoice)
            await self.uow.commit()
