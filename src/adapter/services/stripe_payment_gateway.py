"""
Stripe payment gateway.

The stripe SDK is synchronous; calls run in a worker thread and Stripe
errors are translated into transient / permanent provider errors.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional

import stripe

from src.app.services.payment_gateway import (
    ExternalInvoice,
    IPaymentGateway,
    PaymentWebhookEvent,
)
from src.domain.errors import (
    PermanentProviderError,
    TransientProviderError,
    WebhookVerificationError,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (stripe.APIConnectionError, stripe.RateLimitError, stripe.APIError)


def _failure_message(invoice: Any) -> Optional[str]:
    """
    Why a charge failed: the payment intent's last payment error when the
    event carries it expanded, else the finalization error.
    """
    payment_intent = invoice.get("payment_intent")
    if hasattr(payment_intent, "get"):
        payment_error = payment_intent.get("last_payment_error") or {}
        if payment_error.get("message"):
            return payment_error["message"]
    finalization_error = invoice.get("last_finalization_error") or {}
    return finalization_error.get("message")


def _to_external(invoice: Any) -> ExternalInvoice:
    return ExternalInvoice(
        id=invoice["id"],
        status=invoice.get("status"),
        hosted_url=invoice.get("hosted_invoice_url"),
    )


class StripePaymentGateway(IPaymentGateway):
    def __init__(self, secret_key: str, webhook_secret: str, currency: str = "jpy"):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    async def _request(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        try:
            return await asyncio.to_thread(
                partial(func, *args, api_key=self.secret_key, **kwargs)
            )
        except TRANSIENT_ERRORS as exc:
            raise TransientProviderError(
                exc.user_message or str(exc), code=exc.code
            ) from exc
        except stripe.StripeError as exc:
            raise PermanentProviderError(
                exc.user_message or str(exc), code=exc.code
            ) from exc

    async def create_draft_invoice(
        self,
        customer_ref: str,
        payment_method_ref: str,
        description: str,
        metadata: Dict[str, str],
        idempotency_key: str,
    ) -> ExternalInvoice:
        invoice = await self._request(
            stripe.Invoice.create,
            customer=customer_ref,
            default_payment_method=payment_method_ref,
            collection_method="charge_automatically",
            auto_advance=False,
            currency=self.currency,
            description=description,
            metadata=metadata,
            pending_invoice_items_behavior="exclude",
            idempotency_key=f"draft-{idempotency_key}",
        )
        logger.info(f"Stripe draft invoice {invoice['id']} created for {customer_ref}")
        return _to_external(invoice)

    async def add_line_item(
        self,
        customer_ref: str,
        external_invoice_id: str,
        amount: int,
        description: str,
        metadata: Dict[str, str],
    ) -> None:
        await self._request(
            stripe.InvoiceItem.create,
            customer=customer_ref,
            invoice=external_invoice_id,
            amount=amount,
            currency=self.currency,
            description=description,
            metadata=metadata,
            idempotency_key=f"item-{external_invoice_id}",
        )

    async def finalize_invoice(self, external_invoice_id: str) -> ExternalInvoice:
        invoice = await self._request(stripe.Invoice.finalize_invoice, external_invoice_id)
        return _to_external(invoice)

    async def pay_invoice(self, external_invoice_id: str) -> ExternalInvoice:
        invoice = await self._request(stripe.Invoice.pay, external_invoice_id)
        return _to_external(invoice)

    def parse_webhook(
        self, headers: Mapping[str, str], body: bytes
    ) -> PaymentWebhookEvent:
        """Verify Stripe webhook signature and normalize the event."""
        if not self.webhook_secret:
            raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET not configured")

        sig_header = headers.get("stripe-signature") or headers.get("Stripe-Signature")
        if not sig_header:
            raise WebhookVerificationError("Missing stripe-signature header")

        try:
            event = stripe.Webhook.construct_event(body, sig_header, self.webhook_secret)
        except ValueError as e:
            raise WebhookVerificationError(f"Invalid payload: {e}")
        except stripe.SignatureVerificationError as e:
            raise WebhookVerificationError(f"Invalid signature: {e}")

        data = event["data"]["object"]
        metadata = data.get("metadata") or {}
        failure_message = _failure_message(data)

        return PaymentWebhookEvent(
            event_id=event["id"],
            event_type=event["type"],
            external_invoice_id=data.get("id"),
            metadata={key: str(value) for key, value in dict(metadata).items()},
            failure_message=failure_message,
        )
