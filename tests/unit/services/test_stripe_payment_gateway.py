"""
Unit tests for StripePaymentGateway

Covers the mapping of Stripe SDK errors to transient / permanent provider
errors and webhook signature verification. No network access: SDK calls
are replaced with local callables, webhooks are signed locally.
"""

import hashlib
import hmac
import json
import time

import pytest
import stripe

from src.adapter.services.stripe_payment_gateway import StripePaymentGateway
from src.domain.errors import (
    PermanentProviderError,
    TransientProviderError,
    WebhookVerificationError,
)

WEBHOOK_SECRET = "whsec_test_secret"


def _gateway() -> StripePaymentGateway:
    return StripePaymentGateway(secret_key="sk_test_123", webhook_secret=WEBHOOK_SECRET)


def _raising(error):
    def call(*args, **kwargs):
        raise error

    return call


def _signed(payload: str, secret: str = WEBHOOK_SECRET) -> dict:
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"), f"{timestamp}.{payload}".encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return {"stripe-signature": f"t={timestamp},v1={signature}"}


def _invoice_event(event_type: str, **invoice_fields) -> str:
    invoice = {"id": "in_123", "object": "invoice", "metadata": {"invoiceId": "inv_2024-05_user-1"}}
    invoice.update(invoice_fields)
    return json.dumps(
        {"id": "evt_1", "object": "event", "type": event_type, "data": {"object": invoice}}
    )


@pytest.mark.asyncio
async def test_request_passes_api_key_and_returns_result():
    calls = []

    def create(*args, **kwargs):
        calls.append((args, kwargs))
        return {"id": "in_123", "status": "draft"}

    result = await _gateway()._request(create, "in_123", auto_advance=False)

    assert result == {"id": "in_123", "status": "draft"}
    assert calls == [(("in_123",), {"api_key": "sk_test_123", "auto_advance": False})]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        stripe.RateLimitError("Too many requests"),
        stripe.APIConnectionError("Network is unreachable"),
        stripe.APIError("Internal server error"),
    ],
)
async def test_retryable_stripe_errors_are_transient(error):
    with pytest.raises(TransientProviderError):
        await _gateway()._request(_raising(error))


@pytest.mark.asyncio
async def test_declined_card_is_permanent():
    error = stripe.CardError("Your card was declined.", None, "card_declined")

    with pytest.raises(PermanentProviderError) as exc_info:
        await _gateway()._request(_raising(error))

    assert exc_info.value.message == "Your card was declined."
    assert exc_info.value.code == "card_declined"


@pytest.mark.asyncio
async def test_invalid_request_is_permanent():
    error = stripe.InvalidRequestError("Invoice is already paid", None)

    with pytest.raises(PermanentProviderError, match="already paid"):
        await _gateway()._request(_raising(error))


def test_parse_webhook_paid_event():
    payload = _invoice_event("invoice.paid", status="paid")

    event = _gateway().parse_webhook(_signed(payload), payload.encode("utf-8"))

    assert event.event_id == "evt_1"
    assert event.event_type == "invoice.paid"
    assert event.external_invoice_id == "in_123"
    assert event.metadata == {"invoiceId": "inv_2024-05_user-1"}
    assert event.failure_message is None


def test_parse_webhook_reads_payment_error():
    payload = _invoice_event(
        "invoice.payment_failed",
        payment_intent={
            "id": "pi_1",
            "object": "payment_intent",
            "last_payment_error": {"code": "card_declined", "message": "Your card has insufficient funds."},
        },
    )

    event = _gateway().parse_webhook(_signed(payload), payload.encode("utf-8"))

    assert event.failure_message == "Your card has insufficient funds."


def test_parse_webhook_falls_back_to_finalization_error():
    payload = _invoice_event(
        "invoice.payment_failed",
        payment_intent="pi_1",
        last_finalization_error={"message": "Customer has no default payment method."},
    )

    event = _gateway().parse_webhook(_signed(payload), payload.encode("utf-8"))

    assert event.failure_message == "Customer has no default payment method."


def test_parse_webhook_rejects_bad_signature():
    payload = _invoice_event("invoice.paid")

    with pytest.raises(WebhookVerificationError):
        _gateway().parse_webhook(_signed(payload, secret="whsec_other"), payload.encode("utf-8"))

    with pytest.raises(WebhookVerificationError, match="Missing"):
        _gateway().parse_webhook({}, payload.encode("utf-8"))
