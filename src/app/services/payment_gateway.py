from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

INVOICE_PAID = "invoice.paid"
INVOICE_PAYMENT_FAILED = "invoice.payment_failed"

# ExternalInvoice.status once the provider holds the invoice as settled
PROVIDER_PAID_STATUS = "paid"


@dataclass(frozen=True)
class ExternalInvoice:
    """Invoice as known by the payment provider"""

    id: str
    status: Optional[str] = None
    hosted_url: Optional[str] = None


@dataclass(frozen=True)
class PaymentWebhookEvent:
    """Verified, normalized payment provider event"""

    event_id: str
    event_type: str
    external_invoice_id: Optional[str]
    metadata: Dict[str, str] = field(default_factory=dict)
    failure_message: Optional[str] = None


class IPaymentGateway(ABC):
    """
    Payment ledger: draft -> line item -> finalize -> charge on file.

    Implementations raise TransientProviderError for retryable faults and
    PermanentProviderError for everything else (src.domain.errors).
    """

    @abstractmethod
    async def create_draft_invoice(
        self,
        customer_ref: str,
        payment_method_ref: str,
        description: str,
        metadata: Dict[str, str],
        idempotency_key: str,
    ) -> ExternalInvoice:
        pass

    @abstractmethod
    async def add_line_item(
        self,
        customer_ref: str,
        external_invoice_id: str,
        amount: int,
        description: str,
        metadata: Dict[str, str],
    ) -> None:
        pass

    @abstractmethod
    async def finalize_invoice(self, external_invoice_id: str) -> ExternalInvoice:
        pass

    @abstractmethod
    async def pay_invoice(self, external_invoice_id: str) -> ExternalInvoice:
        pass

    @abstractmethod
    def parse_webhook(
        self, headers: Mapping[str, str], body: bytes
    ) -> PaymentWebhookEvent:
        """Verify the signature and normalize the event; raises WebhookVerificationError"""
        pass
