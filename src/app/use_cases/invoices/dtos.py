"""
Invoice Aggregator DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.domain.entities import Invoice


class InvoiceResponse(BaseModel):
    invoice_id: str
    user_id: str
    period_string: str
    session_count: int
    subtotal_amount: int
    discount_amount: int
    final_amount: int
    status: str

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            invoice_id=invoice.id,
            user_id=invoice.user_id,
            period_string=invoice.period_string,
            session_count=len(invoice.sessions or []),
            subtotal_amount=invoice.subtotal_amount,
            discount_amount=invoice.discount_amount,
            final_amount=invoice.final_amount,
            status=invoice.status.value,
        )


class ProcessUserResponse(BaseModel):
    """Outcome for one user; invoice is None when the user was skipped"""

    user_id: str
    invoice_id: str
    created: bool
    reason: Optional[str] = None
    invoice: Optional[InvoiceResponse] = None


class GenerateInvoicesResponse(BaseModel):
    period_string: str
    period_start: datetime
    period_end: datetime
    already_generated: bool = False
    created: int = 0
    skipped: int = 0
    failed: int = 0
    invoice_ids: List[str] = Field(default_factory=list)
    failed_user_ids: List[str] = Field(default_factory=list)
