"""
Invoice Entity

One user's aggregated charge for one calendar month.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import InvoiceStatus


def invoice_id_for(period_string: str, user_id: str) -> str:
    """Deterministic invoice id so regeneration stays idempotent"""
    return f"inv_{period_string}_{user_id}"


class Invoice(SQLModel, table=True):
    """
    Invoice entity - monthly charge for one user.

    Business Rules:
    - One invoice per (user_id, period_string); id is derived from both
    - final_amount = max(0, subtotal_amount - discount_amount)
    - status pending_settlement -> settling -> paid | failed
    - Only the payment webhook sets status = paid
    """

    __tablename__ = "invoices"

    id: str = Field(primary_key=True, max_length=200)
    user_id: str = Field(foreign_key="users.id", nullable=False, max_length=128)
    user_email: str = Field(default="", max_length=255)

    period_string: str = Field(max_length=7)  # YYYY-MM
    period_start: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    period_end: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))

    # Line items and applied coupons (denormalized snapshots)
    sessions: list = Field(default_factory=list, sa_column=Column(JSON))
    applied_coupons: list = Field(default_factory=list, sa_column=Column(JSON))

    subtotal_amount: int = Field(default=0)
    discount_amount: int = Field(default=0)
    final_amount: int = Field(default=0)

    status: InvoiceStatus = Field(default=InvoiceStatus.pending_settlement)
    external_ref: Optional[str] = Field(default=None, max_length=255)
    external_url: Optional[str] = Field(default=None)
    error_message: Optional[str] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    paid_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (
        Index("uq_invoice_user_period", "user_id", "period_string", unique=True),
        Index("idx_invoice_period", "period_string"),
        Index("idx_invoice_external_ref", "external_ref"),
    )
