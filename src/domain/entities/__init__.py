"""
Seat Billing Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AnchorStatus,
    CouponStatus,
    InvoiceStatus,
    OutboxEventStatus,
    OutboxEventType,
    SeatStatus,
)

# Export all entities
from .user import User
from .seat import Seat
from .session import Session
from .proof import Proof
from .coupon import Coupon
from .invoice import Invoice, invoice_id_for
from .outbox_event import OutboxEvent

__all__ = [
    # Enums
    "AnchorStatus",
    "CouponStatus",
    "InvoiceStatus",
    "OutboxEventStatus",
    "OutboxEventType",
    "SeatStatus",
    # Entities
    "User",
    "Seat",
    "Session",
    "Proof",
    "Coupon",
    "Invoice",
    "OutboxEvent",
    "invoice_id_for",
]
