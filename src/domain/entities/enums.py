"""
Seat Billing Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class SeatStatus(str, Enum):
    """Seat occupancy status"""

    available = "available"
    in_use = "in-use"
    maintenance = "maintenance"


class AnchorStatus(str, Enum):
    """Ledger anchoring state shared by Proof and Session"""

    pending = "pending"
    confirmed = "confirmed"
    error = "error"


class CouponStatus(str, Enum):
    """User coupon status"""

    available = "available"
    used = "used"


class InvoiceStatus(str, Enum):
    """Invoice settlement status"""

    pending_settlement = "pending_settlement"
    settling = "settling"
    paid = "paid"
    failed = "failed"


class OutboxEventType(str, Enum):
    """Pipeline events written inside the producing transaction"""

    session_ended = "session_ended"
    invoice_created = "invoice_created"


class OutboxEventStatus(str, Enum):
    """Outbox delivery status"""

    pending = "pending"
    processed = "processed"
    failed = "failed"
