"""
Use Cases

Organized by pipeline component:
- sessions/: Seat session start / end
- proofs/: Usage record anchoring and verification
- coupons/: Coupon consumption
- invoices/: Monthly invoice aggregation
- settlement/: Payment provider settlement and webhooks
- pipeline/: Outbox dispatch
- members/: Member card tokens
"""

from .sessions import EndSessionUseCase, SessionResponse, StartSessionUseCase
from .proofs import (
    AnchorResponse,
    AnchorUsageRecordUseCase,
    RetryAnchorUseCase,
    VerifyProofResponse,
    VerifyProofUseCase,
)
from .coupons import CouponLedger
from .invoices import (
    GenerateInvoicesResponse,
    GenerateMonthlyInvoicesUseCase,
    ProcessUserSessionsUseCase,
)
from .settlement import (
    ReconcilePaymentUseCase,
    ReconcileResponse,
    SettleInvoiceUseCase,
    SettlementResponse,
)
from .pipeline import DispatchPendingEventsUseCase, DispatchResponse
from .members import IssueMemberTokenUseCase, MemberTokenResponse

__all__ = [
    # Sessions
    "StartSessionUseCase",
    "EndSessionUseCase",
    "SessionResponse",
    # Proofs
    "AnchorUsageRecordUseCase",
    "RetryAnchorUseCase",
    "VerifyProofUseCase",
    "AnchorResponse",
    "VerifyProofResponse",
    # Coupons
    "CouponLedger",
    # Invoices
    "GenerateMonthlyInvoicesUseCase",
    "ProcessUserSessionsUseCase",
    "GenerateInvoicesResponse",
    # Settlement
    "SettleInvoiceUseCase",
    "ReconcilePaymentUseCase",
    "SettlementResponse",
    "ReconcileResponse",
    # Pipeline
    "DispatchPendingEventsUseCase",
    "DispatchResponse",
    # Members
    "IssueMemberTokenUseCase",
    "MemberTokenResponse",
]
