"""
Settlement Bridge Use Cases
"""

from .dtos import ReconcileResponse, SettlementResponse
from .reconcile_payment_use_case import ReconcilePaymentUseCase
from .settle_invoice_use_case import SettleInvoiceUseCase

__all__ = [
    "SettleInvoiceUseCase",
    "ReconcilePaymentUseCase",
    "SettlementResponse",
    "ReconcileResponse",
]
