"""
Invoice Aggregator Use Cases
"""

from .dtos import GenerateInvoicesResponse, InvoiceResponse, ProcessUserResponse
from .generate_monthly_invoices_use_case import GenerateMonthlyInvoicesUseCase
from .period import BillingPeriod, billing_period, billing_period_for
from .process_user_sessions_use_case import ProcessUserSessionsUseCase

__all__ = [
    "GenerateMonthlyInvoicesUseCase",
    "ProcessUserSessionsUseCase",
    "BillingPeriod",
    "billing_period",
    "billing_period_for",
    "GenerateInvoicesResponse",
    "InvoiceResponse",
    "ProcessUserResponse",
]
