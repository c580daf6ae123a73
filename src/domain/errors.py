"""
Seat Billing Error Taxonomy

Error codes returned in Result values, the kind each code belongs to, and
the exceptions raised across layer boundaries (repositories, provider
adapters).
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Error kinds surfaced to callers"""

    not_found = "not_found"
    conflict = "conflict"
    precondition_failed = "precondition_failed"
    invalid = "invalid"
    transient_provider = "transient_provider"
    permanent_provider = "permanent_provider"
    internal = "internal"


ERROR_KINDS = {
    # NotFound
    "USER_NOT_FOUND": ErrorKind.not_found,
    "SEAT_NOT_FOUND": ErrorKind.not_found,
    "SESSION_NOT_FOUND": ErrorKind.not_found,
    "INVOICE_NOT_FOUND": ErrorKind.not_found,
    "PROOF_NOT_FOUND": ErrorKind.not_found,
    # Conflict
    "SEAT_UNAVAILABLE": ErrorKind.conflict,
    "SEAT_OCCUPIED": ErrorKind.conflict,
    "SESSION_ALREADY_ENDED": ErrorKind.conflict,
    "SESSION_NOT_ENDED": ErrorKind.conflict,
    "COUPON_ALREADY_USED": ErrorKind.conflict,
    "PROOF_NOT_RETRYABLE": ErrorKind.conflict,
    "TRANSACTION_CONFLICT": ErrorKind.conflict,
    # PreconditionFailed
    "PAYMENT_SETUP_INCOMPLETE": ErrorKind.precondition_failed,
    # Invalid input
    "INVALID_REQUEST": ErrorKind.invalid,
    "INVALID_PERIOD": ErrorKind.invalid,
    "INVALID_MEMBER_TOKEN": ErrorKind.invalid,
    # Providers
    "PROVIDER_UNAVAILABLE": ErrorKind.transient_provider,
    "PROVIDER_REJECTED": ErrorKind.permanent_provider,
    "LEDGER_ERROR": ErrorKind.permanent_provider,
    "BLOB_NOT_FOUND": ErrorKind.internal,
}


def kind_of(code: str) -> ErrorKind:
    return ERROR_KINDS.get(code, ErrorKind.internal)


class WriteConflictError(Exception):
    """A conditional write lost a race; the transaction must be retried"""


class ProviderError(Exception):
    """Base class for ledger / payment provider failures"""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(message)


class TransientProviderError(ProviderError):
    """Retryable fault: connection, rate limit, provider-side 5xx"""


class PermanentProviderError(ProviderError):
    """Rejected request, declined charge, reverted transaction"""


class LedgerTimeoutError(TransientProviderError):
    """Ledger transaction was not confirmed within the allowed time"""


class WebhookVerificationError(Exception):
    """Inbound webhook payload or signature could not be verified"""
