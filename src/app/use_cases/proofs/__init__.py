"""
Proof Anchor Use Cases

Usage record storage, ledger anchoring, re-trigger and verification.
"""

from .anchor_usage_record_use_case import AnchorUsageRecordUseCase
from .dtos import AnchorResponse, VerifyProofResponse
from .retry_anchor_use_case import RetryAnchorUseCase
from .verify_proof_use_case import VerifyProofUseCase

__all__ = [
    "AnchorUsageRecordUseCase",
    "RetryAnchorUseCase",
    "VerifyProofUseCase",
    "AnchorResponse",
    "VerifyProofResponse",
]
