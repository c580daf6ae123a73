"""
Proof Anchor DTOs (Data Transfer Objects)
"""

from typing import Optional

from pydantic import BaseModel

from src.domain.entities import Proof


class AnchorResponse(BaseModel):
    """Outcome of an anchoring attempt"""

    proof_id: str
    status: str
    hash: str
    storage_ref: str
    tx_id: Optional[str] = None
    submitted_tx_id: Optional[str] = None
    block_number: Optional[int] = None
    error_message: Optional[str] = None
    skipped: bool = False

    @classmethod
    def from_entity(cls, proof: Proof, skipped: bool = False) -> "AnchorResponse":
        return cls(
            proof_id=proof.id,
            status=proof.status.value,
            hash=proof.hash,
            storage_ref=proof.storage_ref,
            tx_id=proof.tx_id,
            submitted_tx_id=proof.submitted_tx_id,
            block_number=proof.block_number,
            error_message=proof.error_message,
            skipped=skipped,
        )


class VerifyProofResponse(BaseModel):
    """Recomputed hash of the stored usage record against the proof"""

    proof_id: str
    status: str
    stored_hash: str
    computed_hash: str
    blob_matches: bool
    tx_id: Optional[str] = None
    ledger_hash: Optional[str] = None
    ledger_matches: Optional[bool] = None
