"""
Proof Entity

Anchored-hash record of a usage record and its ledger confirmation state.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import AnchorStatus


class Proof(SQLModel, table=True):
    """
    Proof entity - tamper-evidence for one usage record.

    Business Rules:
    - id equals the session id (one proof per usage record)
    - hash is the hex SHA-256 of the canonical usage record bytes
    - pending -> confirmed | error exactly once per anchoring attempt
    - A ledger transaction is submitted only while status = pending and
      tx_id is unset
    """

    __tablename__ = "proofs"

    id: str = Field(primary_key=True, max_length=64)
    session_id: str = Field(foreign_key="sessions.id", nullable=False, max_length=64)
    user_id: str = Field(nullable=False, max_length=128)

    hash: str = Field(max_length=64)
    storage_ref: str = Field(max_length=512)

    status: AnchorStatus = Field(default=AnchorStatus.pending)
    tx_id: Optional[str] = Field(default=None, max_length=128)
    # Last transaction sent for this proof, kept when it was never confirmed
    submitted_tx_id: Optional[str] = Field(default=None, max_length=128)
    block_number: Optional[int] = Field(default=None)
    chain_id: Optional[str] = Field(default=None, max_length=32)
    error_message: Optional[str] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    confirmed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (Index("idx_proof_status", "status"),)
