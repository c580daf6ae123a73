"""
Session Entity

One occupancy interval of a seat by a user.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_uuid, utc_now

from .enums import AnchorStatus


class Session(SQLModel, table=True):
    """
    Session entity - a timed seat occupancy.

    Business Rules:
    - At most one active session per seat (partial unique index)
    - active flips true -> false exactly once (end session)
    - hour_blocks = ceil(duration / 1 hour), the billing unit
    - anchor_* fields are written only by the proof anchor
    - Never deleted
    """

    __tablename__ = "sessions"

    id: str = Field(default_factory=generate_uuid, primary_key=True, max_length=64)

    user_id: str = Field(foreign_key="users.id", nullable=False, max_length=128)
    seat_id: str = Field(foreign_key="seats.id", nullable=False, max_length=64)

    start_time: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    end_time: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    active: bool = Field(default=True)

    duration_seconds: int = Field(default=0)
    hour_blocks: int = Field(default=0)

    # Usage record / ledger anchoring (proof anchor)
    anchor_status: Optional[AnchorStatus] = Field(default=None)
    anchor_tx_id: Optional[str] = Field(default=None, max_length=128)
    anchor_block_number: Optional[int] = Field(default=None)
    anchor_error: Optional[str] = Field(default=None)
    storage_ref: Optional[str] = Field(default=None, max_length=512)
    usage_hash: Optional[str] = Field(default=None, max_length=64)

    __table_args__ = (
        Index("idx_session_user_end_time", "user_id", "end_time"),
        Index("idx_session_seat_active", "seat_id", "active"),
        Index(
            "uq_session_active_seat",
            "seat_id",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active = true"),
        ),
    )
