"""
Seat Entity

A billable, exclusively-occupiable resource unit.
"""

from datetime import datetime

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import SeatStatus


class Seat(SQLModel, table=True):
    """
    Seat entity - one billable seat.

    Business Rules:
    - status = in-use iff exactly one active Session exists for the seat
    - Mutated only by the session ledger (start / end session)
    - version increments on every status change; writes are conditional
      on the version that was read
    """

    __tablename__ = "seats"

    id: str = Field(primary_key=True, max_length=64)  # e.g. "pc01"
    name: str = Field(default="", max_length=255)
    branch_name: str = Field(default="", max_length=255)

    hourly_rate: int = Field(default=600, ge=0)
    status: SeatStatus = Field(default=SeatStatus.available)
    version: int = Field(default=1)

    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (Index("idx_seat_status", "status"),)
