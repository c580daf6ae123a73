"""
OutboxEvent Entity

Pipeline trigger written in the same transaction as the state change
that produced it, drained by the worker with at-least-once delivery.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_uuid, utc_now

from .enums import OutboxEventStatus, OutboxEventType


class OutboxEvent(SQLModel, table=True):
    """
    OutboxEvent entity - a pending pipeline trigger.

    Business Rules:
    - Created inside the producing transaction (session end, invoice
      creation, anchor re-trigger)
    - Marked processed only after its handler returned
    - Handlers must tolerate redelivery
    """

    __tablename__ = "outbox_events"

    id: str = Field(default_factory=generate_uuid, primary_key=True, max_length=64)

    event_type: OutboxEventType
    aggregate_id: str = Field(max_length=200)
    payload: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    status: OutboxEventStatus = Field(default=OutboxEventStatus.pending)
    attempts: int = Field(default=0)
    last_error: Optional[str] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    processed_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (
        Index("idx_outbox_status_created_at", "status", "created_at"),
    )
