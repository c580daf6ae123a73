"""
Session Ledger DTOs (Data Transfer Objects)
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.domain.base import as_utc
from src.domain.entities import Session


class SessionResponse(BaseModel):
    """Session snapshot returned by start / end session"""

    session_id: str
    user_id: str
    seat_id: str
    start_time: datetime
    end_time: Optional[datetime] = None
    active: bool
    duration_seconds: int = 0
    hour_blocks: int = 0
    anchor_status: Optional[str] = None

    @classmethod
    def from_entity(cls, session: Session) -> "SessionResponse":
        return cls(
            session_id=session.id,
            user_id=session.user_id,
            seat_id=session.seat_id,
            start_time=as_utc(session.start_time),
            end_time=as_utc(session.end_time),
            active=session.active,
            duration_seconds=session.duration_seconds,
            hour_blocks=session.hour_blocks,
            anchor_status=session.anchor_status.value if session.anchor_status else None,
        )
