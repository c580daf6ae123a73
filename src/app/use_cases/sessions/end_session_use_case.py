"""
End Session Use Case

Ends a seat session, frees the seat and queues the usage record for
anchoring.
"""

import logging
import math
from datetime import datetime
from typing import Optional

from src.app.services.transaction import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    read_modify_write,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import as_utc, utc_now
from src.domain.entities import AnchorStatus, OutboxEvent, OutboxEventType, SeatStatus
from src.domain.errors import WriteConflictError
from src.libs.result import Error, Result, Return

from .dtos import SessionResponse

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def hour_blocks_for(duration_seconds: float) -> int:
    """Billable hour blocks: duration rounded up to whole hours"""
    return math.ceil(duration_seconds / SECONDS_PER_HOUR)


class EndSessionUseCase:
    """
    Use case for ending a seat session.

    Business Rules:
    - Session is located by session_id, or by the active session on seat_id
    - Only an active session can be ended (redelivery yields
      SESSION_ALREADY_ENDED, never a second mutation)
    - Session update, seat release and the session_ended outbox event are
      one transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_base_delay: float = DEFAULT_BASE_DELAY,
    ):
        self.uow = uow
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay

    async def execute(
        self,
        session_id: Optional[str] = None,
        seat_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[SessionResponse]:
        """
        Execute end session use case.

        Args:
            session_id: Session to end (takes precedence)
            seat_id: Seat whose active session should end
            now: End time override (defaults to current UTC time)

        Returns:
            Result with the ended SessionResponse, or Error
        """
        if not session_id and not seat_id:
            return Return.err(
                Error("INVALID_REQUEST", "Either session_id or seat_id is required")
            )

        ended_at = now or utc_now()
        result = await read_modify_write(
            self.uow,
            lambda: self._end(session_id, seat_id, ended_at),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
        )
        if result.is_ok():
            data = result.value
            logger.info(
                f"Session ended: {data.session_id}, duration: {data.duration_seconds}s, "
                f"hour blocks: {data.hour_blocks}"
            )
        return result

    async def _end(
        self, session_id: Optional[str], seat_id: Optional[str], ended_at: datetime
    ) -> Result[SessionResponse]:
        if session_id:
            session = await self.uow.sessions.get_by_id(session_id)
            if not session:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))
        else:
            session = await self.uow.sessions.get_active_by_seat_id(seat_id)
            if not session:
                return Return.err(
                    Error("SESSION_NOT_FOUND", "No active session on this seat")
                )

        if not session.active:
            return Return.err(
                Error("SESSION_ALREADY_ENDED", "Session has already ended")
            )

        elapsed = max(0.0, (ended_at - as_utc(session.start_time)).total_seconds())
        duration_seconds = int(elapsed)
        hour_blocks = hour_blocks_for(elapsed)

        session.active = False
        session.end_time = ended_at
        session.duration_seconds = duration_seconds
        session.hour_blocks = hour_blocks
        session.anchor_status = AnchorStatus.pending
        if not await self.uow.sessions.mark_ended(session):
            raise WriteConflictError(f"Session {session.id} changed while ending")

        seat = await self.uow.seats.get_by_id(session.seat_id)
        if seat is None:
            logger.warning(f"Seat {session.seat_id} of session {session.id} no longer exists")
        elif not await self.uow.seats.transition_status(seat, SeatStatus.available, ended_at):
            raise WriteConflictError(f"Seat {seat.id} changed while ending a session")

        await self.uow.outbox_events.create(
            OutboxEvent(
                event_type=OutboxEventType.session_ended,
                aggregate_id=session.id,
                payload={"userId": session.user_id, "seatId": session.seat_id},
            )
        )

        return Return.ok(SessionResponse.from_entity(session))
