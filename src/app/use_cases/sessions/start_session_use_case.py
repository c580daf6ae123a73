"""
Start Session Use Case

Occupies a seat for a user.
"""

import logging
from datetime import datetime
from typing import Optional

from src.app.services.transaction import (
    DEFAULT_BASE_DELAY,
    DEFAULT_MAX_ATTEMPTS,
    read_modify_write,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utc_now
from src.domain.entities import SeatStatus, Session
from src.domain.errors import WriteConflictError
from src.libs.result import Error, Result, Return

from .dtos import SessionResponse

logger = logging.getLogger(__name__)


class StartSessionUseCase:
    """
    Use case for starting a seat session.

    Business Rules:
    - User and seat must exist
    - Seat must be available and have no active session
    - Seat check, session insert and seat update form one transaction;
      the seat update is conditional on the version that was read
    - Lost races are retried with backoff, then surface TRANSACTION_CONFLICT
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
        self, user_id: str, seat_id: str, now: Optional[datetime] = None
    ) -> Result[SessionResponse]:
        """
        Execute start session use case.

        Args:
            user_id: Patron starting the session
            seat_id: Seat to occupy
            now: Start time override (defaults to current UTC time)

        Returns:
            Result with SessionResponse, or Error
        """
        started_at = now or utc_now()
        result = await read_modify_write(
            self.uow,
            lambda: self._start(user_id, seat_id, started_at),
            max_attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
        )
        if result.is_ok():
            logger.info(
                f"Session started: {result.value.session_id}, user: {user_id}, seat: {seat_id}"
            )
        return result

    async def _start(
        self, user_id: str, seat_id: str, started_at: datetime
    ) -> Result[SessionResponse]:
        user = await self.uow.users.get_by_id(user_id)
        if not user:
            return Return.err(Error("USER_NOT_FOUND", "User not found"))

        seat = await self.uow.seats.get_by_id(seat_id)
        if not seat:
            return Return.err(Error("SEAT_NOT_FOUND", "Seat not found"))

        if seat.status != SeatStatus.available:
            return Return.err(
                Error(
                    "SEAT_UNAVAILABLE",
                    "Seat is not available",
                    reason=f"status={seat.status.value}",
                )
            )

        active_session = await self.uow.sessions.get_active_by_seat_id(seat_id)
        if active_session:
            return Return.err(
                Error("SEAT_OCCUPIED", "Seat already has an active session")
            )

        session = Session(
            user_id=user_id,
            seat_id=seat_id,
            start_time=started_at,
            active=True,
        )
        await self.uow.sessions.create(session)

        if not await self.uow.seats.transition_status(seat, SeatStatus.in_use, started_at):
            raise WriteConflictError(f"Seat {seat_id} changed while starting a session")

        return Return.ok(SessionResponse.from_entity(session))
