from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session
from src.domain.errors import WriteConflictError


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: str) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_seat_id(self, seat_id: str) -> Optional[Session]:
        """Get the active session occupying a seat"""
        stmt = select(Session).where(Session.seat_id == seat_id, Session.active == True)  # noqa: E712
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, session_obj: Session) -> Session:
        """
        Create a new session.

        Raises:
            WriteConflictError: the seat already has an active session
        """
        self.session.add(session_obj)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise WriteConflictError(
                f"Seat {session_obj.seat_id} already has an active session"
            ) from exc
        await self.session.refresh(session_obj)
        return session_obj

    async def update(self, session_obj: Session) -> Session:
        """Update existing session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def mark_ended(self, session_obj: Session) -> bool:
        """End the session only if the stored row is still active"""
        stmt = (
            update(Session)
            .where(Session.id == session_obj.id, Session.active == True)  # noqa: E712
            .values(
                active=False,
                end_time=session_obj.end_time,
                duration_seconds=session_obj.duration_seconds,
                hour_blocks=session_obj.hour_blocks,
                anchor_status=session_obj.anchor_status,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return False
        await self.session.refresh(session_obj)
        return True

    async def get_completed_in_period(
        self, user_id: str, period_start: datetime, period_end: datetime
    ) -> List[Session]:
        """Ended sessions with period_start <= end_time < period_end, oldest first"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.active == False,  # noqa: E712
                Session.end_time >= period_start,
                Session.end_time < period_end,
            )
            .order_by(Session.end_time, Session.id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())
