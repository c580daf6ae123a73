from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_active_by_seat_id(self, seat_id: str) -> Optional[Session]:
        """Get the active session occupying a seat, if any"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def update(self, session: Session) -> Session:
        """Update existing session"""
        pass

    @abstractmethod
    async def mark_ended(self, session: Session) -> bool:
        """
        Persist the ended state of session (active, end_time, duration,
        hour_blocks, anchor_status) only if the stored row is still active.
        Returns False when it was already ended.
        """
        pass

    @abstractmethod
    async def get_completed_in_period(
        self, user_id: str, period_start: datetime, period_end: datetime
    ) -> List[Session]:
        """Ended sessions of a user with period_start <= end_time < period_end"""
        pass
