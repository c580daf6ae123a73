from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.domain.entities import Seat, SeatStatus


class ISeatRepository(ABC):
    """Seat repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, seat_id: str) -> Optional[Seat]:
        """Get seat by ID"""
        pass

    @abstractmethod
    async def get_by_ids(self, seat_ids: List[str]) -> List[Seat]:
        """Get all seats whose ID is in seat_ids"""
        pass

    @abstractmethod
    async def transition_status(
        self, seat: Seat, status: SeatStatus, updated_at: datetime
    ) -> bool:
        """
        Set seat status if the stored version still equals seat.version.
        Bumps the version. Returns False when another writer got there first.
        """
        pass
