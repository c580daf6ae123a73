from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.seat_repository import ISeatRepository
from src.domain.entities import Seat, SeatStatus


class SeatRepository(ISeatRepository):
    """Seat repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, seat_id: str) -> Optional[Seat]:
        """Get seat by ID"""
        stmt = select(Seat).where(Seat.id == seat_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_ids(self, seat_ids: List[str]) -> List[Seat]:
        """Get all seats whose ID is in seat_ids"""
        if not seat_ids:
            return []
        stmt = select(Seat).where(Seat.id.in_(seat_ids))
        result = await self.session.exec(stmt)
        return list(result.all())

    async def transition_status(
        self, seat: Seat, status: SeatStatus, updated_at: datetime
    ) -> bool:
        """Compare-and-set on version; refreshes seat on success"""
        stmt = (
            update(Seat)
            .where(Seat.id == seat.id, Seat.version == seat.version)
            .values(status=status, version=seat.version + 1, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return False
        await self.session.refresh(seat)
        return True
