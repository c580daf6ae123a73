from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.outbox_event_repository import IOutboxEventRepository
from src.domain.entities import OutboxEvent, OutboxEventStatus


class OutboxEventRepository(IOutboxEventRepository):
    """OutboxEvent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: OutboxEvent) -> OutboxEvent:
        """Append a new event"""
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def get_by_id(self, event_id: str) -> Optional[OutboxEvent]:
        """Get event by ID"""
        stmt = select(OutboxEvent).where(OutboxEvent.id == event_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_pending(self, limit: int = 100) -> List[OutboxEvent]:
        """Oldest pending events first"""
        stmt = (
            select(OutboxEvent)
            .where(OutboxEvent.status == OutboxEventStatus.pending)
            .order_by(OutboxEvent.created_at, OutboxEvent.id)
            .limit(limit)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def update(self, event: OutboxEvent) -> OutboxEvent:
        """Update delivery state of an event"""
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event
