from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import OutboxEvent


class IOutboxEventRepository(ABC):
    """OutboxEvent repository interface - application layer"""

    @abstractmethod
    async def create(self, event: OutboxEvent) -> OutboxEvent:
        """Append a new pending event"""
        pass

    @abstractmethod
    async def get_by_id(self, event_id: str) -> Optional[OutboxEvent]:
        """Get event by ID"""
        pass

    @abstractmethod
    async def get_pending(self, limit: int = 100) -> List[OutboxEvent]:
        """Oldest pending events first"""
        pass

    @abstractmethod
    async def update(self, event: OutboxEvent) -> OutboxEvent:
        """Update delivery state of an event"""
        pass
