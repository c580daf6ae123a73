from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def list_billable(self, user_ids: Optional[List[str]] = None) -> List[User]:
        """List users with completed registration, optionally restricted to user_ids"""
        pass
