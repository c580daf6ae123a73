from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import Proof


class IProofRepository(ABC):
    """Proof repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, proof_id: str) -> Optional[Proof]:
        """Get proof by ID"""
        pass

    @abstractmethod
    async def create(self, proof: Proof) -> Proof:
        """Create a new proof"""
        pass

    @abstractmethod
    async def update(self, proof: Proof) -> Proof:
        """Update existing proof"""
        pass
