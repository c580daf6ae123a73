from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.proof_repository import IProofRepository
from src.domain.entities import Proof
from src.domain.errors import WriteConflictError


class ProofRepository(IProofRepository):
    """Proof repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, proof_id: str) -> Optional[Proof]:
        """Get proof by ID"""
        stmt = select(Proof).where(Proof.id == proof_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, proof: Proof) -> Proof:
        """Create a new proof"""
        self.session.add(proof)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise WriteConflictError(f"Proof {proof.id} already exists") from exc
        await self.session.refresh(proof)
        return proof

    async def update(self, proof: Proof) -> Proof:
        """Update existing proof"""
        self.session.add(proof)
        await self.session.flush()
        await self.session.refresh(proof)
        return proof
