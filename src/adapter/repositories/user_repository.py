from typing import List, Optional

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_billable(self, user_ids: Optional[List[str]] = None) -> List[User]:
        """List registered users, optionally restricted to user_ids"""
        stmt = select(User).where(User.registration_completed == True)  # noqa: E712
        if user_ids:
            stmt = stmt.where(User.id.in_(user_ids))
        stmt = stmt.order_by(User.id)
        result = await self.session.exec(stmt)
        return list(result.all())
