"""
Issue Member Token Use Case

Member cards carry a signed token that identifies the patron at the seat
terminal instead of a raw user id.
"""

import logging

from pydantic import BaseModel

from src.api.utils.jwt import generate_member_token
from src.app.services.unit_of_work import UnitOfWork
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class MemberTokenResponse(BaseModel):
    user_id: str
    member_token: str


class IssueMemberTokenUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: str) -> Result[MemberTokenResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if not user:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

        logger.info(f"Member token issued for user {user_id}")
        return Return.ok(
            MemberTokenResponse(user_id=user_id, member_token=generate_member_token(user_id))
        )
