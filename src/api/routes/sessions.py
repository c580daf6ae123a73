from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from config import ApplicationConfig
from src.api.error import ClientError, raise_for_error
from src.api.utils.jwt import verify_member_token
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    EndSessionUseCase,
    SessionResponse,
    StartSessionUseCase,
)
from src.depends import get_unit_of_work
from src.libs.result import Error

router = APIRouter(prefix="/sessions", tags=["Sessions"])


class StartSessionRequest(BaseModel):
    """Seat terminal check-in: a user id or a member card token, and a seat"""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    member_token: Optional[str] = Field(None, alias="memberToken")
    seat_id: str = Field(..., alias="seatId", min_length=1)


class EndSessionRequest(BaseModel):
    """Check-out by session id or by seat"""

    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")
    seat_id: Optional[str] = Field(None, alias="seatId")


class SessionEnvelope(BaseModel):
    success: bool = True
    session: SessionResponse


@router.post("/start", status_code=status.HTTP_200_OK, response_model=SessionEnvelope)
async def start_session(
    request: StartSessionRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Start Session

    Occupies the seat for the user. Either userId or memberToken identifies
    the user.

    Raises:
        - 400 Bad Request: INVALID_REQUEST, INVALID_MEMBER_TOKEN
        - 404 Not Found: USER_NOT_FOUND, SEAT_NOT_FOUND
        - 409 Conflict: SEAT_UNAVAILABLE, SEAT_OCCUPIED, TRANSACTION_CONFLICT
    """
    user_id = request.user_id
    if request.member_token:
        user_id = verify_member_token(request.member_token)
        if not user_id:
            raise ClientError(
                Error("INVALID_MEMBER_TOKEN", "Member token is invalid or expired"),
                status_code=status.HTTP_400_BAD_REQUEST,
            )
    if not user_id:
        raise ClientError(Error("INVALID_REQUEST", "userId or memberToken is required"))

    use_case = StartSessionUseCase(
        uow,
        max_attempts=ApplicationConfig.TRANSACTION_MAX_ATTEMPTS,
        retry_base_delay=ApplicationConfig.TRANSACTION_RETRY_BASE_DELAY,
    )
    result = await use_case.execute(user_id, request.seat_id)

    if result.is_err():
        raise_for_error(result.error)

    return SessionEnvelope(session=result.value)


@router.post("/end", status_code=status.HTTP_200_OK, response_model=SessionEnvelope)
async def end_session(
    request: EndSessionRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    End Session

    Ends the session given by sessionId, or the active session on seatId.
    The usage record is anchored asynchronously.

    Raises:
        - 400 Bad Request: INVALID_REQUEST
        - 404 Not Found: SESSION_NOT_FOUND
        - 409 Conflict: SESSION_ALREADY_ENDED, TRANSACTION_CONFLICT
    """
    use_case = EndSessionUseCase(
        uow,
        max_attempts=ApplicationConfig.TRANSACTION_MAX_ATTEMPTS,
        retry_base_delay=ApplicationConfig.TRANSACTION_RETRY_BASE_DELAY,
    )
    result = await use_case.execute(session_id=request.session_id, seat_id=request.seat_id)

    if result.is_err():
        raise_for_error(result.error)

    return SessionEnvelope(session=result.value)
