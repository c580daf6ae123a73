"""
Unit tests for StartSessionUseCase
Tests seat occupancy rules in isolation with mocked dependencies.
"""

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, UTC

from src.app.use_cases.sessions import StartSessionUseCase
from src.domain.entities import Seat, SeatStatus, Session, User

STARTED_AT = datetime(2024, 5, 10, 9, 0, tzinfo=UTC)


def _arrange(mock_uow, seat_status=SeatStatus.available, active_session=None):
    user = User(id="user-1", email="patron@example.com")
    seat = Seat(id="pc01", name="PC 01", status=seat_status, version=1)

    mock_uow.users.get_by_id = AsyncMock(return_value=user)
    mock_uow.seats.get_by_id = AsyncMock(return_value=seat)
    mock_uow.sessions.get_active_by_seat_id = AsyncMock(return_value=active_session)
    mock_uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    mock_uow.seats.transition_status = AsyncMock(return_value=True)
    return user, seat


@pytest.mark.asyncio
async def test_start_session_success(mock_uow):
    """Test starting a session on an available seat"""
    # Arrange
    _, seat = _arrange(mock_uow)

    # Act
    use_case = StartSessionUseCase(mock_uow, retry_base_delay=0)
    result = await use_case.execute("user-1", "pc01", now=STARTED_AT)

    # Assert
    assert result.is_ok()
    response = result.value
    assert response.user_id == "user-1"
    assert response.seat_id == "pc01"
    assert response.active is True
    assert response.start_time == STARTED_AT

    created = mock_uow.sessions.create.call_args[0][0]
    assert created.active is True
    mock_uow.seats.transition_status.assert_called_once_with(
        seat, SeatStatus.in_use, STARTED_AT
    )
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_start_session_user_not_found(mock_uow):
    """Test starting a session for an unknown user"""
    _arrange(mock_uow)
    mock_uow.users.get_by_id = AsyncMock(return_value=None)

    result = await StartSessionUseCase(mock_uow).execute("ghost", "pc01")

    assert result.is_err()
    assert result.error.code == "USER_NOT_FOUND"
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_start_session_seat_not_found(mock_uow):
    """Test starting a session on an unknown seat"""
    _arrange(mock_uow)
    mock_uow.seats.get_by_id = AsyncMock(return_value=None)

    result = await StartSessionUseCase(mock_uow).execute("user-1", "pc99")

    assert result.is_err()
    assert result.error.code == "SEAT_NOT_FOUND"


@pytest.mark.asyncio
async def test_start_session_seat_in_maintenance(mock_uow):
    """Test seat that is not available is rejected"""
    _arrange(mock_uow, seat_status=SeatStatus.maintenance)

    result = await StartSessionUseCase(mock_uow).execute("user-1", "pc01")

    assert result.is_err()
    assert result.error.code == "SEAT_UNAVAILABLE"
    assert result.error.reason == "status=maintenance"
    mock_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
async def test_start_session_seat_occupied(mock_uow):
    """Test a second session on an occupied seat is rejected"""
    existing = Session(id="sess-0", user_id="user-2", seat_id="pc01", active=True)
    _arrange(mock_uow, active_session=existing)

    result = await StartSessionUseCase(mock_uow).execute("user-1", "pc01")

    assert result.is_err()
    assert result.error.code == "SEAT_OCCUPIED"
    mock_uow.sessions.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_start_session_lost_race_surfaces_conflict(mock_uow):
    """Test the seat version check losing on every attempt"""
    _arrange(mock_uow)
    mock_uow.seats.transition_status = AsyncMock(return_value=False)

    use_case = StartSessionUseCase(mock_uow, max_attempts=2, retry_base_delay=0)
    result = await use_case.execute("user-1", "pc01")

    assert result.is_err()
    assert result.error.code == "TRANSACTION_CONFLICT"
    assert mock_uow.seats.transition_status.call_count == 2
    mock_uow.commit.assert_not_called()
