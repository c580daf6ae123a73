import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.api.utils.jwt import generate_member_token
from src.domain.entities import OutboxEvent, Seat, SeatStatus, Session


@pytest.mark.asyncio
async def test_start_and_end_session(client: AsyncClient, billing_fixture, fetch):
    """
    Given a registered user and an available seat
    When the user checks in and later checks out
    Then the seat is occupied while the session is active and freed afterwards
    """
    response = await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc01"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    session_id = data["session"]["session_id"]
    assert data["session"]["active"] is True

    seat = await fetch(Seat, "pc01")
    assert seat.status == SeatStatus.in_use

    response = await client.post("/sessions/end", json={"sessionId": session_id})

    assert response.status_code == 200
    data = response.json()["session"]
    assert data["active"] is False
    assert data["end_time"] is not None
    assert data["hour_blocks"] >= 1
    assert data["anchor_status"] == "pending"

    seat = await fetch(Seat, "pc01")
    assert seat.status == SeatStatus.available


@pytest.mark.asyncio
async def test_end_session_queues_anchor_event(client: AsyncClient, billing_fixture, session_factory):
    start = await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc02"})
    session_id = start.json()["session"]["session_id"]

    await client.post("/sessions/end", json={"seatId": "pc02"})

    async with session_factory() as db:
        events = (await db.exec(select(OutboxEvent))).all()
    assert [(e.event_type.value, e.aggregate_id) for e in events] == [
        ("session_ended", session_id)
    ]


@pytest.mark.asyncio
async def test_second_start_on_occupied_seat_conflicts(client: AsyncClient, billing_fixture):
    await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc01"})

    response = await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc01"})

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "SEAT_UNAVAILABLE"


@pytest.mark.asyncio
async def test_ending_twice_conflicts(client: AsyncClient, billing_fixture, fetch):
    start = await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc01"})
    session_id = start.json()["session"]["session_id"]
    first = await client.post("/sessions/end", json={"sessionId": session_id})

    response = await client.post("/sessions/end", json={"sessionId": session_id})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "SESSION_ALREADY_ENDED"
    stored = await fetch(Session, session_id)
    assert stored.duration_seconds == first.json()["session"]["duration_seconds"]


@pytest.mark.asyncio
async def test_unknown_seat_and_user(client: AsyncClient, billing_fixture):
    response = await client.post("/sessions/start", json={"userId": "user-1", "seatId": "pc99"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "SEAT_NOT_FOUND"

    response = await client.post("/sessions/start", json={"userId": "nobody", "seatId": "pc01"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_end_without_active_session(client: AsyncClient, billing_fixture):
    response = await client.post("/sessions/end", json={"seatId": "pc01"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_invalid_request_body(client: AsyncClient, billing_fixture):
    response = await client.post("/sessions/start", json={"userId": "user-1"})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": {"code": "INVALID_REQUEST", "message": "Request validation failed"},
    }

    response = await client.post("/sessions/start", json={"seatId": "pc01"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"

    response = await client.post("/sessions/end", json={})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_REQUEST"


@pytest.mark.asyncio
async def test_start_with_member_token(client: AsyncClient, billing_fixture):
    token = generate_member_token("user-1")

    response = await client.post("/sessions/start", json={"memberToken": token, "seatId": "pc01"})

    assert response.status_code == 200
    assert response.json()["session"]["user_id"] == "user-1"


@pytest.mark.asyncio
async def test_start_with_invalid_member_token(client: AsyncClient, billing_fixture):
    response = await client.post(
        "/sessions/start", json={"memberToken": "not-a-token", "seatId": "pc01"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_MEMBER_TOKEN"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
