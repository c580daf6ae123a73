"""
Unit tests for ProcessUserSessionsUseCase
"""

import math

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, timedelta, UTC

from src.app.use_cases.invoices import ProcessUserSessionsUseCase, billing_period_for
from src.domain.entities import (
    Coupon,
    Invoice,
    InvoiceStatus,
    OutboxEventType,
    Seat,
    Session,
    User,
)

PERIOD = billing_period_for("2024-05")
NOW = datetime(2024, 6, 1, 0, 0, tzinfo=UTC)


def _session(session_id: str, minutes: int, seat_id: str = "pc01") -> Session:
    start = PERIOD.start + timedelta(days=3)
    blocks = math.ceil(minutes / 60)
    return Session(
        id=session_id,
        user_id="user-1",
        seat_id=seat_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        active=False,
        duration_seconds=minutes * 60,
        hour_blocks=blocks,
        anchor_tx_id="0xabc",
    )


def _arrange(mock_uow, sessions, coupons=None, existing=None):
    mock_uow.invoices.get_by_id = AsyncMock(return_value=existing)
    mock_uow.invoices.create = AsyncMock(side_effect=lambda invoice: invoice)
    mock_uow.users.get_by_id = AsyncMock(
        return_value=User(id="user-1", email="patron@example.com")
    )
    mock_uow.sessions.get_completed_in_period = AsyncMock(return_value=sessions)
    mock_uow.seats.get_by_ids = AsyncMock(
        return_value=[Seat(id="pc01", name="PC 01", branch_name="Shibuya", hourly_rate=600)]
    )
    mock_uow.coupons.get_available_for_user = AsyncMock(return_value=coupons or [])
    mock_uow.coupons.mark_used = AsyncMock(return_value=True)
    mock_uow.outbox_events.create = AsyncMock()


@pytest.mark.asyncio
async def test_ninety_minutes_on_pc01_bills_two_blocks(mock_uow):
    """pc01 90 min -> 2 blocks x 600 = 1200"""
    # Arrange
    _arrange(mock_uow, [_session("sess-1", 90)])

    # Act
    result = await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    # Assert
    assert result.is_ok()
    assert result.value.created is True

    invoice = mock_uow.invoices.create.call_args[0][0]
    assert invoice.id == "inv_2024-05_user-1"
    assert invoice.subtotal_amount == 1200
    assert invoice.discount_amount == 0
    assert invoice.final_amount == 1200
    assert invoice.status == InvoiceStatus.pending_settlement
    assert invoice.user_email == "patron@example.com"

    line = invoice.sessions[0]
    assert line["hour_blocks"] == 2
    assert line["hourly_rate"] == 600
    assert line["amount"] == 1200
    assert line["seat_name"] == "PC 01"
    assert line["branch_name"] == "Shibuya"
    assert line["anchor_tx_id"] == "0xabc"
    assert line["end_time"].endswith("Z")

    event = mock_uow.outbox_events.create.call_args[0][0]
    assert event.event_type == OutboxEventType.invoice_created
    assert event.aggregate_id == invoice.id
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_coupons_reduce_final_amount(mock_uow):
    """Subtotal 1000 with coupons 300 + 150 -> final 550"""
    coupons = [
        Coupon(id="c300", user_id="user-1", code="A", name="A", discount_value=300),
        Coupon(id="c150", user_id="user-1", code="B", name="B", discount_value=150),
    ]
    _arrange(mock_uow, [_session("sess-1", 60)], coupons=coupons)
    mock_uow.seats.get_by_ids = AsyncMock(return_value=[Seat(id="pc01", hourly_rate=1000)])

    result = await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    assert result.is_ok()
    invoice = mock_uow.invoices.create.call_args[0][0]
    assert invoice.subtotal_amount == 1000
    assert invoice.discount_amount == 450
    assert invoice.final_amount == 550
    assert [c["coupon_id"] for c in invoice.applied_coupons] == ["c300", "c150"]


@pytest.mark.asyncio
async def test_final_amount_never_negative(mock_uow):
    coupons = [Coupon(id="big", user_id="user-1", discount_value=5000)]
    _arrange(mock_uow, [_session("sess-1", 30)], coupons=coupons)

    await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    invoice = mock_uow.invoices.create.call_args[0][0]
    assert invoice.subtotal_amount == 600
    assert invoice.discount_amount == 600
    assert invoice.final_amount == 0


@pytest.mark.asyncio
async def test_existing_invoice_is_skipped(mock_uow):
    """Re-running a period creates nothing and consumes no coupons"""
    existing = Invoice(
        id="inv_2024-05_user-1",
        user_id="user-1",
        period_string="2024-05",
        period_start=PERIOD.start,
        period_end=PERIOD.end,
    )
    _arrange(mock_uow, [_session("sess-1", 90)], existing=existing)

    result = await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    assert result.is_ok()
    assert result.value.created is False
    assert result.value.reason == "exists"
    mock_uow.invoices.create.assert_not_called()
    mock_uow.coupons.get_available_for_user.assert_not_called()


@pytest.mark.asyncio
async def test_user_without_sessions_is_skipped(mock_uow):
    _arrange(mock_uow, [])

    result = await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    assert result.value.created is False
    assert result.value.reason == "no_sessions"
    mock_uow.invoices.create.assert_not_called()


@pytest.mark.asyncio
async def test_missing_seat_fails_user(mock_uow):
    _arrange(mock_uow, [_session("sess-1", 90, seat_id="pc77")])

    result = await ProcessUserSessionsUseCase(mock_uow).execute("user-1", PERIOD, NOW)

    assert result.is_err()
    assert result.error.code == "SEAT_NOT_FOUND"
    mock_uow.invoices.create.assert_not_called()
    mock_uow.commit.assert_not_called()
