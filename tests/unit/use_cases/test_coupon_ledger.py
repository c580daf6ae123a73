"""
Unit tests for CouponLedger
"""

import pytest
from unittest.mock import AsyncMock
from datetime import datetime, UTC

from src.app.use_cases.coupons import CouponLedger
from src.domain.entities import Coupon
from src.domain.errors import WriteConflictError

NOW = datetime(2024, 6, 1, 0, 0, tzinfo=UTC)


def _coupon(coupon_id: str, value: int) -> Coupon:
    return Coupon(id=coupon_id, user_id="user-1", code=coupon_id.upper(), name=coupon_id, discount_value=value)


@pytest.mark.asyncio
async def test_coupons_applied_largest_first(mock_uow):
    """Coupons 300 and 150 on a 1000 charge -> discount 450"""
    # Arrange
    coupons = [_coupon("c300", 300), _coupon("c150", 150)]
    mock_uow.coupons.get_available_for_user = AsyncMock(return_value=coupons)
    mock_uow.coupons.mark_used = AsyncMock(return_value=True)

    # Act
    applied, discount = await CouponLedger(mock_uow).apply_discounts("user-1", 1000, "2024-05", NOW)

    # Assert
    assert discount == 450
    assert [entry["coupon_id"] for entry in applied] == ["c300", "c150"]
    assert [entry["discount_value"] for entry in applied] == [300, 150]
    assert mock_uow.coupons.mark_used.call_count == 2
    mock_uow.coupons.mark_used.assert_any_call(coupons[0], "2024-05", NOW)


@pytest.mark.asyncio
async def test_coupon_larger_than_charge_is_consumed_in_full(mock_uow):
    """Discount never exceeds the charge; the coupon is still used up"""
    coupons = [_coupon("c500", 500), _coupon("c100", 100)]
    mock_uow.coupons.get_available_for_user = AsyncMock(return_value=coupons)
    mock_uow.coupons.mark_used = AsyncMock(return_value=True)

    applied, discount = await CouponLedger(mock_uow).apply_discounts("user-1", 300, "2024-05", NOW)

    assert discount == 300
    assert applied == [
        {"coupon_id": "c500", "code": "C500", "name": "c500", "discount_value": 300}
    ]
    mock_uow.coupons.mark_used.assert_called_once_with(coupons[0], "2024-05", NOW)


@pytest.mark.asyncio
async def test_no_coupons_for_zero_charge(mock_uow):
    mock_uow.coupons.get_available_for_user = AsyncMock()

    applied, discount = await CouponLedger(mock_uow).apply_discounts("user-1", 0, "2024-05", NOW)

    assert (applied, discount) == ([], 0)
    mock_uow.coupons.get_available_for_user.assert_not_called()


@pytest.mark.asyncio
async def test_coupon_consumed_concurrently_raises_conflict(mock_uow):
    mock_uow.coupons.get_available_for_user = AsyncMock(return_value=[_coupon("c300", 300)])
    mock_uow.coupons.mark_used = AsyncMock(return_value=False)

    with pytest.raises(WriteConflictError):
        await CouponLedger(mock_uow).apply_discounts("user-1", 1000, "2024-05", NOW)
