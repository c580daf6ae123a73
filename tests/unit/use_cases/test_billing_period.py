"""
Unit tests for billing period arithmetic (Asia/Tokyo months, UTC bounds)
"""

import pytest
from datetime import datetime, UTC

from src.app.use_cases.invoices import billing_period, billing_period_for


def test_previous_month_in_billing_timezone():
    # 2024-03-01 00:30 in Tokyo is still February 29th in UTC
    period = billing_period(datetime(2024, 2, 29, 15, 30, tzinfo=UTC))

    assert period.period_string == "2024-02"
    assert period.start == datetime(2024, 1, 31, 15, 0, tzinfo=UTC)
    assert period.end == datetime(2024, 2, 29, 15, 0, tzinfo=UTC)


def test_last_evening_of_month_in_tokyo_bills_the_month_before():
    period = billing_period(datetime(2024, 2, 29, 14, 0, tzinfo=UTC))

    assert period.period_string == "2024-01"


def test_january_rolls_back_to_december():
    period = billing_period(datetime(2024, 1, 15, 3, 0, tzinfo=UTC))

    assert period.period_string == "2023-12"
    assert period.end == datetime(2023, 12, 31, 15, 0, tzinfo=UTC)


def test_period_is_half_open():
    period = billing_period_for("2024-05")

    assert period.contains(period.start)
    assert not period.contains(period.end)


def test_explicit_period_in_utc():
    period = billing_period_for("2024-05", tz="UTC")

    assert period.start == datetime(2024, 5, 1, tzinfo=UTC)
    assert period.end == datetime(2024, 6, 1, tzinfo=UTC)


@pytest.mark.parametrize("value", ["2024-13", "2024-00", "24-01", "2024/05", ""])
def test_invalid_period_strings(value):
    with pytest.raises(ValueError):
        billing_period_for(value)
