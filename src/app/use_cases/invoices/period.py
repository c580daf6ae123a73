"""
Billing period arithmetic.

A billing period is one calendar month in the billing timezone, expressed
as a half-open UTC interval [start, end).
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from src.domain.base import as_utc

DEFAULT_BILLING_TIMEZONE = "Asia/Tokyo"

PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class BillingPeriod:
    period_string: str  # YYYY-MM
    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return self.start <= as_utc(value) < self.end


def _month_bounds(year: int, month: int, tz: ZoneInfo) -> BillingPeriod:
    local_start = datetime(year, month, 1, tzinfo=tz)
    if month == 12:
        local_end = datetime(year + 1, 1, 1, tzinfo=tz)
    else:
        local_end = datetime(year, month + 1, 1, tzinfo=tz)
    return BillingPeriod(
        period_string=f"{year:04d}-{month:02d}",
        start=as_utc(local_start),
        end=as_utc(local_end),
    )


def billing_period(now: datetime, tz: str = DEFAULT_BILLING_TIMEZONE) -> BillingPeriod:
    """The calendar month before the one containing now, in timezone tz"""
    zone = ZoneInfo(tz)
    local_now = as_utc(now).astimezone(zone)
    last_of_previous = local_now.replace(day=1) - timedelta(days=1)
    return _month_bounds(last_of_previous.year, last_of_previous.month, zone)


def billing_period_for(period_string: str, tz: str = DEFAULT_BILLING_TIMEZONE) -> BillingPeriod:
    """
    Period for an explicit YYYY-MM string.

    Raises:
        ValueError: period_string is not a valid YYYY-MM month
    """
    match = PERIOD_PATTERN.match(period_string or "")
    if not match:
        raise ValueError(f"Invalid billing period: {period_string!r}")

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid billing period: {period_string!r}")

    return _month_bounds(year, month, ZoneInfo(tz))
