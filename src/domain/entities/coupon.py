"""
Coupon Entity

A discount issued to a user, consumed once by a monthly invoice.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_uuid, utc_now

from .enums import CouponStatus


class Coupon(SQLModel, table=True):
    """
    Coupon entity - a user's discount.

    Business Rules:
    - available -> used exactly once, never reverts
    - Consumed only inside the invoice aggregation transaction
    - A consumed coupon is used in full even when only part of its value
      offsets the charge
    - valid_until = None means the coupon does not expire
    """

    __tablename__ = "coupons"

    id: str = Field(default_factory=generate_uuid, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", nullable=False, max_length=128)

    code: str = Field(default="", max_length=64)
    name: str = Field(default="", max_length=255)
    discount_value: int = Field(ge=0)

    status: CouponStatus = Field(default=CouponStatus.available)
    valid_until: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )
    applied_month_period: Optional[str] = Field(default=None, max_length=7)

    # Timestamps
    issued_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    used_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (
        Index("idx_coupon_user_status", "user_id", "status"),
    )
