"""
User Entity

Represents a registered patron who can occupy seats and be billed.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_uuid, utc_now


class User(SQLModel, table=True):
    """
    User entity - a patron of the seating service.

    Business Rules:
    - Only users with registration_completed are included in monthly billing
    - payment_customer_ref / default_payment_method_ref are set by the
      payment provider onboarding flow; settlement requires both
    """

    __tablename__ = "users"

    id: str = Field(default_factory=generate_uuid, primary_key=True, max_length=128)
    email: str = Field(default="", max_length=255)
    display_name: str = Field(default="", max_length=255)

    registration_completed: bool = Field(default=True)

    # Payment provider references (Stripe customer / payment method)
    payment_customer_ref: Optional[str] = Field(default=None, max_length=255)
    default_payment_method_ref: Optional[str] = Field(default=None, max_length=255)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )

    __table_args__ = (Index("idx_user_registration_completed", "registration_completed"),)
