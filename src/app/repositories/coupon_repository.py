from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from src.domain.entities import Coupon


class ICouponRepository(ABC):
    """Coupon repository interface - application layer"""

    @abstractmethod
    async def get_available_for_user(self, user_id: str, now: datetime) -> List[Coupon]:
        """Unexpired available coupons of a user, largest discount first"""
        pass

    @abstractmethod
    async def mark_used(
        self, coupon: Coupon, period_tag: str, used_at: datetime
    ) -> bool:
        """
        Flip an available coupon to used. Returns False when the coupon was
        no longer available.
        """
        pass
