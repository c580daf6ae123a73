"""
Coupon Ledger

Consumes a user's available coupons against a charge. Runs inside the
caller's unit of work so coupon consumption commits or rolls back together
with the invoice it discounts.
"""

import logging
from datetime import datetime
from typing import List, Tuple

from src.app.services.unit_of_work import UnitOfWork
from src.domain.errors import WriteConflictError

logger = logging.getLogger(__name__)


class CouponLedger:
    """
    Business Rules:
    - Candidates are the user's available, unexpired coupons, largest
      discount first
    - Greedy: each coupon offsets min(discount_value, remaining charge)
    - A consumed coupon is marked used in full, tagged with the period
    - Marking is conditional on status = available; a lost race raises
      WriteConflictError so the surrounding transaction is retried
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def apply_discounts(
        self, user_id: str, charge_amount: int, period_tag: str, now: datetime
    ) -> Tuple[List[dict], int]:
        """
        Returns:
            (applied coupon snapshots, total discount); total discount never
            exceeds charge_amount
        """
        if charge_amount <= 0:
            return [], 0

        coupons = await self.uow.coupons.get_available_for_user(user_id, now)

        applied = []
        remaining = charge_amount
        for coupon in coupons:
            if remaining <= 0:
                break

            discount = min(coupon.discount_value, remaining)
            if not await self.uow.coupons.mark_used(coupon, period_tag, now):
                raise WriteConflictError(f"Coupon {coupon.id} is no longer available")

            applied.append(
                {
                    "coupon_id": coupon.id,
                    "code": coupon.code,
                    "name": coupon.name,
                    "discount_value": discount,
                }
            )
            remaining -= discount

        total_discount = charge_amount - remaining
        if applied:
            logger.info(
                f"Applied {len(applied)} coupon(s) for user {user_id} in {period_tag}: "
                f"-{total_discount}"
            )
        return applied, total_discount
