from datetime import datetime
from typing import List

from sqlalchemy import or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.coupon_repository import ICouponRepository
from src.domain.entities import Coupon, CouponStatus


class CouponRepository(ICouponRepository):
    """Coupon repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_available_for_user(self, user_id: str, now: datetime) -> List[Coupon]:
        """Unexpired available coupons, largest discount first, ties by id"""
        stmt = (
            select(Coupon)
            .where(
                Coupon.user_id == user_id,
                Coupon.status == CouponStatus.available,
                or_(Coupon.valid_until.is_(None), Coupon.valid_until > now),
            )
            .order_by(Coupon.discount_value.desc(), Coupon.id)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def mark_used(self, coupon: Coupon, period_tag: str, used_at: datetime) -> bool:
        """available -> used; False when the coupon was consumed elsewhere"""
        stmt = (
            update(Coupon)
            .where(Coupon.id == coupon.id, Coupon.status == CouponStatus.available)
            .values(
                status=CouponStatus.used,
                applied_month_period=period_tag,
                used_at=used_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return False
        await self.session.refresh(coupon)
        return True
