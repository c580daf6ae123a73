"""
Coupon Use Cases
"""

from .coupon_ledger import CouponLedger

__all__ = ["CouponLedger"]
