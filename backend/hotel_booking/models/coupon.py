"""
Coupon ledger models.

Key design decisions:
- `quantity >= 0` is enforced by the database as the last line of defence
  against concurrent over-redemption
- (coupon_id, booking_id) is unique on usages so a re-submitted redemption
  can never produce a second audit row
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    func,
)
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything we store is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Coupon(Base, TimestampMixin):
    __tablename__ = "coupons"

    coupon_id = Column(Integer, primary_key=True, index=True)
    coupon_code = Column(String(50), unique=True, index=True, nullable=False)
    coupon_percent = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_by = Column(Integer, nullable=True)  # employee id, owned by the management service
    expire_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="check_coupon_quantity_non_negative"),
        CheckConstraint(
            "coupon_percent >= 0 AND coupon_percent <= 100",
            name="check_coupon_percent_range",
        ),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expire_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return as_utc(self.expire_at) < now

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        return bool(self.is_active) and self.quantity > 0 and not self.is_expired(now)

    def __repr__(self) -> str:
        return f"<Coupon(code={self.coupon_code}, percent={self.coupon_percent}, qty={self.quantity})>"


class CouponUsage(Base):
    __tablename__ = "coupon_usages"

    usage_id = Column(Integer, primary_key=True, index=True)
    coupon_code = Column(String(50), nullable=False, index=True)
    used_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    coupon_id = Column(
        Integer,
        ForeignKey("coupons.coupon_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    booking_id = Column(
        Integer,
        ForeignKey("bookings.booking_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    coupon = relationship("Coupon", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("coupon_id", "booking_id", name="uq_coupon_usage_booking"),
    )

    def __repr__(self) -> str:
        return f"<CouponUsage(code={self.coupon_code}, booking={self.booking_id})>"
