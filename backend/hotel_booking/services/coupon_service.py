"""
Coupon ledger: lookup, redemption, usage audit and the expiry sweep.

CONCURRENCY STRATEGY: Atomic conditional decrement
==================================================

Problem:
  Two bookings redeem the last unit of a coupon simultaneously. Both read
  quantity=1, both write quantity=0. One redemption is lost; with a plain
  `quantity - 1` both succeed and quantity goes to -1.

Solution:
  UPDATE coupons SET quantity = quantity - 1
  WHERE coupon_id = :id AND quantity > 0 AND is_active

  The predicate and the write happen in one statement, so the database
  serializes them per row. A racer that arrives after the last unit sees zero
  affected rows and gets a Conflict. The CHECK (quantity >= 0) constraint is
  the final safety net.

Usage records are guarded by a (coupon_id, booking_id) unique constraint.
A duplicate insert is a re-submission of a redemption that already happened,
so it is logged and the existing record is returned instead of failing.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models.coupon import Coupon, CouponUsage
from hotel_booking.schemas.coupon import CouponCreate, CouponUpdate
from hotel_booking.core.exceptions import (
    CouponNotFoundError,
    CouponUnusableError,
    CouponUsageNotFoundError,
    DuplicateCouponError,
    NotFoundError,
)
from hotel_booking.core.metrics import coupon_usage_duplicates, record_coupon_redemption
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)


async def get_coupon_by_code(db: AsyncSession, coupon_code: str, lock: bool = False) -> Coupon:
    query = select(Coupon).where(Coupon.coupon_code == coupon_code)
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    coupon = result.scalar_one_or_none()

    if not coupon:
        logger.warning("coupon_lookup_failed", coupon_code=coupon_code)
        raise CouponNotFoundError(coupon_code)
    return coupon


def ensure_usable(coupon: Coupon, now: Optional[datetime] = None) -> None:
    if not coupon.is_usable(now):
        logger.warning(
            "coupon_unusable",
            coupon_code=coupon.coupon_code,
            is_active=coupon.is_active,
            quantity=coupon.quantity,
        )
        raise CouponUnusableError(coupon.coupon_code)


async def redeem_coupon(db: AsyncSession, coupon: Coupon) -> Coupon:
    """Take exactly one unit off the coupon, or raise if none is left."""
    result = await db.execute(
        update(Coupon)
        .where(
            Coupon.coupon_id == coupon.coupon_id,
            Coupon.quantity > 0,
            Coupon.is_active.is_(True),
        )
        .values(quantity=Coupon.quantity - 1)
    )

    if result.rowcount == 0:
        record_coupon_redemption(False)
        logger.warning("coupon_redeem_rejected", coupon_code=coupon.coupon_code)
        raise CouponUnusableError(coupon.coupon_code)

    await db.refresh(coupon)
    record_coupon_redemption(True)
    logger.info("coupon_redeemed", coupon_code=coupon.coupon_code, remaining=coupon.quantity)
    return coupon


async def _find_usage(db: AsyncSession, coupon_id: int, booking_id: int) -> Optional[CouponUsage]:
    result = await db.execute(
        select(CouponUsage).where(
            CouponUsage.coupon_id == coupon_id,
            CouponUsage.booking_id == booking_id,
        )
    )
    return result.scalar_one_or_none()


async def record_usage(db: AsyncSession, coupon: Coupon, booking_id: int) -> CouponUsage:
    existing = await _find_usage(db, coupon.coupon_id, booking_id)
    if existing:
        coupon_usage_duplicates.inc()
        logger.info("coupon_usage_already_recorded", coupon_code=coupon.coupon_code, booking_id=booking_id)
        return existing

    usage = CouponUsage(
        coupon_code=coupon.coupon_code,
        used_at=datetime.now(timezone.utc),
        coupon_id=coupon.coupon_id,
        booking_id=booking_id,
    )
    try:
        # Savepoint so a losing insert does not poison the booking transaction
        async with db.begin_nested():
            db.add(usage)
    except IntegrityError:
        coupon_usage_duplicates.inc()
        logger.info("coupon_usage_already_recorded", coupon_code=coupon.coupon_code, booking_id=booking_id)
        return await _find_usage(db, coupon.coupon_id, booking_id)

    logger.info("coupon_usage_recorded", coupon_code=coupon.coupon_code, booking_id=booking_id)
    return usage


async def deactivate_expired_coupons(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """
    Flip is_active off for coupons that are expired or used up.
    Only touches rows that are still active, so running it again is a no-op.
    """
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        update(Coupon)
        .where(
            Coupon.is_active.is_(True),
            or_(Coupon.expire_at < now, Coupon.quantity <= 0),
        )
        .values(is_active=False)
        .execution_options(synchronize_session="fetch")
    )
    deactivated = result.rowcount or 0
    if deactivated:
        logger.info("coupons_deactivated", count=deactivated)
    return deactivated


# --- Coupon administration ---------------------------------------------------

async def create_coupon(db: AsyncSession, coupon_data: CouponCreate) -> Coupon:
    existing = await db.execute(
        select(Coupon.coupon_id).where(Coupon.coupon_code == coupon_data.coupon_code)
    )
    if existing.scalar_one_or_none() is not None:
        logger.warning("coupon_create_failed", reason="code_exists", coupon_code=coupon_data.coupon_code)
        raise DuplicateCouponError(coupon_data.coupon_code)

    coupon = Coupon(**coupon_data.model_dump())
    db.add(coupon)
    await db.flush()
    await db.refresh(coupon)

    logger.info("coupon_created", coupon_code=coupon.coupon_code, quantity=coupon.quantity)
    return coupon


async def list_coupons(db: AsyncSession) -> list[Coupon]:
    result = await db.execute(select(Coupon).order_by(Coupon.coupon_id))
    return list(result.scalars().all())


async def update_coupon(db: AsyncSession, coupon_id: int, coupon_data: CouponUpdate) -> Coupon:
    result = await db.execute(select(Coupon).where(Coupon.coupon_id == coupon_id).with_for_update())
    coupon = result.scalar_one_or_none()
    if not coupon:
        raise NotFoundError(f"Coupon with ID {coupon_id} not found.", coupon_id=coupon_id)

    changes = coupon_data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(coupon, field, value)
    await db.flush()
    await db.refresh(coupon)

    logger.info("coupon_updated", coupon_code=coupon.coupon_code, fields=sorted(changes))
    return coupon


async def delete_coupon(db: AsyncSession, coupon_code: str) -> None:
    coupon = await get_coupon_by_code(db, coupon_code)
    await db.delete(coupon)
    await db.flush()
    logger.info("coupon_deleted", coupon_code=coupon_code)


async def get_all_usages(db: AsyncSession) -> list[CouponUsage]:
    result = await db.execute(select(CouponUsage).order_by(CouponUsage.used_at.desc()))
    return list(result.scalars().all())


async def get_usages_by_code(db: AsyncSession, coupon_code: str) -> list[CouponUsage]:
    result = await db.execute(
        select(CouponUsage)
        .where(CouponUsage.coupon_code == coupon_code)
        .order_by(CouponUsage.used_at.desc())
    )
    usages = list(result.scalars().all())
    if not usages:
        raise CouponUsageNotFoundError(coupon_code)
    return usages
