"""
Background coupon expiry sweep.

Runs `deactivate_expired_coupons` every COUPON_SWEEP_INTERVAL_SECONDS in its
own session. The sweep only writes coupons that are already unusable, so it
needs no coordination with bookings in flight.
"""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hotel_booking.db.session import AsyncSessionLocal
from hotel_booking.services.coupon_service import deactivate_expired_coupons
from hotel_booking.core.metrics import record_sweep
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)

ERROR_BACKOFF_SECONDS = 10


async def run_coupon_sweep(session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal) -> int:
    async with session_factory() as session:
        deactivated = await deactivate_expired_coupons(session)
        await session.commit()
    record_sweep(deactivated)
    return deactivated


async def coupon_expiry_worker(
    interval_seconds: int,
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> None:
    logger.info("coupon_sweep_started", interval_seconds=interval_seconds)
    while True:
        try:
            deactivated = await run_coupon_sweep(session_factory)
            logger.debug("coupon_sweep_finished", deactivated=deactivated)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            record_sweep(0, ok=False)
            logger.error("coupon_sweep_failed", error=str(exc))
            await asyncio.sleep(ERROR_BACKOFF_SECONDS)
            continue

        await asyncio.sleep(interval_seconds)
