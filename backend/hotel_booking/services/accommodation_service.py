"""
Accommodation catalog: room categories and their nightly rate.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models.room import Accommodation
from hotel_booking.schemas.room import AccommodationCreate
from hotel_booking.core.exceptions import AccommodationNotFoundError
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)


async def get_accommodation(db: AsyncSession, accommodation_id: int) -> Accommodation:
    result = await db.execute(select(Accommodation).where(Accommodation.id == accommodation_id))
    accommodation = result.scalar_one_or_none()

    if not accommodation:
        logger.warning("accommodation_lookup_failed", accommodation_id=accommodation_id)
        raise AccommodationNotFoundError(accommodation_id)
    return accommodation


async def list_accommodations(db: AsyncSession) -> list[Accommodation]:
    result = await db.execute(select(Accommodation).order_by(Accommodation.id))
    return list(result.scalars().all())


async def create_accommodation(db: AsyncSession, data: AccommodationCreate) -> Accommodation:
    accommodation = Accommodation(**data.model_dump())
    db.add(accommodation)
    await db.flush()
    await db.refresh(accommodation)

    logger.info(
        "accommodation_created",
        accommodation_id=accommodation.id,
        category=accommodation.category,
        price=accommodation.price,
    )
    return accommodation
