"""
Guest resolution: find a user by phone or id, or provision one.

Two provisioning policies exist:
  - build_minimal_guest: only a phone number is known (staff booking rooms
    by number). Every other profile field gets a placeholder.
  - build_guest_from_profile: a walk-in guest filled in the full form.

get_or_create_by_phone tolerates two requests provisioning the same phone at
once: the loser of the unique-constraint race re-reads the winner's row.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models.user import User
from hotel_booking.schemas.booking import GuestBookingCreate
from hotel_booking.schemas.user import UserCreate
from hotel_booking.core.config import get_settings
from hotel_booking.core.exceptions import DuplicateUserError, UserNotFoundError
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

MINIMAL_GUEST_NAME = "Guest"
GUEST_ROLE = "guest"


def guest_email(phone: str) -> str:
    return f"guest_{phone.lstrip('+')}@{settings.GUEST_EMAIL_DOMAIN}"


def build_minimal_guest(phone: str) -> User:
    return User(
        name=MINIMAL_GUEST_NAME,
        email=guest_email(phone),
        phone=phone,
        marital_status=False,
        registration_date=datetime.now(timezone.utc),
        role=GUEST_ROLE,
    )


def build_guest_from_profile(data: GuestBookingCreate) -> User:
    return User(
        name=data.guest_name,
        email=guest_email(data.guest_mobile),
        phone=data.guest_mobile,
        address=data.guest_address,
        nid=data.guest_passport_nid,
        passport=data.guest_passport_nid,
        nationality=data.guest_nationality,
        profession=data.guest_profession,
        age=data.guest_age,
        marital_status=False,
        vehicle_no=data.guest_vehicle_no or "",
        father_name=data.guest_father_name,
        registration_date=datetime.now(timezone.utc),
        role=GUEST_ROLE,
    )


async def find_user_by_phone(db: AsyncSession, phone: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.phone == phone))
    return result.scalar_one_or_none()


async def get_user_by_phone(db: AsyncSession, phone: str) -> User:
    user = await find_user_by_phone(db, phone)
    if not user:
        raise UserNotFoundError(f"User with phone {phone} not found.", phone=phone)
    return user


async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.user_id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        logger.warning("user_lookup_failed", user_id=user_id)
        raise UserNotFoundError("User not found.", user_id=user_id)
    return user


async def get_or_create_by_phone(
    db: AsyncSession,
    phone: str,
    factory: Callable[[], User],
) -> User:
    user = await find_user_by_phone(db, phone)
    if user:
        return user

    user = factory()
    try:
        async with db.begin_nested():
            db.add(user)
    except IntegrityError:
        logger.info("guest_provisioned_concurrently", phone=phone)
        return await get_user_by_phone(db, phone)

    logger.info("guest_provisioned", user_id=user.user_id, phone=phone, name=user.name)
    return user


async def create_user(db: AsyncSession, user_data: UserCreate) -> User:
    if await find_user_by_phone(db, user_data.phone):
        logger.warning("user_create_failed", reason="phone_exists", phone=user_data.phone)
        raise DuplicateUserError(user_data.phone)

    user = User(**user_data.model_dump(), role=GUEST_ROLE)
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_created", user_id=user.user_id, phone=user.phone)
    return user
