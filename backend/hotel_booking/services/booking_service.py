"""
Booking allocator: turns a booking request into rooms, a price and a record.

ALLOCATION FLOW
===============

Every entry point runs the same steps inside one unit of work:

  1. Resolve rooms        explicit numbers (locked) or N available rooms of a
                          category (locked, SKIP LOCKED)
  2. Check coupon         exists, active, quantity > 0, not expired (locked)
  3. Price                pricing.quote_rooms / pricing.quote_unit_rate
  4. Resolve guest        by phone (provision if absent) or strictly by id
  5. Insert booking
  6. Redeem coupon        atomic conditional decrement
  7. Record usage         duplicate insert tolerated
  8. Assign rooms         conditional update per room, failures collected

Steps 1-4 only read (apart from guest provisioning), so NotFound and
Conflict for missing rooms, taken rooms, short inventory or dead coupons are
raised before anything is written. Steps 6 and 8 can still lose a race
against a concurrent booking; when that happens the unit of work rolls back
the booking, the coupon decrement and every room already linked.

Open decisions:
  - Nights are clamped to at least one for every entry point.
  - Deleting a booking releases its rooms but does not give the coupon
    unit back: the redemption happened and stays in the ledger's history
    (the usage row itself goes away with the booking).
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models.booking import Booking
from hotel_booking.models.coupon import Coupon
from hotel_booking.models.room import Accommodation, Room
from hotel_booking.models.user import User
from hotel_booking.schemas.booking import (
    AccommodationBookingCreate,
    BookingBase,
    BookingUpdate,
    GuestBookingCreate,
    RoomBookingCreate,
)
from hotel_booking.services import pricing
from hotel_booking.services import room_service, coupon_service, user_service
from hotel_booking.services.accommodation_service import get_accommodation
from hotel_booking.db.session import unit_of_work
from hotel_booking.core.exceptions import BookingNotFoundError, ConflictError, NotFoundError
from hotel_booking.core.metrics import booking_latency, record_booking_attempt, rooms_assigned
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AllocationResult:
    booking: Booking
    assigned_rooms: list[int]
    accommodation: Optional[Accommodation] = None


@contextmanager
def _instrumented(mode: str):
    start = time.perf_counter()
    try:
        yield
    except NotFoundError:
        record_booking_attempt(mode, "not_found")
        raise
    except ConflictError:
        record_booking_attempt(mode, "conflict")
        raise
    except Exception:
        record_booking_attempt(mode, "error")
        raise
    else:
        record_booking_attempt(mode, "success")
    finally:
        booking_latency.labels(mode=mode).observe(time.perf_counter() - start)


async def _checked_coupon(db: AsyncSession, coupon_code: Optional[str]) -> Optional[Coupon]:
    if not coupon_code:
        return None
    coupon = await coupon_service.get_coupon_by_code(db, coupon_code, lock=True)
    coupon_service.ensure_usable(coupon)
    return coupon


async def _persist(
    db: AsyncSession,
    data: BookingBase,
    *,
    rooms: Sequence[Room],
    quote: pricing.PriceQuote,
    user: User,
    coupon: Optional[Coupon],
    mode: str,
) -> Booking:
    booking = Booking(
        checkin_date=data.checkin_date,
        checkout_date=data.checkout_date,
        number_of_guests=data.number_of_guests,
        no_of_rooms=len(rooms),
        room_price=quote.subtotal,
        coupon_percent=quote.coupon_percent,
        total_price=quote.total,
        payment_status=data.payment_status.value,
        type_of_booking=data.type_of_booking.value,
        user_phone=user.phone,
        user_id=user.user_id,
        coupon_id=coupon.coupon_id if coupon else None,
        employee_id=data.employee_id,
    )
    db.add(booking)
    await db.flush()

    if coupon:
        await coupon_service.redeem_coupon(db, coupon)
        await coupon_service.record_usage(db, coupon, booking.booking_id)

    await room_service.assign_rooms(db, rooms, booking.booking_id)
    rooms_assigned.inc(len(rooms))

    logger.info(
        "booking_created",
        mode=mode,
        booking_id=booking.booking_id,
        user_id=user.user_id,
        room_nums=[room.room_num for room in rooms],
        nights=quote.nights,
        subtotal=quote.subtotal,
        discount=quote.discount,
        total=quote.total,
        coupon_code=coupon.coupon_code if coupon else None,
    )
    return booking


async def create_room_booking(db: AsyncSession, data: RoomBookingCreate) -> AllocationResult:
    """Book specific rooms by number for the guest with `user_phone`."""
    with _instrumented("rooms"):
        async with unit_of_work(db):
            rooms = await room_service.resolve_rooms_by_number(db, data.room_num, lock=True)
            room_service.ensure_available(rooms)
            coupon = await _checked_coupon(db, data.coupon_code)

            quote = pricing.quote_rooms(
                [room.room_price for room in rooms],
                data.checkin_date,
                data.checkout_date,
                coupon.coupon_percent if coupon else 0,
            )
            user = await user_service.get_or_create_by_phone(
                db,
                data.user_phone,
                lambda: user_service.build_minimal_guest(data.user_phone),
            )
            booking = await _persist(
                db, data, rooms=rooms, quote=quote, user=user, coupon=coupon, mode="rooms"
            )
            booking_id = booking.booking_id

    return AllocationResult(
        booking=await get_booking(db, booking_id),
        assigned_rooms=list(data.room_num),
    )


async def _create_from_accommodation(
    db: AsyncSession,
    data: AccommodationBookingCreate,
    *,
    resolve_user,
    mode: str,
) -> AllocationResult:
    with _instrumented(mode):
        async with unit_of_work(db):
            accommodation = await get_accommodation(db, data.accommodation_id)
            rooms = await room_service.find_available_rooms(
                db, accommodation.category, data.no_of_rooms
            )
            coupon = await _checked_coupon(db, data.coupon_code)

            quote = pricing.quote_unit_rate(
                accommodation.price,
                data.no_of_rooms,
                data.checkin_date,
                data.checkout_date,
                coupon.coupon_percent if coupon else 0,
            )
            user = await resolve_user()
            booking = await _persist(
                db, data, rooms=rooms, quote=quote, user=user, coupon=coupon, mode=mode
            )
            booking_id = booking.booking_id
            room_nums = [room.room_num for room in rooms]

    return AllocationResult(
        booking=await get_booking(db, booking_id),
        assigned_rooms=room_nums,
        accommodation=accommodation,
    )


async def create_accommodation_booking(
    db: AsyncSession,
    data: AccommodationBookingCreate,
    user_id: int,
) -> AllocationResult:
    """Book N rooms of a category for an existing, signed-in user."""

    async def resolve_user():
        return await user_service.get_user_by_id(db, user_id)

    return await _create_from_accommodation(db, data, resolve_user=resolve_user, mode="accommodation")


async def create_guest_booking(db: AsyncSession, data: GuestBookingCreate) -> AllocationResult:
    """Book N rooms of a category for a walk-in guest, registering them if new."""

    async def resolve_user():
        return await user_service.get_or_create_by_phone(
            db,
            data.guest_mobile,
            lambda: user_service.build_guest_from_profile(data),
        )

    return await _create_from_accommodation(db, data, resolve_user=resolve_user, mode="guest")


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.booking_id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if not booking:
        raise BookingNotFoundError(booking_id)
    return booking


async def list_bookings(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    user_phone: Optional[str] = None,
) -> tuple[list[Booking], int]:
    query = select(Booking)
    if user_phone:
        query = query.where(Booking.user_phone == user_phone)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()
    result = await db.execute(
        query
        .order_by(Booking.booking_date.desc(), Booking.booking_id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def update_booking(db: AsyncSession, booking_id: int, data: BookingUpdate) -> Booking:
    booking = await get_booking(db, booking_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if hasattr(value, "value"):
            value = value.value
        setattr(booking, field, value)
    await db.flush()

    logger.info("booking_updated", booking_id=booking_id, fields=sorted(changes))
    return await get_booking(db, booking_id)


async def delete_booking(db: AsyncSession, booking_id: int) -> list[int]:
    """Remove the booking and hand its rooms back. Returns the released room numbers."""
    async with unit_of_work(db):
        booking = await get_booking(db, booking_id)
        released = await room_service.release_booking_rooms(db, booking_id)
        await db.delete(booking)

    logger.info(
        "booking_deleted",
        booking_id=booking_id,
        released_rooms=released,
        coupon_restored=False,
    )
    return released
