"""
Room inventory service.

CONCURRENCY STRATEGY: Row lock + conditional assignment
=======================================================

Problem:
  Two bookings name room 101 at the same time. Both read status=available,
  both link the room to themselves. Result: double booking.

Solution:
  1. Candidate rooms are read with SELECT ... FOR UPDATE, so a racing
     transaction waits until the first one commits or rolls back. Category
     lookups add SKIP LOCKED so racers pick different rooms instead of queueing
     on the same rows.
  2. The assignment itself is a conditional UPDATE:
       UPDATE rooms SET room_status='reserved', booking_id=:b
       WHERE room_id=:r AND (room_status='available' OR booking_id=:b)
     Zero affected rows means someone else got the room first; the caller's
     unit of work rolls everything back.

  The second step is what actually guarantees correctness (it also holds on
  databases that ignore FOR UPDATE, e.g. SQLite); the lock just turns a late
  failure into a wait.
"""

from typing import Optional, Sequence

from sqlalchemy import select, update, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models.room import Room, RoomStatus, UNAVAILABLE_STATUSES
from hotel_booking.schemas.room import RoomCreate
from hotel_booking.core.exceptions import (
    ConflictError,
    DuplicateRoomError,
    InsufficientRoomsError,
    RoomNotFoundError,
    RoomUnavailableError,
)
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)


async def resolve_rooms_by_number(
    db: AsyncSession,
    room_nums: Sequence[int],
    lock: bool = False,
) -> list[Room]:
    """Return rooms in the order requested. Raises for the first number that doesn't exist."""
    query = select(Room).where(Room.room_num.in_(room_nums)).order_by(Room.room_num)
    if lock:
        query = query.with_for_update()
    result = await db.execute(query)
    by_num = {room.room_num: room for room in result.scalars().all()}

    for room_num in room_nums:
        if room_num not in by_num:
            logger.warning("room_lookup_failed", room_num=room_num)
            raise RoomNotFoundError(room_num)

    return [by_num[room_num] for room_num in room_nums]


def ensure_available(rooms: Sequence[Room]) -> None:
    taken = [room.room_num for room in rooms if room.room_status in UNAVAILABLE_STATUSES]
    if taken:
        logger.warning("rooms_unavailable", room_nums=taken)
        raise RoomUnavailableError(taken)


async def find_available_rooms(db: AsyncSession, category: str, count: int) -> list[Room]:
    result = await db.execute(
        select(Room)
        .where(Room.type == category, Room.room_status == RoomStatus.AVAILABLE.value)
        .order_by(Room.room_num)
        .limit(count)
        .with_for_update(skip_locked=True)
    )
    rooms = list(result.scalars().all())

    if len(rooms) < count:
        logger.warning(
            "insufficient_rooms",
            category=category,
            available=len(rooms),
            requested=count,
        )
        raise InsufficientRoomsError(category, available=len(rooms), requested=count)
    return rooms


async def assign_rooms(db: AsyncSession, rooms: Sequence[Room], booking_id: int) -> None:
    """
    Link each room to the booking, one conditional update per room.
    Failures are collected and raised together after every room was tried.
    """
    lost = []
    for room in rooms:
        result = await db.execute(
            update(Room)
            .where(
                Room.room_id == room.room_id,
                or_(
                    Room.room_status == RoomStatus.AVAILABLE.value,
                    Room.booking_id == booking_id,
                ),
            )
            .values(room_status=RoomStatus.RESERVED.value, booking_id=booking_id)
        )
        if result.rowcount == 0:
            lost.append(room.room_num)

    if lost:
        logger.warning("room_assignment_lost_race", booking_id=booking_id, room_nums=lost)
        raise RoomUnavailableError(lost)

    logger.info(
        "rooms_assigned",
        booking_id=booking_id,
        room_nums=[room.room_num for room in rooms],
    )


async def release_booking_rooms(db: AsyncSession, booking_id: int) -> list[int]:
    """Put every room held by the booking back into the pool."""
    result = await db.execute(
        select(Room.room_num).where(Room.booking_id == booking_id).order_by(Room.room_num)
    )
    room_nums = list(result.scalars().all())

    if room_nums:
        await db.execute(
            update(Room)
            .where(Room.booking_id == booking_id)
            .values(room_status=RoomStatus.AVAILABLE.value, booking_id=None)
        )
        logger.info("rooms_released", booking_id=booking_id, room_nums=room_nums)
    return room_nums


# --- Inventory administration ------------------------------------------------

async def create_room(db: AsyncSession, room_data: RoomCreate) -> Room:
    existing = await db.execute(select(Room.room_id).where(Room.room_num == room_data.room_num))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateRoomError(room_data.room_num)

    room = Room(
        room_num=room_data.room_num,
        type=room_data.type,
        room_price=room_data.room_price,
        room_status=room_data.room_status.value,
    )
    db.add(room)
    await db.flush()
    await db.refresh(room)

    logger.info("room_created", room_num=room.room_num, type=room.type)
    return room


async def get_room(db: AsyncSession, room_num: int) -> Room:
    result = await db.execute(select(Room).where(Room.room_num == room_num))
    room = result.scalar_one_or_none()
    if not room:
        raise RoomNotFoundError(room_num)
    return room


async def list_rooms(
    db: AsyncSession,
    category: Optional[str] = None,
    room_status: Optional[RoomStatus] = None,
) -> tuple[list[Room], int]:
    query = select(Room)
    if category is not None:
        query = query.where(Room.type == category)
    if room_status is not None:
        query = query.where(Room.room_status == room_status.value)

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()
    result = await db.execute(query.order_by(Room.room_num))
    return list(result.scalars().all()), total


async def update_room_status(db: AsyncSession, room_num: int, new_status: RoomStatus) -> Room:
    """
    Staff-driven status change (check-in, maintenance, ...).
    Marking a room available drops its booking link; a room held by a booking
    cannot be sent to maintenance until it is released.
    """
    result = await db.execute(
        select(Room).where(Room.room_num == room_num).with_for_update()
    )
    room = result.scalar_one_or_none()
    if not room:
        raise RoomNotFoundError(room_num)

    if new_status == RoomStatus.MAINTENANCE and room.booking_id is not None:
        raise ConflictError(
            f"Room with number {room_num} is held by booking {room.booking_id}.",
            room_num=room_num,
            booking_id=room.booking_id,
        )

    previous = room.room_status
    room.room_status = new_status.value
    if new_status == RoomStatus.AVAILABLE:
        room.booking_id = None
    await db.flush()
    await db.refresh(room)

    logger.info("room_status_changed", room_num=room_num, previous=previous, current=room.room_status)
    return room


async def release_room(db: AsyncSession, room_num: int) -> Room:
    return await update_room_status(db, room_num, RoomStatus.AVAILABLE)
