"""
Room inventory endpoints with Redis caching on the listing.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.models.room import RoomStatus
from hotel_booking.schemas.room import RoomCreate, RoomListResponse, RoomResponse, RoomStatusUpdate
from hotel_booking.services import room_service
from hotel_booking.services.cache_service import get_cached_rooms, set_cached_rooms, invalidate_room_cache
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(room_data: RoomCreate, db: AsyncSession = Depends(get_db)):
    room = await room_service.create_room(db, room_data)
    await invalidate_room_cache()
    return room


@router.get("/", response_model=RoomListResponse)
async def list_rooms(
    category: Optional[str] = Query(None),
    room_status: Optional[RoomStatus] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """
    List rooms, optionally filtered by category and status.
    Cached in Redis; any booking or room change invalidates the cache.
    """
    status_key = room_status.value if room_status else None
    cached = await get_cached_rooms(category, status_key)
    if cached:
        logger.info("rooms_list_cache_hit", category=category, room_status=status_key)
        cached["cached"] = True
        return RoomListResponse(**cached)

    rooms, total = await room_service.list_rooms(db, category, room_status)
    response_data = {
        "rooms": [RoomResponse.model_validate(r).model_dump(mode="json") for r in rooms],
        "total": total,
        "cached": False,
    }
    await set_cached_rooms(category, status_key, response_data)
    return RoomListResponse(**response_data)


@router.get("/{room_num}", response_model=RoomResponse)
async def get_room(room_num: int, db: AsyncSession = Depends(get_db)):
    """Single room read, never cached (needs the live status)."""
    return await room_service.get_room(db, room_num)


@router.patch("/{room_num}/status", response_model=RoomResponse)
async def update_room_status(
    room_num: int,
    status_data: RoomStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    room = await room_service.update_room_status(db, room_num, status_data.room_status)
    await invalidate_room_cache()
    return room


@router.post("/{room_num}/release", response_model=RoomResponse)
async def release_room(room_num: int, db: AsyncSession = Depends(get_db)):
    """Make the room available again and drop its booking link."""
    room = await room_service.release_room(db, room_num)
    await invalidate_room_cache()
    return room
