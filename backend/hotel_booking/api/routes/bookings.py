"""
Booking endpoints: the three allocation modes plus read/patch/delete.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.schemas.booking import (
    AccommodationBookingCreate,
    AccommodationBookingResponse,
    BookingDeleteResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    GuestBookingCreate,
    GuestBookingResponse,
    GuestInfo,
    RoomBookingCreate,
)
from hotel_booking.schemas.room import AccommodationResponse
from hotel_booking.services import booking_service
from hotel_booking.services.cache_service import invalidate_room_cache
from hotel_booking.core.security import get_current_user_id
from hotel_booking.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _accommodation_payload(result: booking_service.AllocationResult) -> dict:
    return {
        **BookingResponse.model_validate(result.booking).model_dump(),
        "accommodation": AccommodationResponse.model_validate(result.accommodation),
        "assigned_rooms": result.assigned_rooms,
    }


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_room_booking(
    booking_data: RoomBookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Book specific rooms by number.

    Unknown phone numbers are registered as minimal guest profiles.
    Returns 404 for an unknown room or coupon and 409 when a room is taken
    or the coupon is used up.
    """
    result = await booking_service.create_room_booking(db, booking_data)
    await invalidate_room_cache()
    return result.booking


@router.post(
    "/accommodation",
    response_model=AccommodationBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_accommodation_booking(
    booking_data: AccommodationBookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Book N rooms of an accommodation category for the signed-in user."""
    result = await booking_service.create_accommodation_booking(db, booking_data, user_id)
    await invalidate_room_cache()
    return AccommodationBookingResponse(**_accommodation_payload(result))


@router.post("/guest", response_model=GuestBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_guest_booking(
    booking_data: GuestBookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """Book N rooms of an accommodation category for a walk-in guest."""
    result = await booking_service.create_guest_booking(db, booking_data)
    await invalidate_room_cache()
    return GuestBookingResponse(
        **_accommodation_payload(result),
        guest_info=GuestInfo(
            name=booking_data.guest_name,
            mobile=booking_data.guest_mobile,
            type=booking_data.guest_type,
        ),
    )


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    user_phone: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    bookings, total = await booking_service.list_bookings(db, page, page_size, user_phone)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    return await booking_service.get_booking(db, booking_id)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await booking_service.update_booking(db, booking_id, booking_data)


@router.delete("/{booking_id}", response_model=BookingDeleteResponse)
async def delete_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Delete a booking and release its rooms. Coupon units are not restored."""
    released = await booking_service.delete_booking(db, booking_id)
    await invalidate_room_cache()
    return BookingDeleteResponse(
        message="Booking deleted successfully",
        booking_id=booking_id,
        released_rooms=released,
    )
