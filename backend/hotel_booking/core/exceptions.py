"""
Domain errors for the booking engine.

Every error is an HTTPException so services can raise them directly and
FastAPI renders them. The detail body always has the same shape:

    {"code": "room_unavailable", "message": "...", **context}

`code` lets a client tell a state conflict it can work around (pick another
room) from a missing resource it cannot (nonexistent coupon).
"""

from typing import Any

from fastapi import HTTPException, status


class BookingEngineError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(
            status_code=self.status_code,
            detail={"code": self.code, "message": message, **context},
        )


# --- 404 -------------------------------------------------------------------

class NotFoundError(BookingEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class RoomNotFoundError(NotFoundError):
    code = "room_not_found"

    def __init__(self, room_num: int):
        super().__init__(f"Room with number {room_num} not found.", room_num=room_num)


class CouponNotFoundError(NotFoundError):
    code = "coupon_not_found"

    def __init__(self, coupon_code: str):
        super().__init__(f"Coupon with code '{coupon_code}' not found.", coupon_code=coupon_code)


class CouponUsageNotFoundError(NotFoundError):
    code = "coupon_usage_not_found"

    def __init__(self, coupon_code: str):
        super().__init__(f"Coupon usage with code '{coupon_code}' not found.", coupon_code=coupon_code)


class AccommodationNotFoundError(NotFoundError):
    code = "accommodation_not_found"

    def __init__(self, accommodation_id: int):
        super().__init__(
            f"Accommodation with ID {accommodation_id} not found.",
            accommodation_id=accommodation_id,
        )


class UserNotFoundError(NotFoundError):
    code = "user_not_found"


class BookingNotFoundError(NotFoundError):
    code = "booking_not_found"

    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found.", booking_id=booking_id)


# --- 409 -------------------------------------------------------------------

class ConflictError(BookingEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class RoomUnavailableError(ConflictError):
    code = "room_unavailable"

    def __init__(self, room_nums: list[int]):
        numbers = ", ".join(str(n) for n in room_nums)
        super().__init__(
            f"Room with number {numbers} is already occupied, reserved or under maintenance.",
            room_nums=room_nums,
        )


class InsufficientRoomsError(ConflictError):
    code = "insufficient_rooms"

    def __init__(self, category: str, available: int, requested: int):
        super().__init__(
            f"Not enough available rooms of type {category}. "
            f"Available: {available}, Requested: {requested}",
            category=category,
            available=available,
            requested=requested,
        )


class CouponUnusableError(ConflictError):
    code = "coupon_expired"

    def __init__(self, coupon_code: str):
        super().__init__(f"Coupon with code {coupon_code} is expired.", coupon_code=coupon_code)


class DuplicateCouponError(ConflictError):
    code = "coupon_exists"

    def __init__(self, coupon_code: str):
        super().__init__(f"Coupon with code '{coupon_code}' already exists.", coupon_code=coupon_code)


class DuplicateRoomError(ConflictError):
    code = "room_exists"

    def __init__(self, room_num: int):
        super().__init__(f"Room with number {room_num} already exists.", room_num=room_num)


class DuplicateUserError(ConflictError):
    code = "user_exists"

    def __init__(self, phone: str):
        super().__init__(f"User with phone {phone} already exists.", phone=phone)


# --- 400 -------------------------------------------------------------------

class BadRequestError(BookingEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
