from hotel_booking.schemas.user import UserCreate, UserResponse, UserSummary
from hotel_booking.schemas.room import (
    RoomCreate, RoomStatusUpdate, RoomResponse, RoomListResponse,
    AccommodationCreate, AccommodationResponse,
)
from hotel_booking.schemas.coupon import (
    CouponCreate, CouponUpdate, CouponResponse, CouponUsageResponse,
    CouponDeleteResponse, CouponSweepResponse,
)
from hotel_booking.schemas.booking import (
    RoomBookingCreate, AccommodationBookingCreate, GuestBookingCreate, BookingUpdate,
    BookingResponse, BookingListResponse, AccommodationBookingResponse,
    GuestBookingResponse, BookingDeleteResponse,
)

__all__ = [
    "UserCreate", "UserResponse", "UserSummary",
    "RoomCreate", "RoomStatusUpdate", "RoomResponse", "RoomListResponse",
    "AccommodationCreate", "AccommodationResponse",
    "CouponCreate", "CouponUpdate", "CouponResponse", "CouponUsageResponse",
    "CouponDeleteResponse", "CouponSweepResponse",
    "RoomBookingCreate", "AccommodationBookingCreate", "GuestBookingCreate", "BookingUpdate",
    "BookingResponse", "BookingListResponse", "AccommodationBookingResponse",
    "GuestBookingResponse", "BookingDeleteResponse",
]
