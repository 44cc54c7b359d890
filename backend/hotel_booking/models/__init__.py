from hotel_booking.models.user import User
from hotel_booking.models.room import Room, RoomStatus, Accommodation
from hotel_booking.models.coupon import Coupon, CouponUsage
from hotel_booking.models.booking import Booking, BookingType, PaymentStatus

__all__ = [
    "User",
    "Room", "RoomStatus", "Accommodation",
    "Coupon", "CouponUsage",
    "Booking", "BookingType", "PaymentStatus",
]
