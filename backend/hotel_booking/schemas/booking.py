"""
Pydantic schemas for booking-related request/response validation.

Three create payloads match the three ways a booking can be made:
  RoomBookingCreate            staff picks rooms by number for a phone number
  AccommodationBookingCreate   signed-in user books N rooms of a category
  GuestBookingCreate           walk-in guest books N rooms of a category
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from hotel_booking.models.booking import BookingType, PaymentStatus
from hotel_booking.schemas.coupon import CouponResponse
from hotel_booking.schemas.room import AccommodationResponse
from hotel_booking.schemas.user import UserSummary


class BookingBase(BaseModel):
    checkin_date: date
    checkout_date: date
    number_of_guests: int = Field(default=1, gt=0, le=50)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    type_of_booking: BookingType = BookingType.ONLINE
    coupon_code: Optional[str] = Field(None, min_length=1, max_length=50)
    employee_id: Optional[int] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.checkout_date < self.checkin_date:
            raise ValueError("checkout_date must not be before checkin_date")
        return self


class RoomBookingCreate(BookingBase):
    room_num: list[int] = Field(..., min_length=1, max_length=20)
    user_phone: str = Field(..., min_length=5, max_length=20, pattern=r"^\+?[0-9]+$")

    @field_validator("room_num")
    @classmethod
    def unique_rooms(cls, value: list[int]) -> list[int]:
        if len(set(value)) != len(value):
            raise ValueError("room_num must not contain duplicates")
        return value


class AccommodationBookingCreate(BookingBase):
    accommodation_id: int
    no_of_rooms: int = Field(default=1, gt=0, le=20)


class GuestBookingCreate(AccommodationBookingCreate):
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_mobile: str = Field(..., min_length=5, max_length=20, pattern=r"^\+?[0-9]+$")
    guest_address: Optional[str] = Field(None, max_length=500)
    guest_passport_nid: Optional[str] = Field(None, max_length=50)
    guest_nationality: Optional[str] = Field(None, max_length=100)
    guest_profession: Optional[str] = Field(None, max_length=100)
    guest_age: Optional[int] = Field(None, gt=0, lt=150)
    guest_vehicle_no: Optional[str] = Field(None, max_length=50)
    guest_father_name: Optional[str] = Field(None, max_length=255)
    guest_type: Optional[str] = Field(None, max_length=50)


class BookingUpdate(BaseModel):
    """Fields that can change after allocation. Rooms, dates and prices cannot."""

    number_of_guests: Optional[int] = Field(None, gt=0, le=50)
    payment_status: Optional[PaymentStatus] = None
    type_of_booking: Optional[BookingType] = None
    employee_id: Optional[int] = None


class BookingResponse(BaseModel):
    booking_id: int
    checkin_date: date
    checkout_date: date
    number_of_guests: int
    no_of_rooms: int
    room_price: int
    coupon_percent: int
    total_price: int
    payment_status: PaymentStatus
    type_of_booking: BookingType
    booking_date: datetime
    user_phone: str
    room_numbers: list[int]
    user: UserSummary
    coupon: Optional[CouponResponse] = None
    employee_id: Optional[int] = None

    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class AccommodationBookingResponse(BookingResponse):
    accommodation: AccommodationResponse
    assigned_rooms: list[int]


class GuestInfo(BaseModel):
    name: str
    mobile: str
    type: Optional[str] = None


class GuestBookingResponse(AccommodationBookingResponse):
    guest_info: GuestInfo


class BookingDeleteResponse(BaseModel):
    message: str
    booking_id: int
    released_rooms: list[int]
