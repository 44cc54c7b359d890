"""
Pydantic schemas for rooms and the accommodation catalog.
"""

from typing import Optional
from pydantic import BaseModel, Field

from hotel_booking.models.room import RoomStatus


class RoomCreate(BaseModel):
    room_num: int = Field(..., gt=0)
    type: str = Field(..., min_length=1, max_length=50)
    room_price: float = Field(..., ge=0)
    room_status: RoomStatus = RoomStatus.AVAILABLE


class RoomStatusUpdate(BaseModel):
    room_status: RoomStatus


class RoomResponse(BaseModel):
    room_id: int
    room_num: int
    type: str
    room_price: float
    room_status: RoomStatus
    booking_id: Optional[int]

    model_config = {"from_attributes": True}


class RoomListResponse(BaseModel):
    rooms: list[RoomResponse]
    total: int
    cached: bool = False


class AccommodationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=50)
    price: float = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=1000)


class AccommodationResponse(BaseModel):
    id: int
    name: str
    category: str
    price: float
    description: Optional[str]

    model_config = {"from_attributes": True}
