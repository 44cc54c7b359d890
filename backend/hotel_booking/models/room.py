"""
Room inventory: physical rooms and the accommodation catalog they belong to.

Key design decisions:
- `room_num` is the natural key guests and staff use; `room_id` is internal
- `booking_id` is the authoritative link from a room to the booking holding it
- Status is a plain string guarded by a CHECK constraint, so a new status is a
  migration rather than an enum type change
- Index on (type, room_status) serves the category pool lookup
"""

import enum

from sqlalchemy import Column, Integer, String, Float, ForeignKey, Index, CheckConstraint

from hotel_booking.db.base import Base, TimestampMixin


class RoomStatus(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


# A room in any of these states can never be handed to a new booking.
UNAVAILABLE_STATUSES = (RoomStatus.OCCUPIED, RoomStatus.RESERVED, RoomStatus.MAINTENANCE)


class Room(Base, TimestampMixin):
    __tablename__ = "rooms"

    room_id = Column(Integer, primary_key=True, index=True)
    room_num = Column(Integer, unique=True, index=True, nullable=False)
    type = Column(String(50), nullable=False)
    room_price = Column(Float, nullable=False)
    room_status = Column(String(20), nullable=False, default=RoomStatus.AVAILABLE.value)
    booking_id = Column(
        Integer,
        ForeignKey("bookings.booking_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("room_price >= 0", name="check_room_price_non_negative"),
        CheckConstraint(
            "room_status IN ('available', 'occupied', 'reserved', 'maintenance')",
            name="check_room_status",
        ),
        Index("ix_rooms_type_status", "type", "room_status"),
    )

    @property
    def is_available(self) -> bool:
        return self.room_status == RoomStatus.AVAILABLE

    def __repr__(self) -> str:
        return f"<Room(num={self.room_num}, type={self.type}, status={self.room_status})>"


class Accommodation(Base, TimestampMixin):
    __tablename__ = "accommodations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, index=True)
    price = Column(Float, nullable=False)
    description = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="check_accommodation_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Accommodation(id={self.id}, category={self.category}, price={self.price})>"
