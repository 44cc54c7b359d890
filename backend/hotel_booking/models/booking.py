"""
Booking model representing a guest's stay across one or more rooms.

Key design decisions:
- Prices are integer snapshots taken at creation time; later coupon or room
  price changes never rewrite a booking
- `coupon_percent` is copied from the coupon so the discount can be audited
  even after the coupon is edited or deleted
- Rooms point at the booking (rooms.booking_id), not the other way round
"""

import enum

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship

from hotel_booking.db.base import Base, TimestampMixin


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    REFUNDED = "refunded"


class BookingType(str, enum.Enum):
    ONLINE = "online"
    WALK_IN = "walk_in"
    CORPORATE = "corporate"
    GROUP = "group"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    booking_id = Column(Integer, primary_key=True, index=True)
    checkin_date = Column(Date, nullable=False)
    checkout_date = Column(Date, nullable=False)
    number_of_guests = Column(Integer, nullable=False, default=1)
    no_of_rooms = Column(Integer, nullable=False, default=1)
    room_price = Column(Integer, nullable=False)
    coupon_percent = Column(Integer, nullable=False, default=0)
    total_price = Column(Integer, nullable=False)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    type_of_booking = Column(String(20), nullable=False, default=BookingType.ONLINE.value)
    booking_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    user_phone = Column(String(20), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False, index=True)
    coupon_id = Column(
        Integer,
        ForeignKey("coupons.coupon_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    employee_id = Column(Integer, nullable=True)  # handled-by, owned by the management service

    # Relationships
    user = relationship("User", lazy="selectin")
    coupon = relationship("Coupon", lazy="selectin")
    rooms = relationship("Room", lazy="selectin", order_by="Room.room_num")
    coupon_usage = relationship(
        "CouponUsage",
        lazy="selectin",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("number_of_guests > 0", name="check_booking_guests_positive"),
        CheckConstraint("no_of_rooms > 0", name="check_booking_rooms_positive"),
        CheckConstraint("coupon_percent >= 0 AND coupon_percent <= 100", name="check_booking_coupon_percent"),
        CheckConstraint(
            "payment_status IN ('pending', 'partial', 'paid', 'refunded')",
            name="check_booking_payment_status",
        ),
        CheckConstraint(
            "type_of_booking IN ('online', 'walk_in', 'corporate', 'group')",
            name="check_booking_type",
        ),
    )

    @property
    def room_numbers(self) -> list[int]:
        return [room.room_num for room in self.rooms]

    def __repr__(self) -> str:
        return f"<Booking(id={self.booking_id}, user={self.user_phone}, total={self.total_price})>"
