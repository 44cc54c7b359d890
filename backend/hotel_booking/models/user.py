"""
Guest/user model. Phone is the natural key used for lookups.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func

from hotel_booking.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    address = Column(String(500), nullable=True)
    nid = Column(String(50), nullable=True)
    passport = Column(String(50), nullable=True)
    nationality = Column(String(100), nullable=True)
    profession = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    marital_status = Column(Boolean, nullable=False, default=False)
    vehicle_no = Column(String(50), nullable=True)
    father_name = Column(String(255), nullable=True)
    registration_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    role = Column(String(20), nullable=False, default="guest")

    def __repr__(self) -> str:
        return f"<User(id={self.user_id}, phone={self.phone})>"
