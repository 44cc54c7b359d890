"""Initial schema: users, accommodations, coupons, bookings, rooms, coupon usages.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("nid", sa.String(50), nullable=True),
        sa.Column("passport", sa.String(50), nullable=True),
        sa.Column("nationality", sa.String(100), nullable=True),
        sa.Column("profession", sa.String(100), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("marital_status", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("vehicle_no", sa.String(50), nullable=True),
        sa.Column("father_name", sa.String(255), nullable=True),
        sa.Column("registration_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'guest'")),
        *_timestamps(),
    )
    op.create_index("ix_users_user_id", "users", ["user_id"])
    # Phone is the lookup key for every walk-in and by-room booking
    op.create_index("ix_users_phone", "users", ["phone"], unique=True)
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "accommodations",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="check_accommodation_price_non_negative"),
    )
    op.create_index("ix_accommodations_id", "accommodations", ["id"])
    op.create_index("ix_accommodations_category", "accommodations", ["category"])

    op.create_table(
        "coupons",
        sa.Column("coupon_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("coupon_code", sa.String(50), nullable=False),
        sa.Column("coupon_percent", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("expire_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        # Last line of defence against concurrent over-redemption
        sa.CheckConstraint("quantity >= 0", name="check_coupon_quantity_non_negative"),
        sa.CheckConstraint("coupon_percent >= 0 AND coupon_percent <= 100", name="check_coupon_percent_range"),
    )
    op.create_index("ix_coupons_coupon_id", "coupons", ["coupon_id"])
    op.create_index("ix_coupons_coupon_code", "coupons", ["coupon_code"], unique=True)

    op.create_table(
        "bookings",
        sa.Column("booking_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("checkin_date", sa.Date(), nullable=False),
        sa.Column("checkout_date", sa.Date(), nullable=False),
        sa.Column("number_of_guests", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("no_of_rooms", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("room_price", sa.Integer(), nullable=False),
        sa.Column("coupon_percent", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_price", sa.Integer(), nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column("type_of_booking", sa.String(20), nullable=False, server_default=sa.text("'online'")),
        sa.Column("booking_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("user_phone", sa.String(20), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("coupon_id", sa.Integer(), sa.ForeignKey("coupons.coupon_id", ondelete="SET NULL"), nullable=True),
        sa.Column("employee_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("number_of_guests > 0", name="check_booking_guests_positive"),
        sa.CheckConstraint("no_of_rooms > 0", name="check_booking_rooms_positive"),
        sa.CheckConstraint("coupon_percent >= 0 AND coupon_percent <= 100", name="check_booking_coupon_percent"),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'partial', 'paid', 'refunded')",
            name="check_booking_payment_status",
        ),
        sa.CheckConstraint(
            "type_of_booking IN ('online', 'walk_in', 'corporate', 'group')",
            name="check_booking_type",
        ),
    )
    op.create_index("ix_bookings_booking_id", "bookings", ["booking_id"])
    op.create_index("ix_bookings_user_phone", "bookings", ["user_phone"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    op.create_index("ix_bookings_coupon_id", "bookings", ["coupon_id"])

    op.create_table(
        "rooms",
        sa.Column("room_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("room_num", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("room_price", sa.Float(), nullable=False),
        sa.Column("room_status", sa.String(20), nullable=False, server_default=sa.text("'available'")),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.booking_id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("room_price >= 0", name="check_room_price_non_negative"),
        sa.CheckConstraint(
            "room_status IN ('available', 'occupied', 'reserved', 'maintenance')",
            name="check_room_status",
        ),
    )
    op.create_index("ix_rooms_room_id", "rooms", ["room_id"])
    op.create_index("ix_rooms_room_num", "rooms", ["room_num"], unique=True)
    op.create_index("ix_rooms_booking_id", "rooms", ["booking_id"])
    # Category pool lookup: WHERE type = :category AND room_status = 'available'
    op.create_index("ix_rooms_type_status", "rooms", ["type", "room_status"])

    op.create_table(
        "coupon_usages",
        sa.Column("usage_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("coupon_code", sa.String(50), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("coupon_id", sa.Integer(), sa.ForeignKey("coupons.coupon_id", ondelete="CASCADE"), nullable=False),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.booking_id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("coupon_id", "booking_id", name="uq_coupon_usage_booking"),
    )
    op.create_index("ix_coupon_usages_usage_id", "coupon_usages", ["usage_id"])
    op.create_index("ix_coupon_usages_coupon_code", "coupon_usages", ["coupon_code"])
    op.create_index("ix_coupon_usages_coupon_id", "coupon_usages", ["coupon_id"])
    op.create_index("ix_coupon_usages_booking_id", "coupon_usages", ["booking_id"])


def downgrade() -> None:
    op.drop_table("coupon_usages")
    op.drop_table("rooms")
    op.drop_table("bookings")
    op.drop_table("coupons")
    op.drop_table("accommodations")
    op.drop_table("users")
