"""
Tests for booking endpoints: the three allocation modes, failure atomicity,
and read/patch/delete.

Requests run in their own sessions, so assertions re-read rows with
db_session.refresh().
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from hotel_booking.core.security import create_access_token
from hotel_booking.models import Booking, CouponUsage, User
from hotel_booking.services import room_service

BOOKINGS = "/api/v1/bookings/"


def room_payload(room_nums, **overrides) -> dict:
    payload = {
        "room_num": room_nums,
        "user_phone": "01700000001",
        "checkin_date": "2026-11-01",
        "checkout_date": "2026-11-03",
    }
    payload.update(overrides)
    return payload


def accommodation_payload(accommodation_id: int, no_of_rooms: int, **overrides) -> dict:
    payload = {
        "accommodation_id": accommodation_id,
        "no_of_rooms": no_of_rooms,
        "checkin_date": "2026-11-01",
        "checkout_date": "2026-11-04",
    }
    payload.update(overrides)
    return payload


async def count(db_session, model) -> int:
    return (await db_session.execute(select(func.count()).select_from(model))).scalar()


async def assert_room_free(db_session, room):
    await db_session.refresh(room)
    assert room.room_status == "available"
    assert room.booking_id is None


# --- Book by room number ---------------------------------------------------

@pytest.mark.asyncio
async def test_book_rooms_by_number(client: AsyncClient, db_session, rooms, test_user):
    """Two rooms for two nights: (1000 + 1500) * 2."""
    response = await client.post(BOOKINGS, json=room_payload([101, 102]))
    assert response.status_code == 201
    data = response.json()
    assert data["room_price"] == 5000
    assert data["total_price"] == 5000
    assert data["coupon_percent"] == 0
    assert data["no_of_rooms"] == 2
    assert data["room_numbers"] == [101, 102]
    assert data["user"]["user_id"] == test_user.user_id
    assert data["coupon"] is None

    for num in (101, 102):
        room = rooms[num]
        await db_session.refresh(room)
        assert room.room_status == "reserved"
        assert room.booking_id == data["booking_id"]


@pytest.mark.asyncio
async def test_book_rooms_with_coupon(client: AsyncClient, db_session, rooms, test_user, coupon):
    response = await client.post(BOOKINGS, json=room_payload([101, 102], coupon_code="SAVE10"))
    assert response.status_code == 201
    data = response.json()
    assert data["room_price"] == 5000
    assert data["total_price"] == 4500
    assert data["coupon_percent"] == 10
    assert data["coupon"]["coupon_code"] == "SAVE10"

    await db_session.refresh(coupon)
    assert coupon.quantity == 4

    usage = (
        await db_session.execute(
            select(CouponUsage).where(CouponUsage.booking_id == data["booking_id"])
        )
    ).scalar_one()
    assert usage.coupon_code == "SAVE10"
    assert usage.coupon_id == coupon.coupon_id


@pytest.mark.asyncio
async def test_same_day_stay_billed_as_one_night(client: AsyncClient, rooms, test_user):
    response = await client.post(
        BOOKINGS,
        json=room_payload([101, 102], checkin_date="2026-11-01", checkout_date="2026-11-01"),
    )
    assert response.status_code == 201
    assert response.json()["total_price"] == 2500


@pytest.mark.asyncio
async def test_book_occupied_room(client: AsyncClient, db_session, rooms, test_user, coupon):
    """One taken room fails the whole request and touches nothing else."""
    response = await client.post(BOOKINGS, json=room_payload([101, 105], coupon_code="SAVE10"))
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "room_unavailable"
    assert detail["room_nums"] == [105]
    assert "105" in detail["message"]

    await assert_room_free(db_session, rooms[101])
    await db_session.refresh(coupon)
    assert coupon.quantity == 5
    assert await count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_book_room_under_maintenance(client: AsyncClient, rooms, test_user):
    response = await client.post(BOOKINGS, json=room_payload([104]))
    assert response.status_code == 409
    assert response.json()["detail"]["room_nums"] == [104]


@pytest.mark.asyncio
async def test_room_cannot_be_booked_twice(client: AsyncClient, db_session, rooms, test_user):
    first = await client.post(BOOKINGS, json=room_payload([101]))
    assert first.status_code == 201

    second = await client.post(BOOKINGS, json=room_payload([101, 102]))
    assert second.status_code == 409
    assert second.json()["detail"]["room_nums"] == [101]

    await db_session.refresh(rooms[101])
    assert rooms[101].booking_id == first.json()["booking_id"]
    await assert_room_free(db_session, rooms[102])
    assert await count(db_session, Booking) == 1


@pytest.mark.asyncio
async def test_book_unknown_room(client: AsyncClient, db_session, rooms, test_user):
    response = await client.post(BOOKINGS, json=room_payload([101, 999]))
    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["code"] == "room_not_found"
    assert detail["room_num"] == 999

    await assert_room_free(db_session, rooms[101])


@pytest.mark.asyncio
async def test_book_with_exhausted_coupon(client: AsyncClient, db_session, rooms, test_user, exhausted_coupon):
    response = await client.post(BOOKINGS, json=room_payload([101], coupon_code="EMPTY"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "coupon_expired"

    await db_session.refresh(exhausted_coupon)
    assert exhausted_coupon.quantity == 0
    await assert_room_free(db_session, rooms[101])
    assert await count(db_session, Booking) == 0


@pytest.mark.asyncio
async def test_book_with_expired_coupon(client: AsyncClient, db_session, rooms, test_user, expired_coupon):
    response = await client.post(BOOKINGS, json=room_payload([101], coupon_code="OLD"))
    assert response.status_code == 409

    await db_session.refresh(expired_coupon)
    assert expired_coupon.quantity == 5


@pytest.mark.asyncio
async def test_book_with_unknown_coupon(client: AsyncClient, db_session, rooms, test_user):
    response = await client.post(BOOKINGS, json=room_payload([101], coupon_code="NOPE"))
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "coupon_not_found"
    await assert_room_free(db_session, rooms[101])


@pytest.mark.asyncio
async def test_lost_room_race_rolls_back_everything(
    client: AsyncClient, db_session, rooms, test_user, coupon, monkeypatch
):
    """
    A room taken between the availability check and the assignment undoes the
    booking row, the coupon decrement, the usage record and the other rooms.
    """
    monkeypatch.setattr(room_service, "ensure_available", lambda rooms: None)

    response = await client.post(BOOKINGS, json=room_payload([101, 105], coupon_code="SAVE10"))
    assert response.status_code == 409
    assert response.json()["detail"]["room_nums"] == [105]

    await assert_room_free(db_session, rooms[101])
    await db_session.refresh(coupon)
    assert coupon.quantity == 5
    assert await count(db_session, Booking) == 0
    assert await count(db_session, CouponUsage) == 0


@pytest.mark.asyncio
async def test_unknown_phone_gets_minimal_guest(client: AsyncClient, db_session, rooms):
    response = await client.post(BOOKINGS, json=room_payload([101], user_phone="01999999999"))
    assert response.status_code == 201
    user = response.json()["user"]
    assert user["name"] == "Guest"
    assert user["phone"] == "01999999999"
    assert user["email"] == "guest_01999999999@guests.hotelbooking.com"

    again = await client.post(BOOKINGS, json=room_payload([102], user_phone="01999999999"))
    assert again.status_code == 201
    assert again.json()["user"]["user_id"] == user["user_id"]
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_checkout_before_checkin_rejected(client: AsyncClient, rooms, test_user):
    response = await client.post(
        BOOKINGS,
        json=room_payload([101], checkin_date="2026-11-03", checkout_date="2026-11-01"),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_room_numbers_rejected(client: AsyncClient, rooms, test_user):
    response = await client.post(BOOKINGS, json=room_payload([101, 101]))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_empty_room_list_rejected(client: AsyncClient, rooms, test_user):
    response = await client.post(BOOKINGS, json=room_payload([]))
    assert response.status_code == 422


# --- Book by accommodation (signed-in user) --------------------------------

@pytest.mark.asyncio
async def test_book_accommodation(client: AsyncClient, db_session, auth_headers, test_user, rooms, deluxe, coupon):
    """2 rooms at 2000 for 3 nights = 12000, minus 10%."""
    response = await client.post(
        f"{BOOKINGS}accommodation",
        json=accommodation_payload(deluxe.id, 2, coupon_code="SAVE10"),
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["room_price"] == 12000
    assert data["total_price"] == 10800
    assert data["no_of_rooms"] == 2
    assert sorted(data["assigned_rooms"]) == [101, 102]
    assert data["accommodation"]["category"] == "deluxe"
    assert data["user"]["user_id"] == test_user.user_id

    for num in data["assigned_rooms"]:
        await db_session.refresh(rooms[num])
        assert rooms[num].room_status == "reserved"
        assert rooms[num].booking_id == data["booking_id"]


@pytest.mark.asyncio
async def test_book_accommodation_insufficient_rooms(
    client: AsyncClient, db_session, auth_headers, rooms, deluxe, coupon
):
    """Deluxe has two free rooms (104 is under maintenance)."""
    response = await client.post(
        f"{BOOKINGS}accommodation",
        json=accommodation_payload(deluxe.id, 3, coupon_code="SAVE10"),
        headers=auth_headers,
    )
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "insufficient_rooms"
    assert detail["available"] == 2
    assert detail["requested"] == 3
    assert detail["message"] == "Not enough available rooms of type deluxe. Available: 2, Requested: 3"

    await assert_room_free(db_session, rooms[101])
    await assert_room_free(db_session, rooms[102])
    await db_session.refresh(coupon)
    assert coupon.quantity == 5


@pytest.mark.asyncio
async def test_book_accommodation_unauthenticated(client: AsyncClient, rooms, deluxe):
    response = await client.post(f"{BOOKINGS}accommodation", json=accommodation_payload(deluxe.id, 1))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_accommodation_invalid_token(client: AsyncClient, rooms, deluxe):
    response = await client.post(
        f"{BOOKINGS}accommodation",
        json=accommodation_payload(deluxe.id, 1),
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_book_accommodation_unknown_user(client: AsyncClient, db_session, rooms, deluxe):
    token = create_access_token(data={"sub": "9999"})
    response = await client.post(
        f"{BOOKINGS}accommodation",
        json=accommodation_payload(deluxe.id, 1),
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "user_not_found"
    await assert_room_free(db_session, rooms[101])


@pytest.mark.asyncio
async def test_book_unknown_accommodation(client: AsyncClient, auth_headers, rooms):
    response = await client.post(
        f"{BOOKINGS}accommodation",
        json=accommodation_payload(4242, 1),
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"]["accommodation_id"] == 4242


# --- Walk-in guest ---------------------------------------------------------

def guest_payload(accommodation_id: int, mobile: str, **overrides) -> dict:
    payload = accommodation_payload(
        accommodation_id,
        1,
        guest_name="Walk In",
        guest_mobile=mobile,
        guest_nationality="Bangladeshi",
        guest_type="vip",
        type_of_booking="walk_in",
    )
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_guest_booking_registers_guest(client: AsyncClient, db_session, rooms, deluxe):
    response = await client.post(f"{BOOKINGS}guest", json=guest_payload(deluxe.id, "01811111111"))
    assert response.status_code == 201
    data = response.json()
    assert data["guest_info"] == {"name": "Walk In", "mobile": "01811111111", "type": "vip"}
    assert data["user"]["name"] == "Walk In"
    assert data["type_of_booking"] == "walk_in"
    assert data["assigned_rooms"] == [101]
    assert data["total_price"] == 6000

    user = (await db_session.execute(select(User).where(User.phone == "01811111111"))).scalar_one()
    assert user.nationality == "Bangladeshi"
    assert user.role == "guest"


@pytest.mark.asyncio
async def test_guest_booking_reuses_known_phone(client: AsyncClient, db_session, rooms, deluxe, test_user):
    response = await client.post(f"{BOOKINGS}guest", json=guest_payload(deluxe.id, test_user.phone))
    assert response.status_code == 201
    assert response.json()["user"]["user_id"] == test_user.user_id
    assert response.json()["user"]["name"] == "Test Guest"
    assert await count(db_session, User) == 1


@pytest.mark.asyncio
async def test_guest_booking_missing_name(client: AsyncClient, rooms, deluxe):
    payload = guest_payload(deluxe.id, "01811111111")
    del payload["guest_name"]
    response = await client.post(f"{BOOKINGS}guest", json=payload)
    assert response.status_code == 422


# --- Read / update / delete ------------------------------------------------

@pytest.mark.asyncio
async def test_get_booking(client: AsyncClient, rooms, test_user, coupon):
    created = await client.post(BOOKINGS, json=room_payload([101], coupon_code="SAVE10"))
    booking_id = created.json()["booking_id"]

    response = await client.get(f"{BOOKINGS}{booking_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["room_numbers"] == [101]
    assert data["user"]["phone"] == test_user.phone
    assert data["coupon"]["quantity"] == 4


@pytest.mark.asyncio
async def test_get_booking_not_found(client: AsyncClient, db_session):
    response = await client.get(f"{BOOKINGS}12345")
    assert response.status_code == 404
    assert response.json()["detail"]["booking_id"] == 12345


@pytest.mark.asyncio
async def test_list_bookings(client: AsyncClient, rooms, test_user):
    await client.post(BOOKINGS, json=room_payload([101]))
    await client.post(BOOKINGS, json=room_payload([102], user_phone="01999999999"))

    response = await client.get(BOOKINGS)
    assert response.status_code == 200
    assert response.json()["total"] == 2

    filtered = await client.get(BOOKINGS, params={"user_phone": "01999999999"})
    data = filtered.json()
    assert data["total"] == 1
    assert data["bookings"][0]["room_numbers"] == [102]


@pytest.mark.asyncio
async def test_update_booking(client: AsyncClient, rooms, test_user):
    created = await client.post(BOOKINGS, json=room_payload([101]))
    booking_id = created.json()["booking_id"]

    response = await client.patch(
        f"{BOOKINGS}{booking_id}",
        json={"payment_status": "paid", "number_of_guests": 3},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["payment_status"] == "paid"
    assert data["number_of_guests"] == 3
    assert data["total_price"] == created.json()["total_price"]


@pytest.mark.asyncio
async def test_delete_booking_releases_rooms(client: AsyncClient, db_session, rooms, test_user, coupon):
    created = await client.post(BOOKINGS, json=room_payload([101, 102], coupon_code="SAVE10"))
    booking_id = created.json()["booking_id"]

    response = await client.delete(f"{BOOKINGS}{booking_id}")
    assert response.status_code == 200
    assert response.json()["released_rooms"] == [101, 102]

    await assert_room_free(db_session, rooms[101])
    await assert_room_free(db_session, rooms[102])
    # The redemption is not undone
    await db_session.refresh(coupon)
    assert coupon.quantity == 4
    assert await count(db_session, CouponUsage) == 0

    assert (await client.get(f"{BOOKINGS}{booking_id}")).status_code == 404

    rebook = await client.post(BOOKINGS, json=room_payload([101, 102]))
    assert rebook.status_code == 201


@pytest.mark.asyncio
async def test_delete_booking_not_found(client: AsyncClient, db_session):
    response = await client.delete(f"{BOOKINGS}12345")
    assert response.status_code == 404
