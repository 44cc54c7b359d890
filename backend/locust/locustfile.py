"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags rooms       # Many clerks fight for one room
  locust -f locustfile.py --tags coupon      # Many guests race for a small coupon
  locust -f locustfile.py --tags throughput  # Cached room board
  locust -f locustfile.py --tags edge        # Bad input
  locust -f locustfile.py                    # All tests

The setup creates its own rooms, accommodation and coupon, so run it against
an empty database (or change RUN_ID).
"""

import random
from datetime import date, timedelta

from locust import HttpUser, task, between, tag, events
from locust.clients import HttpSession

from hotel_booking.core.security import create_access_token

RUN_ID = random.randint(100, 999)
CONTESTED_ROOM = RUN_ID * 1000 + 1
POOL_ROOMS = [RUN_ID * 1000 + n for n in range(2, 52)]
POOL_CATEGORY = f"load-{RUN_ID}"
COUPON_CODE = f"LOAD{RUN_ID}"
COUPON_UNITS = 10

# Shared state
ACCOMMODATION_ID = None
USER_ID = None


def random_phone():
    return f"01{random.randint(100000000, 999999999)}"


def stay():
    checkin = date.today() + timedelta(days=random.randint(1, 60))
    return checkin.isoformat(), (checkin + timedelta(days=random.randint(1, 5))).isoformat()


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Setup: one contested room, a pool of 50 rooms, a 10-unit coupon."""
    global ACCOMMODATION_ID, USER_ID
    if not environment.host:
        return
    client = HttpSession(base_url=environment.host, request_event=environment.events.request, user=None)

    print("\n" + "=" * 60)
    print(f"SETUP: run {RUN_ID}, contested room {CONTESTED_ROOM}, coupon {COUPON_CODE}")
    print("=" * 60)

    client.post("/api/v1/rooms/", json={"room_num": CONTESTED_ROOM, "type": "contested", "room_price": 1000})
    for room_num in POOL_ROOMS:
        client.post("/api/v1/rooms/", json={"room_num": room_num, "type": POOL_CATEGORY, "room_price": 2000})

    resp = client.post(
        "/api/v1/accommodations/",
        json={"name": "Load Test Deluxe", "category": POOL_CATEGORY, "price": 2000},
    )
    if resp.status_code == 201:
        ACCOMMODATION_ID = resp.json()["id"]

    client.post(
        "/api/v1/coupons/",
        json={"coupon_code": COUPON_CODE, "coupon_percent": 20, "quantity": COUPON_UNITS},
    )

    resp = client.post(
        "/api/v1/users/",
        json={"name": "Load Tester", "phone": random_phone(), "email": f"load_{RUN_ID}@example.com"},
    )
    if resp.status_code == 201:
        USER_ID = resp.json()["user_id"]


class RoomContentionUser(HttpUser):
    """
    TEST 1: Double booking - N clerks -> 1 room

    Run: locust -f locustfile.py --tags rooms -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT COUNT(*) FROM rooms WHERE room_num = <CONTESTED_ROOM> AND booking_id IS NOT NULL;
    Should be exactly 1
    """
    wait_time = between(0, 0.1)

    @tag("rooms")
    @task
    def book_contested_room(self):
        checkin, checkout = stay()
        with self.client.post(
            "/api/v1/bookings/",
            json={
                "room_num": [CONTESTED_ROOM],
                "user_phone": random_phone(),
                "checkin_date": checkin,
                "checkout_date": checkout,
            },
            name="/api/v1/bookings/ [contested]",
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409: someone else holds the room
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class CouponRaceUser(HttpUser):
    """
    TEST 2: Over-redemption - many bookings -> 10 coupon units

    Run: locust -f locustfile.py --tags coupon -u 100 -r 50 --run-time 30s

    After test, verify:
      SELECT quantity FROM coupons WHERE coupon_code = '<COUPON_CODE>';      -- 0, never negative
      SELECT COUNT(*) FROM coupon_usages WHERE coupon_code = '<COUPON_CODE>'; -- 10
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = {}
        if USER_ID:
            token = create_access_token(data={"sub": str(USER_ID)})
            self.headers = {"Authorization": f"Bearer {token}"}

    @tag("coupon")
    @task
    def book_with_coupon(self):
        if not ACCOMMODATION_ID or not self.headers:
            return

        checkin, checkout = stay()
        with self.client.post(
            "/api/v1/bookings/accommodation",
            json={
                "accommodation_id": ACCOMMODATION_ID,
                "no_of_rooms": 1,
                "checkin_date": checkin,
                "checkout_date": checkout,
                "coupon_code": COUPON_CODE,
            },
            headers=self.headers,
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                resp.success()  # 409: coupon used up or pool empty
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 3: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. Without Redis: Stop Redis, run again

    Compare avg response time, requests/sec, P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def room_board(self):
        self.client.get(
            f"/api/v1/rooms/?category={POOL_CATEGORY}&room_status=available",
            name="/api/v1/rooms/ [cached]",
        )

    @tag("throughput", "read")
    @task(3)
    def room_detail(self):
        room_num = random.choice(POOL_ROOMS)
        self.client.get(f"/api/v1/rooms/{room_num}", name="/api/v1/rooms/{num}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 4: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    System should NOT crash, return proper error codes.
    """
    wait_time = between(0.5, 1.5)

    def _expect(self, resp, codes):
        if resp.status_code in codes:
            resp.success()
        else:
            resp.failure(f"Expected {codes}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_room(self):
        checkin, checkout = stay()
        with self.client.post(
            "/api/v1/bookings/",
            json={"room_num": [999999], "user_phone": random_phone(), "checkin_date": checkin, "checkout_date": checkout},
            catch_response=True,
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def unknown_coupon(self):
        checkin, checkout = stay()
        with self.client.post(
            "/api/v1/bookings/",
            json={
                "room_num": [random.choice(POOL_ROOMS)],
                "user_phone": random_phone(),
                "checkin_date": checkin,
                "checkout_date": checkout,
                "coupon_code": "NO-SUCH-CODE",
            },
            catch_response=True,
        ) as resp:
            self._expect(resp, (404, 409))

    @tag("edge")
    @task
    def checkout_before_checkin(self):
        with self.client.post(
            "/api/v1/bookings/",
            json={"room_num": [CONTESTED_ROOM], "user_phone": random_phone(), "checkin_date": "2026-12-10", "checkout_date": "2026-12-01"},
            catch_response=True,
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def too_many_rooms(self):
        with self.client.post(
            "/api/v1/bookings/guest",
            json={
                "accommodation_id": ACCOMMODATION_ID or 1,
                "no_of_rooms": 999,
                "checkin_date": "2026-12-01",
                "checkout_date": "2026-12-02",
                "guest_name": "Edge",
                "guest_mobile": random_phone(),
            },
            catch_response=True,
        ) as resp:
            self._expect(resp, (409, 422))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/bookings/",
            data="not json at all",
            catch_response=True,
        ) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.post(
            "/api/v1/bookings/accommodation",
            json={"accommodation_id": 1, "no_of_rooms": 1, "checkin_date": "2026-12-01", "checkout_date": "2026-12-02"},
            catch_response=True,
        ) as resp:
            self._expect(resp, (401,))
