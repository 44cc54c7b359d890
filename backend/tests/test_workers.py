"""
Tests for the background coupon expiry sweep and the app-level endpoints.
"""

import asyncio

import pytest
from httpx import AsyncClient

from hotel_booking.workers import coupon_expiry
from hotel_booking.workers.coupon_expiry import coupon_expiry_worker, run_coupon_sweep


@pytest.mark.asyncio
async def test_run_coupon_sweep(db_session, session_factory, coupon, expired_coupon, exhausted_coupon):
    assert await run_coupon_sweep(session_factory) == 2
    assert await run_coupon_sweep(session_factory) == 0

    await db_session.refresh(expired_coupon)
    await db_session.refresh(coupon)
    assert expired_coupon.is_active is False
    assert coupon.is_active is True


@pytest.mark.asyncio
async def test_worker_survives_failed_sweep(monkeypatch):
    """A failing sweep is logged and retried; cancellation stops the loop."""
    calls = []

    async def flaky_sweep(session_factory):
        calls.append(session_factory)
        if len(calls) == 1:
            raise RuntimeError("database unavailable")
        return 0

    monkeypatch.setattr(coupon_expiry, "run_coupon_sweep", flaky_sweep)
    monkeypatch.setattr(coupon_expiry, "ERROR_BACKOFF_SECONDS", 0)

    task = asyncio.create_task(coupon_expiry_worker(interval_seconds=0, session_factory=object()))
    while len(calls) < 3:
        await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(calls) >= 3


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics_exposed(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "hotel_booking_attempts_total" in response.text


@pytest.mark.asyncio
async def test_request_id_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "desk-42"})
    assert response.headers["X-Request-ID"] == "desk-42"
