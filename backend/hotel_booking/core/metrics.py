"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'hotel_booking_attempts_total',
    'Total booking attempts',
    ['mode', 'status']  # mode: rooms, accommodation, guest; status: success, conflict, not_found, error
)

booking_latency = Histogram(
    'hotel_booking_latency_seconds',
    'Booking creation latency',
    ['mode'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

rooms_assigned = Counter(
    'hotel_rooms_assigned_total',
    'Rooms linked to a newly created booking'
)

# Coupon metrics
coupon_redemptions = Counter(
    'hotel_coupon_redemptions_total',
    'Coupon redemption attempts',
    ['result']  # redeemed, rejected
)

coupon_usage_duplicates = Counter(
    'hotel_coupon_usage_duplicates_total',
    'Duplicate coupon usage inserts that were tolerated'
)

coupon_sweep_deactivated = Counter(
    'hotel_coupon_sweep_deactivated_total',
    'Coupons deactivated by the expiry sweep'
)

coupon_sweep_runs = Counter(
    'hotel_coupon_sweep_runs_total',
    'Expiry sweep executions',
    ['result']  # ok, error
)

# Cache metrics
cache_operations = Counter(
    'hotel_cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(mode: str, status: str):
    """Record booking attempt. Status: success, conflict, not_found, error"""
    booking_attempts.labels(mode=mode, status=status).inc()


def record_coupon_redemption(redeemed: bool):
    result = "redeemed" if redeemed else "rejected"
    coupon_redemptions.labels(result=result).inc()


def record_sweep(deactivated: int, ok: bool = True):
    coupon_sweep_runs.labels(result="ok" if ok else "error").inc()
    if deactivated:
        coupon_sweep_deactivated.inc(deactivated)


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
