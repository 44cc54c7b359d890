"""
Stay pricing.

Pure functions, no database access. Two ways to build a subtotal:

  - quote_rooms:      concrete rooms picked by number. Each nightly price is
                      rounded on its own, summed, multiplied by nights, and
                      the product is rounded.
  - quote_unit_rate:  a catalog rate for N interchangeable rooms. rate x N x
                      nights is computed unrounded and rounded once at the end.

Both apply the same coupon rule:

  discount = round(subtotal * percent / 100)
  total    = subtotal - discount

Rounding is half away from zero. Nights are never fewer than one, so a
same-day stay is billed as a single night.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

SECONDS_PER_DAY = 24 * 60 * 60
MIN_NIGHTS = 1.0

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class PriceQuote:
    nights: float
    subtotal: int
    discount: int
    total: int
    coupon_percent: int = 0


def round_half_away(value: Union[int, float, Decimal]) -> int:
    """Round to the nearest integer, .5 going away from zero (2.5 -> 3, -2.5 -> -3)."""
    # str() keeps the shortest float repr, so 2.675 stays 2.675 and not 2.67499...
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def stay_nights(checkin: DateLike, checkout: DateLike) -> float:
    nights = (checkout - checkin).total_seconds() / SECONDS_PER_DAY
    return max(MIN_NIGHTS, nights)


def coupon_discount(subtotal: int, coupon_percent: int = 0) -> int:
    if not coupon_percent:
        return 0
    return round_half_away(subtotal * coupon_percent / 100)


def _quote(nights: float, subtotal: int, coupon_percent: int) -> PriceQuote:
    discount = coupon_discount(subtotal, coupon_percent)
    return PriceQuote(
        nights=nights,
        subtotal=subtotal,
        discount=discount,
        total=subtotal - discount,
        coupon_percent=coupon_percent or 0,
    )


def quote_rooms(
    room_prices: Iterable[float],
    checkin: DateLike,
    checkout: DateLike,
    coupon_percent: int = 0,
) -> PriceQuote:
    nights = stay_nights(checkin, checkout)
    per_night = sum(round_half_away(price) for price in room_prices)
    subtotal = round_half_away(per_night * nights)
    return _quote(nights, subtotal, coupon_percent)


def quote_unit_rate(
    unit_price: float,
    room_count: int,
    checkin: DateLike,
    checkout: DateLike,
    coupon_percent: int = 0,
) -> PriceQuote:
    nights = stay_nights(checkin, checkout)
    subtotal = round_half_away(unit_price * room_count * nights)
    return _quote(nights, subtotal, coupon_percent)
