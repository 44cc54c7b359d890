"""
Coupon endpoints: CRUD, usage ledger and an on-demand expiry sweep.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.schemas.coupon import (
    CouponCreate,
    CouponDeleteResponse,
    CouponResponse,
    CouponSweepResponse,
    CouponUpdate,
    CouponUsageResponse,
)
from hotel_booking.services import coupon_service
from hotel_booking.core.metrics import record_sweep

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.post("/", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(coupon_data: CouponCreate, db: AsyncSession = Depends(get_db)):
    return await coupon_service.create_coupon(db, coupon_data)


@router.get("/", response_model=list[CouponResponse])
async def list_coupons(db: AsyncSession = Depends(get_db)):
    return await coupon_service.list_coupons(db)


# Registered before /{coupon_code} so "usage" and "sweep" are not read as codes
@router.get("/usage", response_model=list[CouponUsageResponse])
async def list_coupon_usages(db: AsyncSession = Depends(get_db)):
    return await coupon_service.get_all_usages(db)


@router.get("/usage/{coupon_code}", response_model=list[CouponUsageResponse])
async def get_coupon_usage(coupon_code: str, db: AsyncSession = Depends(get_db)):
    return await coupon_service.get_usages_by_code(db, coupon_code)


@router.post("/sweep", response_model=CouponSweepResponse)
async def sweep_expired_coupons(db: AsyncSession = Depends(get_db)):
    """Run the expiry sweep now instead of waiting for the background worker."""
    deactivated = await coupon_service.deactivate_expired_coupons(db)
    record_sweep(deactivated)
    return CouponSweepResponse(deactivated=deactivated)


@router.get("/{coupon_code}", response_model=CouponResponse)
async def get_coupon(coupon_code: str, db: AsyncSession = Depends(get_db)):
    return await coupon_service.get_coupon_by_code(db, coupon_code)


@router.patch("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: int,
    coupon_data: CouponUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await coupon_service.update_coupon(db, coupon_id, coupon_data)


@router.delete("/{coupon_code}", response_model=CouponDeleteResponse)
async def delete_coupon(coupon_code: str, db: AsyncSession = Depends(get_db)):
    await coupon_service.delete_coupon(db, coupon_code)
    return CouponDeleteResponse(message="Coupon deleted successfully", coupon_code=coupon_code)
