"""
Pydantic schemas for coupons and their usage ledger.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CouponCreate(BaseModel):
    coupon_code: str = Field(..., min_length=1, max_length=50)
    coupon_percent: int = Field(..., ge=0, le=100)
    quantity: int = Field(..., ge=0)
    is_active: bool = True
    expire_at: Optional[datetime] = None
    created_by: Optional[int] = None


class CouponUpdate(BaseModel):
    coupon_percent: Optional[int] = Field(None, ge=0, le=100)
    quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    expire_at: Optional[datetime] = None


class CouponResponse(BaseModel):
    coupon_id: int
    coupon_code: str
    coupon_percent: int
    quantity: int
    is_active: bool
    expire_at: Optional[datetime]
    created_by: Optional[int]

    model_config = {"from_attributes": True}


class CouponUsageResponse(BaseModel):
    usage_id: int
    coupon_code: str
    used_at: datetime
    coupon_id: int
    booking_id: int
    coupon: CouponResponse

    model_config = {"from_attributes": True}


class CouponDeleteResponse(BaseModel):
    message: str
    coupon_code: str


class CouponSweepResponse(BaseModel):
    deactivated: int
