"""
Accommodation catalog endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.schemas.room import AccommodationCreate, AccommodationResponse
from hotel_booking.services import accommodation_service

router = APIRouter(prefix="/accommodations", tags=["Accommodations"])


@router.post("/", response_model=AccommodationResponse, status_code=status.HTTP_201_CREATED)
async def create_accommodation(data: AccommodationCreate, db: AsyncSession = Depends(get_db)):
    return await accommodation_service.create_accommodation(db, data)


@router.get("/", response_model=list[AccommodationResponse])
async def list_accommodations(db: AsyncSession = Depends(get_db)):
    return await accommodation_service.list_accommodations(db)


@router.get("/{accommodation_id}", response_model=AccommodationResponse)
async def get_accommodation(accommodation_id: int, db: AsyncSession = Depends(get_db)):
    return await accommodation_service.get_accommodation(db, accommodation_id)
