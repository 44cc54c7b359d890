"""
Pydantic schemas for guests/users.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=5, max_length=20, pattern=r"^\+?[0-9]+$")
    email: EmailStr
    address: Optional[str] = Field(None, max_length=500)
    nid: Optional[str] = Field(None, max_length=50)
    passport: Optional[str] = Field(None, max_length=50)
    nationality: Optional[str] = Field(None, max_length=100)
    profession: Optional[str] = Field(None, max_length=100)
    age: Optional[int] = Field(None, gt=0, lt=150)
    marital_status: bool = False
    vehicle_no: Optional[str] = Field(None, max_length=50)
    father_name: Optional[str] = Field(None, max_length=255)


class UserSummary(BaseModel):
    user_id: int
    name: str
    phone: str
    email: str

    model_config = {"from_attributes": True}


class UserResponse(UserSummary):
    address: Optional[str]
    nid: Optional[str]
    passport: Optional[str]
    nationality: Optional[str]
    profession: Optional[str]
    age: Optional[int]
    marital_status: bool
    vehicle_no: Optional[str]
    father_name: Optional[str]
    registration_date: datetime
    role: str
