"""
Pydantic schemas for facilities and courts.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, model_validator

from eventhive.models.enums import SportType, VenueType


class FacilityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    address: str = Field(..., min_length=1, max_length=500)
    venue_type: VenueType = VenueType.INDOOR
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None


class FacilityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    venue_type: Optional[VenueType] = None
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[EmailStr] = None


class FacilityReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class FacilityResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str]
    address: str
    venue_type: str
    phone: Optional[str] = None
    email: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    rating: float = 0
    review_count: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}


def _check_hours(start: Optional[int], end: Optional[int]) -> None:
    if start is not None and end is not None and start >= end:
        raise ValueError("operating_start_hour must be before operating_end_hour")


class CourtCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    sport_type: SportType
    price_per_hour: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    operating_start_hour: int = Field(6, ge=0, le=23)
    operating_end_hour: int = Field(22, ge=0, le=23)

    @model_validator(mode="after")
    def check_hours(self) -> "CourtCreate":
        _check_hours(self.operating_start_hour, self.operating_end_hour)
        return self


class CourtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    sport_type: Optional[SportType] = None
    price_per_hour: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    operating_start_hour: Optional[int] = Field(None, ge=0, le=23)
    operating_end_hour: Optional[int] = Field(None, ge=0, le=23)

    @model_validator(mode="after")
    def check_hours(self) -> "CourtUpdate":
        _check_hours(self.operating_start_hour, self.operating_end_hour)
        return self


class CourtResponse(BaseModel):
    id: int
    facility_id: int
    name: str
    sport_type: str
    price_per_hour: float
    operating_start_hour: int
    operating_end_hour: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
