"""
Pydantic schemas for court time slots and bulk slot generation.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, model_validator

MAX_GENERATION_DAYS = 366


class TimeSlotCreate(BaseModel):
    start_time: datetime
    end_time: datetime
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def check_range(self) -> "TimeSlotCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimeSlotUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)


class TimeSlotFilters(BaseModel):
    day: Optional[date] = None
    is_maintenance_blocked: Optional[bool] = None
    is_booked: Optional[bool] = None


class TimeSlotGenerate(BaseModel):
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    slot_duration: int = Field(60, gt=0, le=24 * 60)
    # 0 = Sunday ... 6 = Saturday
    days_of_week: list[int] = Field(..., min_length=1)
    use_custom_pricing: bool = False
    weekday_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    weekend_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def check_window(self) -> "TimeSlotGenerate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if (self.end_date - self.start_date).days > MAX_GENERATION_DAYS:
            raise ValueError(f"Cannot generate slots for more than {MAX_GENERATION_DAYS} days at once")
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if any(day < 0 or day > 6 for day in self.days_of_week):
            raise ValueError("days_of_week values must be between 0 (Sunday) and 6 (Saturday)")
        return self


class MaintenanceToggle(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class TimeSlotResponse(BaseModel):
    id: int
    court_id: int
    start_time: datetime
    end_time: datetime
    price: Optional[float] = None
    is_maintenance_blocked: bool
    maintenance_reason: Optional[str] = None
    status: str
    waitlist_count: int = 0


class GenerateResult(BaseModel):
    success: bool = True
    created: int
    skipped: int
