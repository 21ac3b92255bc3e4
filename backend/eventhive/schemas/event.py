"""
Pydantic schemas for event-related request/response validation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator

from eventhive.models.enums import EventCategory, EventStatus


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    category: EventCategory = EventCategory.OTHER
    city: Optional[str] = Field(None, max_length=120)
    location: Optional[str] = Field(None, max_length=255)
    start_date: datetime
    end_date: datetime
    max_attendees: int = Field(..., gt=0, le=1000000)
    is_free: bool = False
    featured: bool = False
    trending: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "EventCreate":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventFilters(BaseModel):
    """Typed listing filters; each set field becomes one SQL predicate."""

    search: Optional[str] = Field(None, max_length=100)
    category: Optional[EventCategory] = None
    city: Optional[str] = Field(None, max_length=120)
    status: Optional[EventStatus] = None
    start_from: Optional[datetime] = None
    end_before: Optional[datetime] = None
    featured: Optional[bool] = None
    trending: Optional[bool] = None

    def cache_key(self) -> str:
        parts = [f"{name}={value}" for name, value in sorted(self.model_dump(mode="json", exclude_none=True).items())]
        return "&".join(parts)


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str]
    category: str
    status: str
    city: Optional[str]
    location: Optional[str]
    start_date: datetime
    end_date: datetime
    max_attendees: int
    current_attendees: int
    is_free: bool
    featured: bool
    trending: bool
    organizer_id: int
    published_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class EventListResponse(BaseModel):
    events: list[EventResponse]
    total: int
    page: int
    page_size: int
    cached: bool = False


class CategoryCount(BaseModel):
    category: str
    count: int
