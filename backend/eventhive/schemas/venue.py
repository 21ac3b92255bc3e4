"""
Pydantic schemas for public venue discovery and player reviews.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

from eventhive.models.enums import SportType, VenueType
from eventhive.schemas.facility import CourtResponse


class VenueFilters(BaseModel):
    """Discovery filters; only APPROVED facilities with an active court are ever listed."""

    sport_type: Optional[SportType] = None
    venue_type: Optional[VenueType] = None
    location: Optional[str] = Field(None, max_length=120)
    search: Optional[str] = Field(None, max_length=100)
    min_rating: Optional[float] = Field(None, ge=0, le=5)
    sort_by: Literal["rating", "price_low", "price_high", "name"] = "rating"


class VenueResponse(BaseModel):
    id: int
    owner_id: int
    name: str
    description: Optional[str] = None
    address: str
    venue_type: str
    phone: Optional[str] = None
    email: Optional[str] = None
    rating: float
    review_count: int
    min_price: Optional[float] = None
    sport_types: list[str]
    courts: list[CourtResponse]


class VenueListResponse(BaseModel):
    venues: list[VenueResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class ReviewResponse(BaseModel):
    id: int
    facility_id: int
    player_id: int
    player_name: str
    rating: int
    comment: Optional[str] = None
    verified: bool
    created_at: datetime


class ReviewListResponse(BaseModel):
    reviews: list[ReviewResponse]
    total_reviews: int
    average_rating: float
    page: int
    page_size: int
    has_more: bool


class RatingBucket(BaseModel):
    rating: int
    count: int
    percentage: int


class RatingSummary(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: list[RatingBucket]
