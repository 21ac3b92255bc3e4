"""
Event endpoints with Redis caching on list operations.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.enums import EventCategory, EventStatus
from eventhive.models.user import User
from eventhive.schemas.event import CategoryCount, EventCreate, EventFilters, EventListResponse, EventResponse
from eventhive.services.event_service import create_event, get_event, list_categories, list_events, publish_event
from eventhive.services.cache_service import get_cached_events, set_cached_events, invalidate_event_cache
from eventhive.core.security import get_current_user
from eventhive.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/events", tags=["Events"])


def event_filters(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[EventCategory] = None,
    city: Optional[str] = Query(None, max_length=120),
    status: Optional[EventStatus] = None,
    start_from: Optional[datetime] = None,
    end_before: Optional[datetime] = None,
    featured: Optional[bool] = None,
    trending: Optional[bool] = None,
) -> EventFilters:
    return EventFilters(
        search=search,
        category=category,
        city=city,
        status=status,
        start_from=start_from,
        end_before=end_before,
        featured=featured,
        trending=trending,
    )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new DRAFT event. Requires authentication."""
    event = await create_event(db, event_data, user)
    await invalidate_event_cache()
    return event


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    filters: EventFilters = Depends(event_filters),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List events with filters and pagination.
    Results are cached in Redis; the cache is invalidated when events are
    created or published, or attendee counts change.
    """
    filter_key = filters.cache_key()
    cached = await get_cached_events(filter_key, page, page_size)
    if cached:
        logger.info("events_list_cache_hit", page=page)
        cached["cached"] = True
        return EventListResponse(**cached)

    events, total = await list_events(db, filters, page, page_size)

    response_data = {
        "events": [EventResponse.model_validate(e).model_dump() for e in events],
        "total": total,
        "page": page,
        "page_size": page_size,
        "cached": False,
    }
    await set_cached_events(filter_key, page, page_size, response_data)

    return EventListResponse(**response_data)


@router.get("/categories", response_model=list[CategoryCount])
async def list_categories_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_categories(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(event_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single event by ID. Not cached (needs live attendee counts)."""
    return await get_event(db, event_id)


@router.post("/{event_id}/publish", response_model=EventResponse)
async def publish_event_endpoint(
    event_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    event = await publish_event(db, event_id, user)
    await invalidate_event_cache()
    return event
