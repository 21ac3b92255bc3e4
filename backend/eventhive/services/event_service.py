"""
Event service handling creation, publishing and filtered listings.
"""

from datetime import timedelta

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import EventStatus
from eventhive.models.event import Event
from eventhive.models.user import User
from eventhive.schemas.event import EventCreate, EventFilters
from eventhive.core.clock import ensure_utc, utcnow
from eventhive.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)


async def create_event(db: AsyncSession, event_data: EventCreate, organizer: User) -> Event:
    """Create a new DRAFT event with an empty attendee count."""
    if ensure_utc(event_data.start_date) <= utcnow():
        raise ValidationError("Event start date must be in the future")

    event = Event(
        title=event_data.title,
        description=event_data.description,
        category=event_data.category.value,
        status=EventStatus.DRAFT.value,
        city=event_data.city,
        location=event_data.location,
        start_date=ensure_utc(event_data.start_date),
        end_date=ensure_utc(event_data.end_date),
        max_attendees=event_data.max_attendees,
        current_attendees=0,
        is_free=event_data.is_free,
        featured=event_data.featured,
        trending=event_data.trending,
        organizer_id=organizer.id,
    )
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title, capacity=event.max_attendees)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await db.get(Event, event_id)
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


def ensure_event_manager(event: Event, user: User) -> None:
    if not (user.is_admin or event.organizer_id == user.id):
        raise ForbiddenError("Only the event organizer can manage this event")


async def publish_event(db: AsyncSession, event_id: int, user: User) -> Event:
    event = await get_event(db, event_id)
    ensure_event_manager(event, user)

    if event.status != EventStatus.DRAFT.value:
        raise ConflictError(f"Event is already {event.status}")

    event.status = EventStatus.PUBLISHED.value
    event.published_at = utcnow()
    await db.flush()
    await db.refresh(event)

    logger.info("event_published", event_id=event.id)
    return event


def build_event_predicates(filters: EventFilters) -> list:
    """
    Translate typed filters into an explicit list of SQL predicates.
    Status defaults to PUBLISHED so drafts never leak into public listings.
    """
    status = filters.status or EventStatus.PUBLISHED
    predicates = [Event.status == status.value]

    if filters.search:
        pattern = f"%{filters.search}%"
        predicates.append(
            or_(
                Event.title.ilike(pattern),
                Event.description.ilike(pattern),
                Event.location.ilike(pattern),
            )
        )
    if filters.category:
        predicates.append(Event.category == filters.category.value)
    if filters.city:
        predicates.append(Event.city.ilike(filters.city))
    if filters.start_from:
        predicates.append(Event.start_date >= ensure_utc(filters.start_from))
    if filters.end_before:
        predicates.append(Event.start_date < ensure_utc(filters.end_before))
    if filters.featured is not None:
        predicates.append(Event.featured.is_(filters.featured))
    if filters.trending is not None:
        predicates.append(Event.trending.is_(filters.trending))

    return predicates


async def list_events(
    db: AsyncSession,
    filters: EventFilters,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Event], int]:
    """
    List events with pagination.
    Uses the ix_events_status_start index for the default published listing.
    """
    query = select(Event).where(*build_event_predicates(filters))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    events_query = (
        query
        .order_by(Event.featured.desc(), Event.trending.desc(), Event.start_date.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    result = await db.execute(events_query)
    events = list(result.scalars().all())

    return events, total


async def list_categories(db: AsyncSession) -> list[dict]:
    """Published event counts per category, most popular first."""
    upcoming_from = utcnow() - timedelta(days=1)
    result = await db.execute(
        select(Event.category, func.count(Event.id))
        .where(Event.status == EventStatus.PUBLISHED.value, Event.end_date >= upcoming_from)
        .group_by(Event.category)
        .order_by(func.count(Event.id).desc(), Event.category)
    )
    return [{"category": category, "count": count} for category, count in result.all()]
