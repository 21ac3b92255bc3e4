"""
Pytest fixtures for test database, client, and authentication.

Tables are created before and dropped after every test for isolation. The
database defaults to in-memory SQLite; set TEST_DATABASE_URL to run the suite
against PostgreSQL instead.
"""

import os

# Must be set before eventhive reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("RESERVATION_CLEANUP_ENABLED", "false")

from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from eventhive.main import app
from eventhive.db.base import Base
from eventhive.db.session import get_db
from eventhive.core.security import create_access_token, hash_password
from eventhive.models import Court, Event, Facility, Ticket, TimeSlot, User
from eventhive.models.enums import EventStatus, FacilityStatus, UserRole

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _make_engine(url: str):
    if url.startswith("sqlite"):
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=False)


test_engine = _make_engine(TEST_DATABASE_URL)
TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop tables for isolation."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB dependency with the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(db: AsyncSession, email: str, role: UserRole = UserRole.PLAYER, name: str = "Test User") -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=hash_password("testpassword123"),
        role=role.value,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    """A PLAYER account."""
    return await make_user(db_session, "test@example.com")


@pytest_asyncio.fixture
async def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "other@example.com", name="Other Player")


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict:
    return headers_for(other_user)


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    """A FACILITY_OWNER account that also organizes the test event."""
    return await make_user(db_session, "owner@example.com", UserRole.FACILITY_OWNER, "Venue Owner")


@pytest_asyncio.fixture
async def owner_headers(owner: User) -> dict:
    return headers_for(owner)


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin@example.com", UserRole.ADMIN, "Admin")


@pytest_asyncio.fixture
async def admin_headers(admin: User) -> dict:
    return headers_for(admin)


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, owner: User) -> Event:
    """A published event 30 days out with room for 100 attendees."""
    start = datetime.now(timezone.utc) + timedelta(days=30)
    event = Event(
        title="Test Concert",
        description="A test event",
        category="MUSIC",
        status=EventStatus.PUBLISHED.value,
        city="Pune",
        location="Test Venue",
        start_date=start,
        end_date=start + timedelta(hours=3),
        max_attendees=100,
        current_attendees=0,
        organizer_id=owner.id,
        published_at=datetime.now(timezone.utc),
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_ticket(db_session: AsyncSession, test_event: Event) -> Ticket:
    """10 GENERAL tickets at 500.00, at most 4 per user."""
    ticket = Ticket(
        event_id=test_event.id,
        name="General Admission",
        ticket_type="GENERAL",
        price=Decimal("500.00"),
        currency="INR",
        quantity=10,
        sold_quantity=0,
        available_quantity=10,
        max_per_user=4,
        min_per_user=1,
        is_active=True,
    )
    db_session.add(ticket)
    await db_session.commit()
    await db_session.refresh(ticket)
    return ticket


@pytest_asyncio.fixture
async def last_unit_ticket(db_session: AsyncSession, test_event: Event) -> Ticket:
    """A ticket with exactly one unit left to sell."""
    ticket = Ticket(
        event_id=test_event.id,
        name="Last Seat",
        ticket_type="VIP",
        price=Decimal("1500.00"),
        currency="INR",
        quantity=1,
        sold_quantity=0,
        available_quantity=1,
        max_per_user=1,
        min_per_user=1,
        is_active=True,
    )
    db_session.add(ticket)
    await db_session.commit()
    await db_session.refresh(ticket)
    return ticket


@pytest_asyncio.fixture
async def test_facility(db_session: AsyncSession, owner: User) -> Facility:
    facility = Facility(
        owner_id=owner.id,
        name="Smash Arena",
        address="12 Court Road",
        venue_type="INDOOR",
        status=FacilityStatus.APPROVED.value,
    )
    db_session.add(facility)
    await db_session.commit()
    await db_session.refresh(facility)
    return facility


@pytest_asyncio.fixture
async def test_court(db_session: AsyncSession, test_facility: Facility) -> Court:
    court = Court(
        facility_id=test_facility.id,
        name="Court 1",
        sport_type="BADMINTON",
        price_per_hour=Decimal("400.00"),
        operating_start_hour=6,
        operating_end_hour=22,
        is_active=True,
    )
    db_session.add(court)
    await db_session.commit()
    await db_session.refresh(court)
    return court


@pytest_asyncio.fixture
async def test_slot(db_session: AsyncSession, test_court: Court) -> TimeSlot:
    """A one-hour slot two days from now, priced from the court rate."""
    start = (datetime.now(timezone.utc) + timedelta(days=2)).replace(minute=0, second=0, microsecond=0)
    slot = TimeSlot(
        court_id=test_court.id,
        start_time=start,
        end_time=start + timedelta(hours=1),
        is_maintenance_blocked=False,
    )
    db_session.add(slot)
    await db_session.commit()
    await db_session.refresh(slot)
    return slot
