"""
Tests for court time slots: CRUD, derived status, maintenance and bulk generation.
"""

import pytest
from datetime import date, datetime, time, timezone, timedelta
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy import select, func

from eventhive.models import CourtBooking, TimeSlot
from eventhive.models.enums import SlotStatus
from eventhive.schemas.time_slot import TimeSlotGenerate
from eventhive.services.time_slot_service import day_of_week, derive_slot_status, iter_candidate_slots

# 2030-01-06 is a Sunday
SUNDAY = date(2030, 1, 6)


def _generate_payload(**overrides) -> dict:
    payload = {
        "start_date": "2030-01-06",
        "end_date": "2030-01-12",
        "start_time": "09:00",
        "end_time": "12:00",
        "slot_duration": 60,
        "days_of_week": [0, 1, 6],
        "use_custom_pricing": True,
        "weekday_price": "300.00",
        "weekend_price": "500.00",
    }
    payload.update(overrides)
    return payload


async def _confirm_booking(db, slot: TimeSlot, player_id: int) -> None:
    db.add(CourtBooking(
        time_slot_id=slot.id,
        court_id=slot.court_id,
        player_id=player_id,
        total_price=Decimal("400.00"),
        status="CONFIRMED",
    ))
    await db.commit()


def test_day_of_week_starts_on_sunday():
    assert day_of_week(SUNDAY) == 0
    assert day_of_week(SUNDAY + timedelta(days=1)) == 1
    assert day_of_week(SUNDAY + timedelta(days=6)) == 6


def test_candidates_are_utc_and_fill_the_window():
    data = TimeSlotGenerate(**_generate_payload(days_of_week=[1], slot_duration=90))
    candidates = list(iter_candidate_slots(data))

    # 09:00-10:30 and 10:30-12:00 on the Monday only
    assert [(s.hour, s.minute) for s, _, _ in candidates] == [(9, 0), (10, 30)]
    assert all(s.tzinfo == timezone.utc for s, _, _ in candidates)
    assert all(s.date() == date(2030, 1, 7) for s, _, _ in candidates)
    assert {price for _, _, price in candidates} == {Decimal("300.00")}


def test_derived_status_maintenance_wins():
    slot = TimeSlot(is_maintenance_blocked=True)
    assert derive_slot_status(slot, has_active_booking=True) == SlotStatus.MAINTENANCE
    slot.is_maintenance_blocked = False
    assert derive_slot_status(slot, has_active_booking=True) == SlotStatus.BOOKED
    assert derive_slot_status(slot, has_active_booking=False) == SlotStatus.AVAILABLE


@pytest.mark.asyncio
async def test_generate_slots(client: AsyncClient, owner_headers, test_court):
    response = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate", json=_generate_payload(), headers=owner_headers
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "created": 9, "skipped": 0}

    slots = (await client.get(f"/api/courts/{test_court.id}/time-slots")).json()
    assert len(slots) == 9
    assert slots[0]["start_time"].startswith("2030-01-06T09:00:00")
    prices = {s["start_time"][:10]: s["price"] for s in slots}
    assert prices == {"2030-01-06": 500.0, "2030-01-07": 300.0, "2030-01-12": 500.0}

    monday = (await client.get(f"/api/courts/{test_court.id}/time-slots?day=2030-01-07")).json()
    assert len(monday) == 3


@pytest.mark.asyncio
async def test_generate_skips_overlaps(client: AsyncClient, owner_headers, test_court):
    existing = await client.post(
        f"/api/courts/{test_court.id}/time-slots",
        json={"start_time": "2030-01-07T10:30:00Z", "end_time": "2030-01-07T11:30:00Z"},
        headers=owner_headers,
    )
    assert existing.status_code == 201

    response = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate", json=_generate_payload(), headers=owner_headers
    )
    assert response.json() == {"success": True, "created": 7, "skipped": 2}

    again = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate", json=_generate_payload(), headers=owner_headers
    )
    assert again.json() == {"success": True, "created": 0, "skipped": 9}


@pytest.mark.asyncio
async def test_generate_requires_court_owner(client: AsyncClient, other_headers, test_court):
    response = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate", json=_generate_payload(), headers=other_headers
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_generate_rejects_bad_day_numbers(client: AsyncClient, owner_headers, test_court):
    response = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate",
        json=_generate_payload(days_of_week=[7]),
        headers=owner_headers,
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_overlapping_slot_conflicts(client: AsyncClient, owner_headers, test_court):
    first = await client.post(
        f"/api/courts/{test_court.id}/time-slots",
        json={"start_time": "2030-02-01T10:00:00Z", "end_time": "2030-02-01T11:00:00Z", "price": "350.00"},
        headers=owner_headers,
    )
    assert first.status_code == 201
    assert first.json()["status"] == "AVAILABLE"
    assert first.json()["price"] == 350.0

    overlap = await client.post(
        f"/api/courts/{test_court.id}/time-slots",
        json={"start_time": "2030-02-01T10:30:00Z", "end_time": "2030-02-01T11:30:00Z"},
        headers=owner_headers,
    )
    assert overlap.status_code == 409
    assert overlap.json()["error"] == "Time slot overlaps with existing time slot"

    adjacent = await client.post(
        f"/api/courts/{test_court.id}/time-slots",
        json={"start_time": "2030-02-01T11:00:00Z", "end_time": "2030-02-01T12:00:00Z"},
        headers=owner_headers,
    )
    assert adjacent.status_code == 201


@pytest.mark.asyncio
async def test_update_slot_time(client: AsyncClient, owner_headers, test_slot):
    new_start = datetime(2030, 3, 1, 8, 0, tzinfo=timezone.utc)
    response = await client.patch(
        f"/api/time-slots/{test_slot.id}",
        json={"start_time": new_start.isoformat(), "end_time": (new_start + timedelta(hours=1)).isoformat()},
        headers=owner_headers,
    )
    assert response.status_code == 200
    assert response.json()["start_time"].startswith("2030-03-01T08:00:00")


@pytest.mark.asyncio
async def test_booked_slot_cannot_move_or_be_deleted(client: AsyncClient, db_session, owner_headers, test_user, test_slot):
    await _confirm_booking(db_session, test_slot, test_user.id)
    new_start = datetime(2030, 3, 1, 8, 0, tzinfo=timezone.utc)

    moved = await client.patch(
        f"/api/time-slots/{test_slot.id}",
        json={"start_time": new_start.isoformat(), "end_time": (new_start + timedelta(hours=1)).isoformat()},
        headers=owner_headers,
    )
    assert moved.status_code == 409

    repriced = await client.patch(f"/api/time-slots/{test_slot.id}", json={"price": "999.00"}, headers=owner_headers)
    assert repriced.status_code == 200
    assert repriced.json()["price"] == 999.0

    deleted = await client.delete(f"/api/time-slots/{test_slot.id}", headers=owner_headers)
    assert deleted.status_code == 409


@pytest.mark.asyncio
async def test_delete_free_slot(client: AsyncClient, owner_headers, test_slot):
    response = await client.delete(f"/api/time-slots/{test_slot.id}", headers=owner_headers)
    assert response.status_code == 200
    assert (await client.get(f"/api/time-slots/{test_slot.id}")).status_code == 404


@pytest.mark.asyncio
async def test_maintenance_toggle(client: AsyncClient, owner_headers, test_slot):
    blocked = await client.post(
        f"/api/time-slots/{test_slot.id}/maintenance", json={"reason": "Resurfacing"}, headers=owner_headers
    )
    assert blocked.status_code == 200
    assert blocked.json()["status"] == "MAINTENANCE"
    assert blocked.json()["maintenance_reason"] == "Resurfacing"

    unblocked = await client.post(f"/api/time-slots/{test_slot.id}/maintenance", headers=owner_headers)
    assert unblocked.json()["status"] == "AVAILABLE"
    assert unblocked.json()["maintenance_reason"] is None


@pytest.mark.asyncio
async def test_maintenance_refused_on_booked_slot(client: AsyncClient, db_session, owner_headers, test_user, test_slot):
    await _confirm_booking(db_session, test_slot, test_user.id)
    response = await client.post(f"/api/time-slots/{test_slot.id}/maintenance", headers=owner_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_listing_reports_derived_status(client: AsyncClient, db_session, owner_headers, test_user, test_court):
    await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate",
        json=_generate_payload(days_of_week=[1], use_custom_pricing=False),
        headers=owner_headers,
    )
    slots = (await client.get(f"/api/courts/{test_court.id}/time-slots")).json()
    booked_id, blocked_id, free_id = (s["id"] for s in slots)

    await _confirm_booking(db_session, await db_session.get(TimeSlot, booked_id), test_user.id)
    await client.post(f"/api/time-slots/{blocked_id}/maintenance", headers=owner_headers)

    by_id = {s["id"]: s for s in (await client.get(f"/api/courts/{test_court.id}/time-slots")).json()}
    assert by_id[booked_id]["status"] == "BOOKED"
    assert by_id[blocked_id]["status"] == "MAINTENANCE"
    assert by_id[free_id]["status"] == "AVAILABLE"
    assert by_id[free_id]["price"] is None

    booked = (await client.get(f"/api/courts/{test_court.id}/time-slots?is_booked=true")).json()
    assert [s["id"] for s in booked] == [booked_id]
    blocked = (await client.get(f"/api/courts/{test_court.id}/time-slots?is_maintenance_blocked=true")).json()
    assert [s["id"] for s in blocked] == [blocked_id]


@pytest.mark.asyncio
async def test_generate_rejects_window_over_a_year(client: AsyncClient, db_session, owner_headers, test_court):
    response = await client.post(
        f"/api/courts/{test_court.id}/time-slots/generate",
        json=_generate_payload(end_date="2032-01-06"),
        headers=owner_headers,
    )
    assert response.status_code == 422
    assert (await db_session.execute(select(func.count(TimeSlot.id)))).scalar() == 0

    # The cap itself is inclusive
    data = TimeSlotGenerate(**_generate_payload(end_date="2031-01-07"))
    assert (data.end_date - data.start_date).days == 366
