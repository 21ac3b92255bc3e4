"""
Court endpoints plus slot generation and listing for a court.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.facility import CourtResponse, CourtUpdate
from eventhive.schemas.time_slot import (
    GenerateResult,
    TimeSlotCreate,
    TimeSlotFilters,
    TimeSlotGenerate,
    TimeSlotResponse,
)
from eventhive.services import court_service, time_slot_service
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/courts", tags=["Courts"])


@router.get("/{court_id}", response_model=CourtResponse)
async def get_court_endpoint(court_id: int, db: AsyncSession = Depends(get_db)):
    return await court_service.get_court(db, court_id)


@router.patch("/{court_id}", response_model=CourtResponse)
async def update_court_endpoint(
    court_id: int,
    data: CourtUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await court_service.update_court(db, court_id, data, user)


@router.delete("/{court_id}")
async def delete_court_endpoint(
    court_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await court_service.delete_court(db, court_id, user)
    return {"success": True}


@router.post("/{court_id}/toggle", response_model=CourtResponse)
async def toggle_court_endpoint(
    court_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await court_service.toggle_court_status(db, court_id, user)


@router.get("/{court_id}/time-slots", response_model=list[TimeSlotResponse])
async def list_time_slots_endpoint(
    court_id: int,
    day: Optional[date] = None,
    is_maintenance_blocked: Optional[bool] = None,
    is_booked: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
):
    filters = TimeSlotFilters(day=day, is_maintenance_blocked=is_maintenance_blocked, is_booked=is_booked)
    return await time_slot_service.list_court_time_slots(db, court_id, filters)


@router.post("/{court_id}/time-slots", response_model=TimeSlotResponse, status_code=status.HTTP_201_CREATED)
async def create_time_slot_endpoint(
    court_id: int,
    data: TimeSlotCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    slot = await time_slot_service.create_time_slot(db, court_id, data, user)
    return await time_slot_service.describe_slot(db, slot)


@router.post("/{court_id}/time-slots/generate", response_model=GenerateResult)
async def generate_time_slots_endpoint(
    court_id: int,
    data: TimeSlotGenerate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Bulk-create slots; slots overlapping existing ones are skipped and counted."""
    result = await time_slot_service.generate_time_slots_advanced(db, court_id, data, user)
    return GenerateResult(**result)
