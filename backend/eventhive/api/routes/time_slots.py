"""
Single time-slot endpoints: read, edit, delete, maintenance and waitlist.
"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.booking import WaitlistEntryResponse
from eventhive.schemas.time_slot import MaintenanceToggle, TimeSlotResponse, TimeSlotUpdate
from eventhive.services import court_booking_service, time_slot_service
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/time-slots", tags=["Time Slots"])


@router.get("/{slot_id}", response_model=TimeSlotResponse)
async def get_time_slot_endpoint(slot_id: int, db: AsyncSession = Depends(get_db)):
    return await time_slot_service.get_time_slot(db, slot_id)


@router.patch("/{slot_id}", response_model=TimeSlotResponse)
async def update_time_slot_endpoint(
    slot_id: int,
    data: TimeSlotUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    slot = await time_slot_service.update_time_slot(db, slot_id, data, user)
    return await time_slot_service.describe_slot(db, slot)


@router.delete("/{slot_id}")
async def delete_time_slot_endpoint(
    slot_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await time_slot_service.delete_time_slot(db, slot_id, user)
    return {"success": True}


@router.post("/{slot_id}/maintenance", response_model=TimeSlotResponse)
async def toggle_maintenance_endpoint(
    slot_id: int,
    data: Optional[MaintenanceToggle] = Body(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    slot = await time_slot_service.toggle_maintenance(db, slot_id, user, data.reason if data else None)
    return await time_slot_service.describe_slot(db, slot)


@router.post("/{slot_id}/waitlist", response_model=WaitlistEntryResponse, status_code=status.HTTP_201_CREATED)
async def join_waitlist_endpoint(
    slot_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await court_booking_service.join_waitlist(db, user, slot_id)


@router.delete("/{slot_id}/waitlist")
async def leave_waitlist_endpoint(
    slot_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await court_booking_service.leave_waitlist(db, user, slot_id)
    return {"success": True}
