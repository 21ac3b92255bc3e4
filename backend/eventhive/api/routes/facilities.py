"""
Facility endpoints and the courts nested under a facility.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.facility import CourtCreate, CourtResponse, FacilityCreate, FacilityResponse, FacilityUpdate
from eventhive.services import court_service, facility_service
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/facilities", tags=["Facilities"])


@router.post("", response_model=FacilityResponse, status_code=status.HTTP_201_CREATED)
async def create_facility_endpoint(
    data: FacilityCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await facility_service.create_facility(db, data, user)


@router.get("", response_model=list[FacilityResponse])
async def list_my_facilities_endpoint(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Facilities owned by the caller; admins see all."""
    return await facility_service.list_user_facilities(db, user)


@router.get("/{facility_id}", response_model=FacilityResponse)
async def get_facility_endpoint(facility_id: int, db: AsyncSession = Depends(get_db)):
    return await facility_service.get_facility(db, facility_id)


@router.patch("/{facility_id}", response_model=FacilityResponse)
async def update_facility_endpoint(
    facility_id: int,
    data: FacilityUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await facility_service.update_facility(db, facility_id, data, user)


@router.delete("/{facility_id}")
async def delete_facility_endpoint(
    facility_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await facility_service.delete_facility(db, facility_id, user)
    return {"success": True}


@router.post("/{facility_id}/courts", response_model=CourtResponse, status_code=status.HTTP_201_CREATED)
async def create_court_endpoint(
    facility_id: int,
    data: CourtCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await court_service.create_court(db, facility_id, data, user)


@router.get("/{facility_id}/courts", response_model=list[CourtResponse])
async def list_courts_endpoint(facility_id: int, db: AsyncSession = Depends(get_db)):
    return await court_service.list_facility_courts(db, facility_id)
