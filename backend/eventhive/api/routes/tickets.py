"""
Ticket inventory endpoints. Mutations are limited to the event organizer or an admin.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.db.session import get_db
from eventhive.models.user import User
from eventhive.schemas.ticket import TicketCreate, TicketQuantityUpdate, TicketResponse, TicketStats, TicketUpdate
from eventhive.services import ticket_service
from eventhive.core.security import get_current_user

router = APIRouter(tags=["Tickets"])


@router.post("/events/{event_id}/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket_endpoint(
    event_id: int,
    data: TicketCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.create_ticket(db, event_id, data, user)


@router.get("/events/{event_id}/tickets", response_model=list[TicketResponse])
async def list_tickets_endpoint(
    event_id: int,
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.list_event_tickets(db, event_id, active_only)


@router.get("/events/{event_id}/tickets/stats", response_model=TicketStats)
async def ticket_stats_endpoint(
    event_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.get_ticket_stats(db, event_id, user)


@router.patch("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket_endpoint(
    ticket_id: int,
    data: TicketUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.update_ticket(db, ticket_id, data, user)


@router.post("/tickets/{ticket_id}/toggle", response_model=TicketResponse)
async def toggle_ticket_endpoint(
    ticket_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.toggle_ticket_status(db, ticket_id, user)


@router.patch("/tickets/{ticket_id}/quantity", response_model=TicketResponse)
async def update_ticket_quantity_endpoint(
    ticket_id: int,
    data: TicketQuantityUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ticket_service.update_ticket_quantity(db, ticket_id, data.quantity, user)


@router.delete("/tickets/{ticket_id}")
async def delete_ticket_endpoint(
    ticket_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ticket_service.delete_ticket(db, ticket_id, user)
    return {"success": True}
