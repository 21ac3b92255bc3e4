"""
Central API router that aggregates all route modules under /api.
"""

from fastapi import APIRouter
from eventhive.api.routes import (
    admin,
    auth,
    bookings,
    courts,
    events,
    facilities,
    payments,
    profile,
    reports,
    tickets,
    time_slots,
    upload,
    venues,
    webhooks,
)

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(tickets.router)
api_router.include_router(payments.router)
api_router.include_router(bookings.router)
api_router.include_router(profile.router)
api_router.include_router(facilities.router)
api_router.include_router(venues.router)
api_router.include_router(courts.router)
api_router.include_router(time_slots.router)
api_router.include_router(reports.router)
api_router.include_router(admin.router)
api_router.include_router(upload.router)
api_router.include_router(webhooks.router)
