# cloka_events/api/v1/api.py

from fastapi import APIRouter

from cloka_events.api.v1.endpoints import (
    admin_events,
    admin_registrations,
    check_in,
    events,
    health,
    registrations,
)

# This is the main router for the v1 API.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(events.router)
api_router.include_router(registrations.router)
api_router.include_router(check_in.router)
api_router.include_router(admin_events.router)
api_router.include_router(admin_registrations.router)
