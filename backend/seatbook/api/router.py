"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from seatbook.api.routes import schedule, registrations

api_router = APIRouter(prefix="/api")
api_router.include_router(schedule.router)
api_router.include_router(registrations.router)
