"""
Registration endpoints: taken seats per session, and booking a seat.
"""

from fastapi import APIRouter, Depends, Query, status

from seatbook.schemas.registration import (
    AvailabilityResponse,
    ErrorResponse,
    RegistrationCreate,
    RegistrationResponse,
)
from seatbook.services.registration_service import get_taken_seats, register_seat
from seatbook.stores import TabularStore, get_store

router = APIRouter(prefix="/register", tags=["Registrations"])


@router.get(
    "",
    response_model=AvailabilityResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def read_taken_seats(
    date: str = Query(..., min_length=1),
    time: str = Query(..., min_length=1),
    store: TabularStore = Depends(get_store),
):
    """Seats already booked for the session at (date, time)."""
    taken = await get_taken_seats(store, date, time)
    return AvailabilityResponse(taken_seats=taken, count=len(taken))


@router.post(
    "",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def create_registration(
    data: RegistrationCreate,
    store: TabularStore = Depends(get_store),
):
    """
    Book one seat.

    The seat check and the sheet append run under a per-session hold, so two
    simultaneous submissions for the same seat can't both succeed; the loser
    gets a 409.
    """
    await register_seat(store, data)
    return RegistrationResponse()
