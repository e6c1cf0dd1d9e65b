"""
Schedule endpoint: active sessions grouped by date, plus total capacity.
Never cached - every request re-reads the sheet.
"""

from fastapi import APIRouter, Depends

from seatbook.schemas.registration import ErrorResponse
from seatbook.schemas.schedule import ScheduleResponse
from seatbook.services.schedule_service import get_schedule
from seatbook.stores import TabularStore, get_store

router = APIRouter(prefix="/schedule", tags=["Schedule"])


@router.get("", response_model=ScheduleResponse, responses={500: {"model": ErrorResponse}})
async def read_schedule(store: TabularStore = Depends(get_store)):
    """
    Dates with their active start times, in sheet order.
    `total` is the declared seat capacity summed over all active sessions.
    """
    summary = await get_schedule(store)
    return ScheduleResponse(schedule=summary.schedule, total=str(summary.total))
