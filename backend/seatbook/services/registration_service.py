"""
Registrations: who booked which seat for which session.

The Registrations sheet is append-only. A seat is taken for a session as
soon as any row carries that (date, time, seat).
"""

from datetime import datetime, timezone
from typing import Sequence

from seatbook.core.config import get_settings
from seatbook.core.errors import DomainError, SeatOutOfRangeError, SeatTakenError, SessionNotFoundError
from seatbook.core.logging import get_logger
from seatbook.core.metrics import record_availability_query, record_registration_attempt
from seatbook.schemas.registration import RegistrationCreate
from seatbook.services.schedule_service import is_session_active
from seatbook.services.seat_hold_service import hold_seat
from seatbook.stores.interfaces import TabularStore

logger = get_logger(__name__)

_ATTEMPT_STATUS = {
    SeatTakenError: "conflict",
    SessionNotFoundError: "not_found",
    SeatOutOfRangeError: "invalid",
}


def _parse_seat(raw: str) -> int | None:
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def collect_taken_seats(rows: Sequence[Sequence[object]], date: str, time: str) -> list[int]:
    """Sorted, de-duplicated seat numbers in rows booked for (date, time)."""
    taken: set[int] = set()
    for row in rows:
        if len(row) < 3 or row[0] != date or row[1] != time:
            continue
        seat = _parse_seat(row[2])
        if seat is not None:
            taken.add(seat)
    return sorted(taken)


async def get_taken_seats(store: TabularStore, date: str, time: str) -> list[int]:
    """Taken seats for (date, time), counted as an availability query."""
    try:
        rows = await store.read_rows(get_settings().registration_range)
    except Exception:
        record_availability_query(success=False)
        raise

    taken = collect_taken_seats(rows, date, time)
    record_availability_query(success=True)
    logger.debug("taken_seats_loaded", date=date, time=time, count=len(taken))
    return taken


async def register_seat(store: TabularStore, data: RegistrationCreate) -> None:
    """
    Book data.seat for (data.date, data.time).

    Raises SeatOutOfRangeError, SessionNotFoundError or SeatTakenError;
    StoreAccessError when the sheet can't be read or written.
    """
    settings = get_settings()
    try:
        if data.seat > settings.SEATS_PER_SESSION:
            raise SeatOutOfRangeError(data.seat, settings.SEATS_PER_SESSION)

        if not await is_session_active(store, data.date, data.time):
            raise SessionNotFoundError(data.date, data.time)

        async with hold_seat(data.date, data.time, data.seat):
            # Re-read inside the hold; the sheet is the only source of truth
            rows = await store.read_rows(settings.registration_range)
            if data.seat in collect_taken_seats(rows, data.date, data.time):
                raise SeatTakenError(data.seat)

            await store.append_row(
                settings.registration_range,
                [
                    data.date,
                    data.time,
                    data.seat,
                    data.email,
                    data.phone,
                    datetime.now(timezone.utc).isoformat(timespec="seconds"),
                ],
            )
    except DomainError as e:
        record_registration_attempt(_ATTEMPT_STATUS.get(type(e), "error"))
        logger.warning(
            "registration_rejected",
            date=data.date,
            time=data.time,
            seat=data.seat,
            reason=e.code.value,
        )
        raise

    record_registration_attempt("success")
    logger.info("registration_created", date=data.date, time=data.time, seat=data.seat)
