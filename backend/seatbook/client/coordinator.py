"""
Booking view state: which session is selected, which seats are taken, which
seat the visitor has picked.

STALE RESPONSES: request epochs
===============================

Problem:
  Every date/time change fires a taken-seats query. The visitor can click
  through times faster than the network answers, and answers come back in
  any order. If the query for 10:00 lands after the one for 14:00, the
  14:00 view shows 10:00's seats.

Solution:
  Each query is tagged with the epoch it was issued under. The epoch goes up
  by one every time a query is issued and never goes down. A result is
  applied only if its epoch is still the current one; anything older is
  dropped on the floor.

  Superseded queries are not cancelled. They finish and get discarded, so
  nothing depends on transport-level cancellation.

Every transition below is a plain synchronous method. On a single event loop
they can't interleave, which makes the epoch check in
on_availability_resolved the only synchronisation needed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from seatbook.core.logging import get_logger
from seatbook.schemas.registration import AvailabilityResponse, RegistrationCreate

logger = get_logger(__name__)

DEFAULT_SEATS_PER_SESSION = 20

# (level, message); level is "success" or "error"
Notifier = Callable[[str, str], None]


def log_notifier(level: str, message: str) -> None:
    if level == "error":
        logger.warning("booking_notice", notice=level, message=message)
    else:
        logger.info("booking_notice", notice=level, message=message)


class AvailabilityState(Enum):
    UNLOADED = "unloaded"
    NO_SESSION_SELECTED = "no_session_selected"
    FETCHING = "fetching"
    READY = "ready"
    FAILED = "failed"


@dataclass
class RequestEpoch:
    value: int = 0

    def advance(self) -> int:
        self.value += 1
        return self.value

    def is_current(self, epoch: int) -> bool:
        return epoch == self.value


@dataclass(frozen=True)
class FetchRequest:
    """A taken-seats query the caller must issue, tagged with its epoch."""

    epoch: int
    date: str
    time: str


@dataclass
class SeatSelection:
    date: str = ""
    time: str = ""
    seat_number: int = 0  # 0 = none picked


@dataclass
class TakenSeatsView:
    seat_numbers: frozenset[int] = field(default_factory=frozenset)
    count: int = 0


AvailabilityResult = Union[AvailabilityResponse, Exception]


class BookingViewCoordinator:
    """
    Transitions return a FetchRequest when a taken-seats query has to go out
    and None otherwise. Issuing the query, and feeding its outcome back into
    on_availability_resolved, is the caller's job (see BookingSession).
    """

    def __init__(
        self,
        seats_per_session: int = DEFAULT_SEATS_PER_SESSION,
        notify: Optional[Notifier] = None,
    ) -> None:
        self.seats_per_session = seats_per_session
        self.notify = notify or log_notifier
        self.state = AvailabilityState.UNLOADED
        self.schedule: dict[str, list[str]] = {}
        self.total_seats = 0
        self.selection = SeatSelection()
        self.taken = TakenSeatsView()
        self.epoch = RequestEpoch()
        self.stale_discarded = 0

    @property
    def target(self) -> Optional[tuple[str, str]]:
        if not self.selection.date or not self.selection.time:
            return None
        return self.selection.date, self.selection.time

    def free_seats(self) -> list[int]:
        if self.state is not AvailabilityState.READY:
            return []
        return [
            seat for seat in range(1, self.seats_per_session + 1)
            if seat not in self.taken.seat_numbers
        ]

    # -- schedule ---------------------------------------------------------

    def on_schedule_loaded(self, schedule: dict[str, list[str]], total: int) -> Optional[FetchRequest]:
        self.schedule = {date: list(times) for date, times in schedule.items() if times}
        self.total_seats = total
        self.selection = SeatSelection()
        self.taken = TakenSeatsView()

        if not self.schedule:
            self.state = AvailabilityState.NO_SESSION_SELECTED
            return None

        first_date = next(iter(self.schedule))
        return self._enter_target(first_date, self.schedule[first_date][0])

    def on_schedule_failed(self, message: str) -> None:
        self.schedule = {}
        self.total_seats = 0
        self.selection = SeatSelection()
        self.taken = TakenSeatsView()
        self.state = AvailabilityState.UNLOADED
        self.notify("error", message)

    # -- selection --------------------------------------------------------

    def on_date_changed(self, date: str) -> Optional[FetchRequest]:
        times = self.schedule.get(date)
        if not times:
            return None

        time = self.selection.time if self.selection.time in times else times[0]
        return self._select(date, time)

    def on_time_changed(self, time: str) -> Optional[FetchRequest]:
        if time not in self.schedule.get(self.selection.date, []):
            return None
        return self._select(self.selection.date, time)

    def _select(self, date: str, time: str) -> Optional[FetchRequest]:
        if (date, time) == self.target and self.state is not AvailabilityState.FAILED:
            return None
        return self._enter_target(date, time)

    def _enter_target(self, date: str, time: str) -> FetchRequest:
        epoch = self.epoch.advance()
        self.selection = SeatSelection(date=date, time=time)
        self.taken = TakenSeatsView()
        self.state = AvailabilityState.FETCHING
        logger.debug("availability_fetch_started", epoch=epoch, date=date, time=time)
        return FetchRequest(epoch=epoch, date=date, time=time)

    def refresh(self) -> Optional[FetchRequest]:
        """
        Re-query the current session without dropping the seat selection.
        The view is FETCHING until the result lands: free_seats() is empty and
        select_seat is refused, but the taken set and selection are kept so
        reconciliation can run against them.
        """
        target = self.target
        if target is None:
            return None
        epoch = self.epoch.advance()
        self.state = AvailabilityState.FETCHING
        logger.debug("availability_refresh_started", epoch=epoch, date=target[0], time=target[1])
        return FetchRequest(epoch=epoch, date=target[0], time=target[1])

    # -- query results ----------------------------------------------------

    def on_availability_resolved(self, epoch: int, result: AvailabilityResult) -> bool:
        """Apply a query outcome. Returns False when it was stale and dropped."""
        if not self.epoch.is_current(epoch):
            self.stale_discarded += 1
            logger.debug("availability_stale_discarded", epoch=epoch, current=self.epoch.value)
            return False

        if isinstance(result, Exception):
            self.taken = TakenSeatsView()
            self.state = AvailabilityState.FAILED
            self.notify("error", f"Could not load seat availability: {result}")
            return True

        taken = frozenset(result.taken_seats)
        self.taken = TakenSeatsView(seat_numbers=taken, count=result.count)
        self.state = AvailabilityState.READY
        if self.selection.seat_number in taken:
            logger.info("seat_selection_cleared", seat=self.selection.seat_number)
            self.selection.seat_number = 0
        return True

    # -- seats ------------------------------------------------------------

    def select_seat(self, seat_number: int) -> bool:
        if self.state is not AvailabilityState.READY:
            return False
        if not 1 <= seat_number <= self.seats_per_session:
            return False
        if seat_number in self.taken.seat_numbers:
            return False
        self.selection.seat_number = seat_number
        return True

    @property
    def can_submit(self) -> bool:
        return self.state is AvailabilityState.READY and self.selection.seat_number > 0

    def registration_payload(self, email: str, phone: str) -> RegistrationCreate:
        """Raises pydantic.ValidationError for a bad email or phone."""
        return RegistrationCreate(
            date=self.selection.date,
            time=self.selection.time,
            seat=self.selection.seat_number,
            email=email,
            phone=phone,
        )
