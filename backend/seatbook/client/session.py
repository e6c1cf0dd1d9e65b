"""
Async driver for BookingViewCoordinator.

Turns the coordinator's FetchRequests into real HTTP calls. Each query runs
as its own task and reports back through on_availability_resolved; the
coordinator decides whether the answer is still wanted.
"""

import asyncio
from typing import Optional

from pydantic import ValidationError

from seatbook.client.api_client import BookingApiClient, BookingApiError
from seatbook.client.coordinator import BookingViewCoordinator, FetchRequest, Notifier
from seatbook.core.logging import get_logger

logger = get_logger(__name__)


class BookingSession:

    def __init__(
        self,
        api: BookingApiClient,
        coordinator: Optional[BookingViewCoordinator] = None,
        notify: Optional[Notifier] = None,
    ) -> None:
        self.api = api
        self.view = coordinator or BookingViewCoordinator(notify=notify)
        self.submitting = False
        self._pending: set[asyncio.Task] = set()

    async def load_schedule(self) -> None:
        try:
            schedule, total = await self.api.fetch_schedule()
        except BookingApiError as e:
            self.view.on_schedule_failed(f"Could not load the schedule: {e.message}")
            return
        self._dispatch(self.view.on_schedule_loaded(schedule, total))

    def choose_date(self, date: str) -> None:
        self._dispatch(self.view.on_date_changed(date))

    def choose_time(self, time: str) -> None:
        self._dispatch(self.view.on_time_changed(time))

    def choose_seat(self, seat_number: int) -> bool:
        return self.view.select_seat(seat_number)

    async def submit(self, email: str, phone: str) -> bool:
        """
        Register the selected seat. Whatever the outcome, the current session
        is re-queried afterwards so the seat map never shows a seat as free
        on the strength of a failed booking.
        """
        if self.submitting:
            return False
        if not self.view.can_submit:
            self.view.notify("error", "Please choose a seat")
            return False

        try:
            payload = self.view.registration_payload(email, phone)
        except ValidationError as e:
            fields = ", ".join(str(err["loc"][-1]) for err in e.errors() if err.get("loc"))
            self.view.notify("error", f"Please check: {fields}")
            return False

        self.submitting = True
        try:
            await self.api.register(payload)
        except BookingApiError as e:
            self.view.notify("error", f"Registration failed: {e.message}")
            return False
        else:
            self.view.notify("success", "Registered successfully")
            logger.info("seat_registered", date=payload.date, time=payload.time, seat=payload.seat)
            return True
        finally:
            self.submitting = False
            self._dispatch(self.view.refresh())

    async def wait_idle(self) -> None:
        """Wait for every in-flight availability query to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _dispatch(self, request: Optional[FetchRequest]) -> None:
        if request is None:
            return
        task = asyncio.create_task(self._fetch(request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _fetch(self, request: FetchRequest) -> None:
        try:
            result = await self.api.fetch_taken_seats(request.date, request.time)
        except Exception as e:
            if not isinstance(e, BookingApiError):
                logger.warning("availability_fetch_crashed", epoch=request.epoch, error=repr(e))
            self.view.on_availability_resolved(request.epoch, e)
            return
        self.view.on_availability_resolved(request.epoch, result)
