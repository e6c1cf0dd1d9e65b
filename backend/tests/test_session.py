"""
End-to-end tests for the booking client: BookingSession driving real HTTP
calls, both against the app in-process and against a scripted transport that
controls the order in which responses arrive.
"""

import asyncio

import httpx
import pytest

from seatbook.client import AvailabilityState, BookingApiClient, BookingApiError, BookingSession
from seatbook.stores import InMemoryStore


async def _until(predicate, timeout: float = 2.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0)
    await asyncio.wait_for(poll(), timeout)


class ScriptedBackend:
    """
    Mock transport whose taken-seat answers are held back until released,
    so a test decides which response lands first.
    """

    def __init__(self, schedule: dict, taken: dict[str, list[int]]):
        self.schedule = schedule
        self.taken = taken
        self.gates: dict[str, asyncio.Event] = {time: asyncio.Event() for time in taken}
        self.requests: list[str] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/schedule":
            return httpx.Response(200, json={"status": "success", "schedule": self.schedule, "total": "40"})
        time = request.url.params["time"]
        self.requests.append(time)
        await self.gates[time].wait()
        seats = self.taken[time]
        return httpx.Response(200, json={"status": "success", "takenSeats": seats, "count": len(seats)})

    def release(self, time: str) -> None:
        self.gates[time].set()


@pytest.mark.asyncio
async def test_late_response_for_old_selection_is_discarded():
    backend = ScriptedBackend(
        schedule={"2024-01-01": ["10:00", "14:00"]},
        taken={"10:00": [5, 6], "14:00": [1, 2]},
    )
    api = BookingApiClient("http://test", transport=httpx.MockTransport(backend))
    session = BookingSession(api)
    view = session.view

    await session.load_schedule()           # epoch 1 -> 10:00
    session.choose_time("14:00")            # epoch 2 -> 14:00
    assert view.epoch.value == 2

    backend.release("14:00")
    await _until(lambda: view.state is AvailabilityState.READY)
    assert view.taken.seat_numbers == frozenset({1, 2})

    backend.release("10:00")
    await session.wait_idle()

    assert backend.requests == ["10:00", "14:00"]
    assert view.taken.seat_numbers == frozenset({1, 2})
    assert view.target == ("2024-01-01", "14:00")
    assert view.stale_discarded == 1
    await api.aclose()


@pytest.mark.asyncio
async def test_load_and_pick_seat(api_client: BookingApiClient):
    session = BookingSession(api_client)
    await session.load_schedule()
    await session.wait_idle()

    view = session.view
    assert list(view.schedule) == ["2024-01-01", "2024-01-02"]
    assert view.total_seats == 60
    assert view.target == ("2024-01-01", "10:00")
    assert view.state is AvailabilityState.READY
    assert view.taken.seat_numbers == frozenset({3, 5})

    assert session.choose_seat(3) is False
    assert session.choose_seat(4) is True


@pytest.mark.asyncio
async def test_switching_date_refetches(api_client: BookingApiClient):
    session = BookingSession(api_client)
    await session.load_schedule()
    session.choose_date("2024-01-02")
    await session.wait_idle()

    assert session.view.target == ("2024-01-02", "09:00")
    assert session.view.taken.seat_numbers == frozenset({12})


@pytest.mark.asyncio
async def test_submit_books_seat_and_refreshes(api_client: BookingApiClient, store: InMemoryStore):
    notices = []
    session = BookingSession(api_client, notify=lambda level, message: notices.append(level))
    await session.load_schedule()
    await session.wait_idle()
    session.choose_seat(9)

    assert await session.submit("visitor@example.com", "99887766") is True
    await session.wait_idle()

    assert notices == ["success"]
    assert 9 in session.view.taken.seat_numbers
    assert session.view.selection.seat_number == 0
    assert store.rows("Registrations")[-1][2] == "9"


@pytest.mark.asyncio
async def test_submit_conflict_does_not_mark_seat_taken(api_client: BookingApiClient, store: InMemoryStore):
    notices = []
    session = BookingSession(api_client, notify=lambda level, message: notices.append((level, message)))
    await session.load_schedule()
    await session.wait_idle()
    session.choose_seat(9)

    # Someone else books seat 9 between our fetch and our submit
    await store.append_row("Registrations!A2:F", ["2024-01-01", "10:00", "9", "x@example.com", "99000000", ""])

    assert await session.submit("visitor@example.com", "99887766") is False
    assert notices[0][0] == "error"

    await session.wait_idle()
    assert 9 in session.view.taken.seat_numbers
    assert session.view.selection.seat_number == 0


@pytest.mark.asyncio
async def test_submit_requires_seat(api_client: BookingApiClient):
    notices = []
    session = BookingSession(api_client, notify=lambda level, message: notices.append(level))
    await session.load_schedule()
    await session.wait_idle()

    assert await session.submit("visitor@example.com", "99887766") is False
    assert notices == ["error"]


@pytest.mark.asyncio
async def test_submit_rejects_bad_email_locally(api_client: BookingApiClient, store: InMemoryStore):
    notices = []
    session = BookingSession(api_client, notify=lambda level, message: notices.append(message))
    await session.load_schedule()
    await session.wait_idle()
    session.choose_seat(9)
    before = len(store.rows("Registrations"))

    assert await session.submit("nope", "99887766") is False
    assert "email" in notices[0]
    assert len(store.rows("Registrations")) == before


@pytest.mark.asyncio
async def test_schedule_failure(api_client: BookingApiClient, store: InMemoryStore):
    notices = []
    store.fail_with = "sheet unreachable"
    session = BookingSession(api_client, notify=lambda level, message: notices.append(message))
    await session.load_schedule()

    assert session.view.state is AvailabilityState.UNLOADED
    assert "sheet unreachable" in notices[0]


@pytest.mark.asyncio
async def test_availability_failure(api_client: BookingApiClient, store: InMemoryStore):
    session = BookingSession(api_client, notify=lambda level, message: None)
    await session.load_schedule()
    store.fail_with = "sheet unreachable"
    await session.wait_idle()

    assert session.view.state is AvailabilityState.FAILED
    assert session.view.taken.seat_numbers == frozenset()


@pytest.mark.asyncio
async def test_unexpected_availability_error_fails_the_view():
    """A client bug outside BookingApiError still settles the view as FAILED."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/schedule":
            return httpx.Response(
                200, json={"status": "success", "schedule": {"2024-01-01": ["10:00"]}, "total": "20"}
            )
        raise RuntimeError("transport exploded")

    notices = []
    async with BookingApiClient("http://test", transport=httpx.MockTransport(handler)) as api:
        session = BookingSession(api, notify=lambda level, message: notices.append((level, message)))
        await session.load_schedule()
        await session.wait_idle()

    assert session.view.state is AvailabilityState.FAILED
    assert session.view.free_seats() == []
    assert notices == [("error", "Could not load seat availability: transport exploded")]


@pytest.mark.asyncio
async def test_api_client_maps_error_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"status": "error", "message": "Seat 4 is already taken"})

    async with BookingApiClient("http://test", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(BookingApiError) as exc_info:
            await api.fetch_taken_seats("2024-01-01", "10:00")
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Seat 4 is already taken"


@pytest.mark.asyncio
async def test_api_client_rejects_non_success_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async with BookingApiClient("http://test", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(BookingApiError):
            await api.fetch_schedule()


@pytest.mark.asyncio
async def test_api_client_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with BookingApiClient("http://test", transport=httpx.MockTransport(handler)) as api:
        with pytest.raises(BookingApiError) as exc_info:
            await api.fetch_taken_seats("2024-01-01", "10:00")
    assert exc_info.value.status_code is None
