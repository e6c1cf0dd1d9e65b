"""
Pytest fixtures for the in-memory sheet, the HTTP client, and the booking client.

API tests never touch Google Sheets: the store dependency is overridden with
an InMemoryStore seeded from the rows below.
"""

import os
from typing import AsyncGenerator

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from seatbook.main import app
from seatbook.client import BookingApiClient
from seatbook.services import seat_hold_service
from seatbook.stores import InMemoryStore, get_store

# Date | Time | TotalSeats | IsActive
SCHEDULE_ROWS = [
    ["2024-01-01", "10:00", "20", "TRUE"],
    ["2024-01-01", "14:00", "20", "FALSE"],
    ["2024-01-01", "16:00", "20", "TRUE"],
    ["2024-01-02", "09:00", "20", "true"],
    ["", "11:00", "20", "TRUE"],
]

# Date | Time | Seat | Email | Phone | RegisteredAt
REGISTRATION_ROWS = [
    ["2024-01-01", "10:00", "3", "ann@example.com", "99110001", "2024-01-01T08:00:00+00:00"],
    ["2024-01-01", "10:00", "5", "bat@example.com", "99110002", "2024-01-01T08:01:00+00:00"],
    ["2024-01-01", "16:00", "1", "dorj@example.com", "99110003", "2024-01-01T08:02:00+00:00"],
    ["2024-01-02", "09:00", "12", "saraa@example.com", "99110004", "2024-01-01T08:03:00+00:00"],
]


@pytest.fixture(autouse=True)
def reset_seat_locks():
    """Session locks are per event loop; each test gets a fresh loop."""
    seat_hold_service._session_locks.clear()
    yield
    seat_hold_service._session_locks.clear()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore({
        "Schedules": SCHEDULE_ROWS,
        "Registrations": REGISTRATION_ROWS,
    })


@pytest.fixture
def asgi_app(store: InMemoryStore):
    """The FastAPI app wired to the in-memory store."""
    app.dependency_overrides[get_store] = lambda: store
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(asgi_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=asgi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def api_client(asgi_app) -> AsyncGenerator[BookingApiClient, None]:
    """Booking client talking to the real app in-process."""
    async with BookingApiClient("http://test", transport=ASGITransport(app=asgi_app)) as api:
        yield api
