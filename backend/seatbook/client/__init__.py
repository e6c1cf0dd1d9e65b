"""
Client side of seat registration: API client plus the booking view state
that a UI drives.
"""

from .api_client import BookingApiClient, BookingApiError
from .coordinator import (
    AvailabilityState,
    BookingViewCoordinator,
    FetchRequest,
    RequestEpoch,
    SeatSelection,
    TakenSeatsView,
)
from .session import BookingSession

__all__ = [
    'BookingApiClient', 'BookingApiError',
    'AvailabilityState', 'BookingViewCoordinator', 'FetchRequest', 'RequestEpoch',
    'SeatSelection', 'TakenSeatsView',
    'BookingSession',
]
