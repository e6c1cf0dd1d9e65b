from seatbook.schemas.schedule import ScheduleResponse
from seatbook.schemas.registration import (
    AvailabilityResponse,
    ErrorResponse,
    RegistrationCreate,
    RegistrationResponse,
)

__all__ = [
    "ScheduleResponse",
    "AvailabilityResponse", "RegistrationCreate", "RegistrationResponse",
    "ErrorResponse",
]
