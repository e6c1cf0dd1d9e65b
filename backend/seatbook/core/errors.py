"""
Domain errors and their HTTP rendering.

Every error leaves the API in the same envelope the frontend expects:
    {"status": "error", "message": "..."}
"""

from enum import Enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from seatbook.core.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(Enum):
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SEAT_TAKEN = "SEAT_TAKEN"
    SEAT_OUT_OF_RANGE = "SEAT_OUT_OF_RANGE"


class DomainError(Exception):
    """Base domain error with code, user-safe message and HTTP status."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class StoreAccessError(DomainError):
    """Reading from or writing to the spreadsheet failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.STORE_UNAVAILABLE, message)


class SessionNotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, date: str, time: str) -> None:
        super().__init__(ErrorCode.SESSION_NOT_FOUND, f"No active session on {date} at {time}")
        self.date = date
        self.time = time


class SeatTakenError(DomainError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, seat: int) -> None:
        super().__init__(ErrorCode.SEAT_TAKEN, f"Seat {seat} is already taken")
        self.seat = seat


class SeatOutOfRangeError(DomainError):
    def __init__(self, seat: int, seats_per_session: int) -> None:
        super().__init__(
            ErrorCode.SEAT_OUT_OF_RANGE,
            f"Seat {seat} is outside 1..{seats_per_session}",
        )
        self.seat = seat


def error_body(message: str) -> dict:
    return {"status": "error", "message": message}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("domain_error", code=exc.code.value, error=exc.message)
    else:
        logger.warning("domain_error", code=exc.code.value, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning("request_invalid", errors=len(errors))
    if errors:
        first = errors[0]
        loc = first.get("loc", ())
        field = ".".join(part for part in loc if isinstance(part, str) and part not in ("body", "query"))
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else first.get("msg", "")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_body(message))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
