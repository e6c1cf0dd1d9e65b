"""HTTP client for the registration API: lowest level, one method per endpoint."""

from typing import Any, Optional

import httpx
from pydantic import ValidationError

from seatbook.core.logging import get_logger
from seatbook.schemas.registration import AvailabilityResponse, RegistrationCreate
from seatbook.schemas.schedule import ScheduleResponse

logger = get_logger(__name__)


class BookingApiError(Exception):
    """Transport failure, non-2xx reply, or a body whose status isn't "success"."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BookingApiClient:

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            r = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("api_transport_error", method=method, path=path, error=str(e))
            raise BookingApiError(f"Network error: {e}") from e

        try:
            body = r.json() if r.content else {}
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if r.is_error or body.get("status") != "success":
            message = body.get("message") or f"Unexpected response ({r.status_code})"
            logger.info("api_error_response", method=method, path=path, status_code=r.status_code)
            raise BookingApiError(message, status_code=r.status_code)
        return body

    async def fetch_schedule(self) -> tuple[dict[str, list[str]], int]:
        """(schedule, total capacity)."""
        body = await self._request("GET", "/api/schedule")
        try:
            parsed = ScheduleResponse.model_validate(body)
            total = int(parsed.total)
        except (ValidationError, ValueError) as e:
            raise BookingApiError("Malformed schedule response") from e
        return parsed.schedule, total

    async def fetch_taken_seats(self, date: str, time: str) -> AvailabilityResponse:
        body = await self._request("GET", "/api/register", params={"date": date, "time": time})
        try:
            return AvailabilityResponse.model_validate(body)
        except ValidationError as e:
            raise BookingApiError("Malformed availability response") from e

    async def register(self, data: RegistrationCreate) -> None:
        await self._request("POST", "/api/register", json=data.model_dump())
