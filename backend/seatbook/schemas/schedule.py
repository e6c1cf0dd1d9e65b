"""
Pydantic schemas for the schedule endpoint.
"""

from typing import Literal

from pydantic import BaseModel


class ScheduleResponse(BaseModel):
    status: Literal["success"] = "success"
    schedule: dict[str, list[str]]
    total: str  # total seat capacity, string-encoded for the frontend
