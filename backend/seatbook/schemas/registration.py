"""
Pydantic schemas for availability and registration request/response validation.
"""

from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class RegistrationCreate(BaseModel):
    date: str = Field(..., min_length=1)
    time: str = Field(..., min_length=1)
    seat: int = Field(..., ge=1)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=32)


class RegistrationResponse(BaseModel):
    status: Literal["success"] = "success"


class AvailabilityResponse(BaseModel):
    status: Literal["success"] = "success"
    taken_seats: list[int] = Field(default_factory=list, alias="takenSeats")
    count: int = 0

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
