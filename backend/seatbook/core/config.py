"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

import json
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Seat Registration API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # Google Sheets
    SPREADSHEET_ID: str = ""
    GOOGLE_SERVICE_ACCOUNT_KEY: str = ""  # raw service-account JSON
    SCHEDULE_SHEET_NAME: str = "Schedules"
    REGISTRATION_SHEET_NAME: str = "Registrations"

    # Seating
    SEATS_PER_SESSION: int = 20

    # Redis (seat holds during registration writes)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False
    SEAT_HOLD_TTL: int = 30  # seconds

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def schedule_range(self) -> str:
        # Date | Time | TotalSeats | IsActive
        return f"{self.SCHEDULE_SHEET_NAME}!A2:D"

    @property
    def registration_range(self) -> str:
        # Date | Time | Seat | Email | Phone | RegisteredAt
        return f"{self.REGISTRATION_SHEET_NAME}!A2:F"

    def service_account_info(self) -> dict:
        if not self.GOOGLE_SERVICE_ACCOUNT_KEY:
            return {}
        return json.loads(self.GOOGLE_SERVICE_ACCOUNT_KEY)


@lru_cache()
def get_settings() -> Settings:
    return Settings()
