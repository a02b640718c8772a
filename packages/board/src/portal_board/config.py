# This project was developed with assistance from AI tools.
"""Board client configuration via pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BoardSettings(BaseSettings):
    """Board client settings -- reads ``BOARD_``-prefixed environment variables."""

    model_config = SettingsConfigDict(env_prefix="BOARD_", env_file=".env", extra="ignore")

    API_BASE_URL: str = "http://localhost:8000"
    AUTH_TOKEN: str | None = None
    REQUEST_TIMEOUT: float = Field(default=10.0, description="Seconds before a request fails.")
    POLL_INTERVAL: float = Field(default=30.0, description="Seconds between job list refreshes.")
    PREFETCH_DEBOUNCE: float = Field(
        default=0.2,
        description="Seconds a card must stay hovered before its detail is prefetched.",
    )
    LONG_PRESS_SECONDS: float = Field(
        default=3.5,
        description="Hold time that opens the move-to sheet on a card.",
    )
    PREFETCH_CACHE_SIZE: int = Field(
        default=50,
        description="Job details kept for instant opens; the least recently used go first.",
    )
    OTP_TRUST_DAYS: int = 30
    SESSION_FILE: Path = Path.home() / ".onboarding-portal" / "session.json"


board_settings = BoardSettings()
