"""Application configuration using Pydantic Settings."""

import os
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _is_test_environment() -> bool:
    """Check if we're running in a test environment."""
    return (
        "PYTEST_CURRENT_TEST" in os.environ
        or "pytest" in os.environ.get("_", "")
        or os.environ.get("ENVIRONMENT") == "test"
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = (
        "sqlite+aiosqlite:///:memory:"
        if _is_test_environment()
        else "sqlite+aiosqlite:///./galant.db"
    )
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Identity provider (tokens are issued externally, only verified here)
    JWT_SECRET_KEY: str = (
        "test-secret-key-change-in-production" if _is_test_environment() else ""
    )
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = None

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8080"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    # Application
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Verovio layout
    SCORE_SCALE: int = Field(default=40, description="Verovio scale (percent)")
    SCORE_PAGE_WIDTH: int = 2000
    SCORE_PAGE_HEIGHT: int = 1000
    SCORE_ADJUST_PAGE_HEIGHT: bool = True

    # Rendered element conventions
    NOTE_CLASS: str = Field(default="note", description="Class of placeable note elements")
    MEASURE_CLASS: str = "measure"
    MEASURE_ID_PREFIX: str = Field(
        default="m",
        description="Measure ids follow '<prefix><number>' for jump-to-measure",
    )
    MEASURE_NUMBER_ATTRIBUTE: str = "n"

    # Overlay geometry, in SVG user units of the rendered page
    MARKER_RADIUS: float = 90.0
    MARKER_GAP: float = 40.0
    GROUP_LABEL_GAP: float = 120.0
    MARKER_FONT_SIZE: float = 110.0

    # Score sessions
    MAX_SESSIONS: int = 64
    SESSION_LOAD_TIMEOUT: float = 30.0
    REJECT_UNRESOLVED_MEASURES: bool = Field(
        default=False,
        description="Reject placements whose measure cannot be resolved instead of using measure 1",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


settings = Settings()
