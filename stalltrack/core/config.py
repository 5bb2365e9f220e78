"""Environment-driven configuration for the stall tracker service.

Every tunable lives on ``Settings`` so anyone reading the project can answer
which knobs exist and what they default to. Values come from the process
environment first and ``.env`` / ``.env.local`` second.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Stall Tracker"
    APP_ENV: str = "dev"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    # Session dates ("today") are computed in this zone.
    TZ: str = "America/Chicago"

    # Empty means "derive from DATA_DIR" (see ``database_url``).
    DB_URL: str = Field(default="", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))

    LOG_LEVEL: str = "INFO"

    LOW_STOCK_THRESHOLD: int = 5
    RECENT_DAYS: int = 7

    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Comma separated; CORS is only enabled when this is non-empty.
    ALLOWED_ORIGINS: str = ""

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'stalltrack.sqlite'}"

    @property
    def allowed_origins(self) -> list[str]:
        return [item.strip() for item in self.ALLOWED_ORIGINS.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
