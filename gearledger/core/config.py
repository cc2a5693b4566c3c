"""Environment-driven configuration for the equipment ledger.

Every knob the service reads lives on ``AppSettings``. Values come from the
process environment first and then from ``.env``/``.env.local`` files so a
local install can run without exporting anything.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Gear Ledger"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    # Dates written to the ledger are "today" in this zone when callers omit one.
    TZ: str = "Asia/Seoul"

    DB_URL: str = Field(default="", validation_alias=AliasChoices("DB_URL", "DATABASE_URL"))

    # X-API-Key must match this (if set). An empty key leaves the API open,
    # which is the normal single-operator desktop setup.
    API_KEY: str = Field(default="", validation_alias=AliasChoices("API_KEY", "API_TOKEN"))

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    HOST: str = "127.0.0.1"
    PORT: int = 8089

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'equipment_manager.db'}"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
