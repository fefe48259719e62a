"""Application configuration."""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DEBOUNCE_MS = 300
DEFAULT_LOG_LEVEL = "INFO"


class Settings(BaseSettings):
    """Runtime settings loaded from ``IWL_*`` environment variables."""

    debounce_ms: int = Field(DEFAULT_DEBOUNCE_MS, ge=0)
    log_level: str = DEFAULT_LOG_LEVEL

    model_config = SettingsConfigDict(env_prefix="IWL_", extra="ignore")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0
