"""Configuration using pydantic-settings.

Values come from ``EXTRAMARK_*`` environment variables or a ``.env`` file.
Every public operation also accepts explicit overrides, so library callers
never have to touch the environment.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """extramark settings loaded from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRAMARK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging (CLI only; the library never configures sinks)
    log_level: str = "WARNING"
    log_json: bool = False

    # Seed text of blocks created by the duplicator
    placeholder_text: str = "    "

    # Lowest identifier handed out by an AnchorIdGenerator
    anchor_id_start: int = 1000

    # copy_marker_content drops a leading "N." numeral from the source text
    strip_numbering: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known value."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @field_validator("anchor_id_start")
    @classmethod
    def validate_anchor_id_start(cls, v: int) -> int:
        """Bookmark identifiers are non-negative integers."""
        if v < 0:
            raise ValueError("anchor_id_start must be >= 0")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
