"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

import tempfile
from pathlib import Path

from pydantic import BaseModel, field_validator

DEFAULT_FETCH_DIR = str(Path(tempfile.gettempdir()) / "ircwatch")


class StoreConfig(BaseModel):
    """A validated configuration model for the stores and the resource fetcher."""

    # Database
    database_path: str
    pool_size: int = 5
    busy_timeout: float = 30.0

    # Resource fetcher
    fetch_dir: str = DEFAULT_FETCH_DIR
    fetch_timeout: float = 10.0
    fetch_max_attempts: int = 1
    fetch_base_delay: float = 1.5

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, v: str) -> str:
        if not v:
            raise ValueError("Database path cannot be empty.")
        return v

    @field_validator("pool_size")
    @classmethod
    def validate_pool_size(cls, v: int) -> int:
        """Ensures a reasonable number of pooled connections."""
        if v < 1 or v > 32:
            raise ValueError("Pool size must be between 1 and 32.")
        return v

    @field_validator("busy_timeout", "fetch_timeout")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero.")
        return v

    @field_validator("fetch_dir")
    @classmethod
    def validate_fetch_dir(cls, v: str) -> str:
        if not v:
            raise ValueError("Fetch directory cannot be empty.")
        return v

    @field_validator("fetch_max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1 or v > 10:
            raise ValueError("Fetch attempts must be between 1 and 10.")
        return v

    @field_validator("fetch_base_delay")
    @classmethod
    def validate_base_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Fetch base delay cannot be negative.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        return set(cls.model_fields)
