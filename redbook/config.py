"""
Configuration for the redbook converters.

Values come from REDBOOK_* environment variables.
"""

import os

from pydantic import BaseModel, Field

ENV_PREFIX = "REDBOOK_"


class Settings(BaseModel):
    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Conversion; 1 keeps extraction on the calling thread
    max_workers: int = Field(default=1, ge=1)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment, leaving coercion to the model."""
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw.strip()
        return cls(**values)


# Singleton instance
_settings = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None
