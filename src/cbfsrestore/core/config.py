# cbfsrestore/src/cbfsrestore/core/config.py

from typing import Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from cbfsrestore.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MATCH_PATTERN,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_WORKERS,
)
from cbfsrestore.core.errors import ConfigurationError


class RestoreConfig(BaseModel):
    """Immutable parameters of one restore run, captured once at startup."""

    base_url: str = DEFAULT_BASE_URL
    match: str = DEFAULT_MATCH_PATTERN
    workers: int = Field(default=DEFAULT_WORKERS, gt=0)
    queue_size: int = Field(default=DEFAULT_QUEUE_SIZE, gt=0)
    dry_run: bool = False
    request_timeout: Optional[float] = Field(default=None, gt=0)

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @classmethod
    def build(cls, **values) -> "RestoreConfig":
        """Validate ``values`` into a config, raising ConfigurationError on bad input."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid restore configuration: {e}") from e


class RestoreSettings(BaseSettings):
    """Run defaults read from CBFS_RESTORE_* environment variables or a .env file."""

    base_url: str = Field(default=DEFAULT_BASE_URL)
    match: str = Field(default=DEFAULT_MATCH_PATTERN)
    workers: int = Field(default=DEFAULT_WORKERS)
    queue_size: int = Field(default=DEFAULT_QUEUE_SIZE)
    dry_run: bool = Field(default=False)
    request_timeout: Optional[float] = Field(default=None)
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "CBFS_RESTORE_",
        "extra": "ignore",
    }

    def to_config(self, **overrides) -> RestoreConfig:
        """Merge CLI overrides (``None`` means "not given") over these settings."""
        values = {
            "base_url": self.base_url,
            "match": self.match,
            "workers": self.workers,
            "queue_size": self.queue_size,
            "dry_run": self.dry_run,
            "request_timeout": self.request_timeout,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return RestoreConfig.build(**values)


def get_settings() -> RestoreSettings:
    """Load settings from the environment and ``.env``.

    Raises:
        ConfigurationError: If a setting has an invalid value
    """
    try:
        return RestoreSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid restore settings: {e}") from e
