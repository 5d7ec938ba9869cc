from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


class ConfigurationError(RuntimeError):
    """Raised when required process configuration is missing."""


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values handed to the store and FastAPI components."""

    users_file: Path
    app_name: str = "directory-service"
    version: str = "0.1.0"
    http_host: str = "0.0.0.0"
    http_port: int = 5555
    log_level: str = "INFO"
    verify_rate_limit_requests: int = 5
    verify_rate_limit_window_seconds: int = 60

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``AUT_*`` environment variables."""
        users_file = os.getenv("AUT_USERS_FILE")
        if not users_file:
            raise ConfigurationError("AUT_USERS_FILE must be set")
        return cls(
            users_file=Path(users_file),
            http_host=os.getenv("AUT_HOST", "0.0.0.0"),
            http_port=int(os.getenv("AUT_PORT", "5555")),
            log_level=os.getenv("AUT_LOG_LEVEL", "INFO").upper(),
            verify_rate_limit_requests=int(os.getenv("AUT_VERIFY_RATE_LIMIT_REQUESTS", "5")),
            verify_rate_limit_window_seconds=int(os.getenv("AUT_VERIFY_RATE_LIMIT_WINDOW_SECONDS", "60")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings.from_env()
