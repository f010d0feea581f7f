"""Runtime configuration: read once from environment variables at process start."""

import logging
import os
from dataclasses import dataclass
from typing import Self

DEFAULT_DATABASE_URL = "sqlite:///game-logs.db"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    echo_sql: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Self:
        return cls(
            database_url=os.environ.get("ARCADE_DATABASE_URL", "").strip()
            or DEFAULT_DATABASE_URL,
            echo_sql=_env_flag("ARCADE_DB_ECHO", default=False),
            log_level=os.environ.get("ARCADE_LOG_LEVEL", "INFO").strip().upper()
            or "INFO",
        )


def configure_logging(level: str = "INFO") -> None:
    """Root logger setup. Safe to call more than once (basicConfig is a no-op after the first call)."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
