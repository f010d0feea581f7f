"""
Type definitions used across layers
"""

from enum import StrEnum


class LogType(StrEnum):
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# --- Values accepted by the CHECK constraints on the game_logs table
LOG_TYPES: tuple[str, ...] = tuple(t.value for t in LogType)
SEVERITIES: tuple[str, ...] = tuple(s.value for s in Severity)
