"""
Gameplay events.

Rule engines never talk to the log pipeline directly. Every state transition returns the list of events it produced,
and the caller decides where they go (see src/services/log_emitter.py).
"""

from dataclasses import dataclass
from typing import Any, Optional

from src.core.shared_types import LogType, Severity

JSONObject = dict[str, Any]


@dataclass(frozen=True)
class LogDraft:
    """A log entry before the emitter assigned it an id and a timestamp."""

    type: LogType
    message: str
    severity: Severity
    category: str
    details: Optional[JSONObject] = None
    game_state: Optional[JSONObject] = None
    stack: Optional[str] = None


def info(
    message: str,
    category: str,
    severity: Severity = Severity.LOW,
    details: Optional[JSONObject] = None,
    game_state: Optional[JSONObject] = None,
) -> LogDraft:
    return LogDraft(LogType.INFO, message, severity, category, details, game_state)


def error(
    message: str,
    category: str,
    severity: Severity = Severity.MEDIUM,
    details: Optional[JSONObject] = None,
    game_state: Optional[JSONObject] = None,
) -> LogDraft:
    return LogDraft(LogType.ERROR, message, severity, category, details, game_state)


# Categories shared by all games
GAME_MECHANICS = "game-mechanics"
GAME_STATE = "game-state"
ACHIEVEMENT = "achievement"
COLLISION = "collision"
INPUT = "input"
