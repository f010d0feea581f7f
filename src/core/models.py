"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Hence, both the API layer (higher) and domain/db layers (lower) will use model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

# Type aliases to make LogModel easier to read
JSONObject = dict[str, Any]


@dataclass(frozen=True)
class LogModel:
    """Transport-safe representation of a single log entry used between API, Service, DB, and emitter."""

    id: str
    timestamp: datetime
    type: str
    message: str
    severity: str
    category: str
    details: Optional[JSONObject] = None
    stack: Optional[str] = None
    user_agent: Optional[str] = None
    game_state: Optional[JSONObject] = None


@dataclass(frozen=True)
class LogStats:
    """Aggregate counts over the full log collection. Never stored, always recomputed."""

    total: int
    by_type: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)
