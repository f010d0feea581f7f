"""Requests and Response models"""

from datetime import datetime, timezone
from typing import Any, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.models import LogModel
from src.core.shared_types import LogType, Severity

# Fields a log entry cannot be stored without. Empty strings count as missing.
REQUIRED_LOG_FIELDS: tuple[str, ...] = ("id", "type", "message", "severity", "category")


class _CamelModel(BaseModel):
    """Wire format uses camelCase (userAgent, gameState). Python side uses snake_case."""

    model_config = ConfigDict(populate_by_name=True)


# --- REQUEST MODELS ---
class CreateLogRequest(_CamelModel):
    id: str
    type: LogType
    message: str
    severity: Severity
    category: str
    timestamp: Optional[datetime] = None
    details: Optional[dict[str, Any]] = None
    stack: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    game_state: Optional[dict[str, Any]] = Field(default=None, alias="gameState")

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Timestamps without a time zone are taken to be UTC."""
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)

    def to_model(self, received_at: datetime) -> LogModel:
        return LogModel(
            id=self.id,
            timestamp=self.timestamp or received_at,
            type=self.type.value,
            message=self.message,
            severity=self.severity.value,
            category=self.category,
            details=self.details,
            stack=self.stack,
            user_agent=self.user_agent,
            game_state=self.game_state,
        )


class LogQuery(BaseModel):
    """Optional filters on GET /logs"""

    type: Optional[LogType] = None
    severity: Optional[Severity] = None
    search: Optional[str] = None


# --- RESPONSE MODELS ---
class SuccessResponse(BaseModel):
    success: bool = True


class LogEntryResponse(_CamelModel):
    id: str
    timestamp: datetime
    type: LogType
    message: str
    severity: Severity
    category: str
    details: Optional[dict[str, Any]] = None
    stack: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="userAgent")
    game_state: Optional[dict[str, Any]] = Field(default=None, alias="gameState")

    @classmethod
    def from_model(cls, model: LogModel) -> Self:
        return cls(
            id=model.id,
            timestamp=model.timestamp,
            type=LogType(model.type),
            message=model.message,
            severity=Severity(model.severity),
            category=model.category,
            details=model.details,
            stack=model.stack,
            user_agent=model.user_agent,
            game_state=model.game_state,
        )


class LogStatsResponse(BaseModel):
    total: int
    by_type: dict[LogType, int]
    by_severity: dict[Severity, int]


class TimeBucketResponse(BaseModel):
    bucket_start: datetime
    timestamp: str  # clock label, e.g. "9:40 AM"
    error: int
    warning: int
    info: int


class CategoryCountResponse(BaseModel):
    category: str
    count: int
