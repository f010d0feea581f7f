"""Orchestration of communication from API router to persistence layer (and the reverse direction)."""

import json
import logging
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from src.api.models import (
    REQUIRED_LOG_FIELDS,
    CategoryCountResponse,
    CreateLogRequest,
    LogEntryResponse,
    LogQuery,
    LogStatsResponse,
    SuccessResponse,
    TimeBucketResponse,
)
from src.core.exceptions import LogValidationError
from src.core.models import LogModel
from src.db.repository import LogRepository
from src.services.dashboard import bucket_by_category, bucket_by_time, filter_logs

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LogService:
    """Persistence gateway for log entries: validate -> serialize -> store, and the read side."""

    def __init__(self, repository: LogRepository) -> None:
        self.repo = repository

    # -- API routes logic ---
    def create_log(self, payload: Any) -> SuccessResponse:
        """
        Store a single log entry
        ---

        1. all required fields present (and non-empty)
        2. the rest of the payload is well formed
        3. details / game state can be serialized to JSON
        4. insert. Validation errors never reach the database, so a rejected entry leaves nothing behind.
        """
        if not isinstance(payload, Mapping):
            raise LogValidationError(
                f"Log data must be a JSON object, got {type(payload).__name__}"
            )

        missing = [name for name in REQUIRED_LOG_FIELDS if not payload.get(name)]
        if missing:
            logger.warning("Rejected log entry, missing required fields: %s", missing)
            raise LogValidationError(
                f"Missing required fields in log data: {', '.join(missing)}"
            )

        try:
            request = CreateLogRequest.model_validate(dict(payload))
        except ValidationError as e:
            logger.warning("Rejected malformed log entry %r: %s", payload.get("id"), e)
            raise LogValidationError(f"Invalid log data: {e}") from e

        self._assert_serializable("details", request.details)
        self._assert_serializable("game state", request.game_state)

        self.repo.add_log(request.to_model(received_at=utc_now()))
        return SuccessResponse()

    def list_logs(self, query: Optional[LogQuery] = None) -> list[LogEntryResponse]:
        """Most recent first. Without a query every entry is returned."""
        logs = self.repo.list_logs()
        if query is not None:
            logs = filter_logs(logs, query.type, query.severity, query.search)
        return [LogEntryResponse.from_model(log) for log in logs]

    def clear_logs(self) -> SuccessResponse:
        deleted = self.repo.clear_logs()
        logger.info("Cleared %d log entries", deleted)
        return SuccessResponse()

    def log_stats(self) -> LogStatsResponse:
        stats = self.repo.log_stats()
        return LogStatsResponse(
            total=stats.total, by_type=stats.by_type, by_severity=stats.by_severity
        )

    def time_series(self, tz: Optional[tzinfo] = None) -> list[TimeBucketResponse]:
        return [
            TimeBucketResponse(
                bucket_start=bucket.bucket_start,
                timestamp=bucket.label,
                error=bucket.error,
                warning=bucket.warning,
                info=bucket.info,
            )
            for bucket in bucket_by_time(self.repo.list_logs(), tz)
        ]

    def error_distribution(self) -> list[CategoryCountResponse]:
        return [
            CategoryCountResponse(category=row.category, count=row.count)
            for row in bucket_by_category(self.repo.list_logs())
        ]

    # -- Used by the in-process emitter sink --
    def submit(self, log: LogModel) -> None:
        """Same validation path as POST /logs."""
        self.create_log(to_payload(log))

    # -- Internal helpers --
    def _assert_serializable(self, name: str, value: Optional[dict[str, Any]]) -> None:
        if value is None:
            return
        try:
            json.dumps(value)
        except (TypeError, ValueError) as e:
            raise LogValidationError(f"Invalid {name} data: {e}") from e


def to_payload(log: LogModel) -> dict[str, Any]:
    """LogModel -> the JSON body accepted by POST /logs"""
    payload: dict[str, Any] = {
        "id": log.id,
        "timestamp": log.timestamp.isoformat(),
        "type": log.type,
        "message": log.message,
        "severity": log.severity,
        "category": log.category,
        "details": log.details,
        "stack": log.stack,
        "userAgent": log.user_agent,
        "gameState": log.game_state,
    }
    return {key: value for key, value in payload.items() if value is not None}
