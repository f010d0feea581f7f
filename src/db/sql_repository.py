"""Implementation of (Log)Repository using SQLAlchemy"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import case, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.core.exceptions import StorageError
from src.core.models import LogModel, LogStats
from src.core.shared_types import LogType, Severity
from src.db.schema import DBLogEntry

logger = logging.getLogger(__name__)


def encode_payload(value: Optional[dict[str, Any]]) -> Optional[str]:
    """Structured payloads are stored as opaque JSON text. Absent payloads stay NULL."""
    if value is None:
        return None
    return json.dumps(value)


def decode_payload(text: Optional[str]) -> Optional[dict[str, Any]]:
    if text is None:
        return None
    return json.loads(text)


def to_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class SQLLogRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def add_log(self, log: LogModel) -> None:
        """Single INSERT. CHECK constraints on type / severity and the primary key are enforced by the database."""
        self.db.add(self._to_db(log))
        self._commit(f"insert log {log.id!r}")

    def list_logs(self) -> list[LogModel]:
        query = select(DBLogEntry).order_by(DBLogEntry.timestamp.desc())
        try:
            rows = self.db.scalars(query).all()
            return [self._to_model(row) for row in rows]
        except (SQLAlchemyError, json.JSONDecodeError) as e:
            logger.error("Reading logs failed: %s", e)
            raise StorageError(f"Could not read logs: {e}") from e

    def clear_logs(self) -> int:
        try:
            result = self.db.execute(delete(DBLogEntry))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Could not clear logs: {e}") from e
        self._commit("clear logs")
        return result.rowcount

    def log_stats(self) -> LogStats:
        """One aggregate query over the whole table."""

        def _count_where(condition: Any) -> Any:
            return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)

        query = select(
            func.count(DBLogEntry.id),
            *[_count_where(DBLogEntry.type == log_type.value) for log_type in LogType],
            *[_count_where(DBLogEntry.severity == severity.value) for severity in Severity],
        )
        try:
            row = self.db.execute(query).one()
        except SQLAlchemyError as e:
            raise StorageError(f"Could not compute log statistics: {e}") from e

        total, *counts = row
        type_counts = counts[: len(LogType)]
        severity_counts = counts[len(LogType) :]
        return LogStats(
            total=int(total),
            by_type={t.value: int(c) for t, c in zip(LogType, type_counts)},
            by_severity={s.value: int(c) for s, c in zip(Severity, severity_counts)},
        )

    def _commit(self, action: str) -> None:
        """Commit or roll back. The gateway does not retry."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Storage failure during %s: %s", action, e)
            raise StorageError(f"Storage failure during {action}: {e}") from e

    def _to_db(self, log: LogModel) -> DBLogEntry:
        """Convert data transfer model to SQLAlchemy model."""
        return DBLogEntry(
            id=log.id,
            timestamp=to_naive_utc(log.timestamp),
            type=log.type,
            message=log.message,
            severity=log.severity,
            category=log.category,
            details=encode_payload(log.details),
            stack=log.stack,
            user_agent=log.user_agent,
            game_state=encode_payload(log.game_state),
        )

    def _to_model(self, log_db: DBLogEntry) -> LogModel:
        """Convert SQLAlchemy model to data transfer model."""
        return LogModel(
            id=log_db.id,
            timestamp=log_db.timestamp.replace(tzinfo=timezone.utc),
            type=log_db.type,
            message=log_db.message,
            severity=log_db.severity,
            category=log_db.category,
            details=decode_payload(log_db.details),
            stack=log_db.stack,
            user_agent=log_db.user_agent,
            game_state=decode_payload(log_db.game_state),
        )
