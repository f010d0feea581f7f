"""Database tables / schema"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.shared_types import LOG_TYPES, SEVERITIES


def _in_list(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Base(DeclarativeBase):
    pass


class DBLogEntry(Base):
    __tablename__ = "game_logs"
    __table_args__ = (
        CheckConstraint(_in_list("type", LOG_TYPES), name="ck_game_logs_type"),
        CheckConstraint(_in_list("severity", SEVERITIES), name="ck_game_logs_severity"),
        Index("ix_game_logs_timestamp", "timestamp"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # stored as naive UTC (SQLite has no time zone support)
    timestamp: Mapped[datetime] = mapped_column(DateTime)
    type: Mapped[str] = mapped_column(String(16))
    message: Mapped[str] = mapped_column(Text)
    severity: Mapped[str] = mapped_column(String(16))
    category: Mapped[str] = mapped_column(String)
    # JSON encoded text, NULL when absent
    details: Mapped[Optional[str]] = mapped_column(Text)
    stack: Mapped[Optional[str]] = mapped_column(Text)
    user_agent: Mapped[Optional[str]] = mapped_column(Text)
    game_state: Mapped[Optional[str]] = mapped_column(Text)
