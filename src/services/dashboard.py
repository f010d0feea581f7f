"""
Summaries of the log collection for the dashboard.

Everything here is derived on demand from a list of LogModel. Nothing gets stored.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Iterable, Optional

from src.core.models import LogModel
from src.core.shared_types import LogType, Severity

BUCKET_MINUTES = 10
WINDOW = timedelta(hours=24)
TOP_CATEGORIES = 10


@dataclass(frozen=True)
class TimeBucket:
    bucket_start: datetime
    label: str
    error: int = 0
    warning: int = 0
    info: int = 0


@dataclass(frozen=True)
class CategoryCount:
    category: str
    count: int


def clock_label(moment: datetime) -> str:
    """12-hour clock time, e.g. '9:40 AM' or '12:00 PM'"""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


def _floor_to_bucket(moment: datetime) -> datetime:
    return moment.replace(
        minute=moment.minute - moment.minute % BUCKET_MINUTES, second=0, microsecond=0
    )


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    """astimezone(None) converts to the system's local time zone"""
    return moment.astimezone(tz)


def bucket_by_time(logs: list[LogModel], tz: Optional[tzinfo] = None) -> list[TimeBucket]:
    """
    Counts per log type in 10-minute buckets
    ---

    The window is the 24 hours before the latest log, both ends included, so there are always
    24 * 6 + 1 = 145 buckets. Buckets start on a 10-minute clock boundary in the given time zone
    (local time when tz is None). The window starts on the first bucket's boundary, i.e. the 10-minute
    floor of (latest - 24h): a log up to 10 minutes older than that still lands in the first bucket.
    Anything older is ignored.
    """
    if not logs:
        return []

    latest = _local(max(log.timestamp for log in logs), tz)
    earliest = latest - WINDOW
    step = timedelta(minutes=BUCKET_MINUTES)
    bucket_count = int(WINDOW / step) + 1

    counts: dict[datetime, Counter[str]] = {}
    for index in range(bucket_count):
        counts[_floor_to_bucket(earliest + index * step)] = Counter()

    for log in logs:
        key = _floor_to_bucket(_local(log.timestamp, tz))
        if key in counts:
            counts[key][log.type] += 1

    return [
        TimeBucket(
            bucket_start=start,
            label=clock_label(start),
            error=tally[LogType.ERROR],
            warning=tally[LogType.WARNING],
            info=tally[LogType.INFO],
        )
        for start, tally in sorted(counts.items())
    ]


def bucket_by_category(logs: list[LogModel]) -> list[CategoryCount]:
    """
    Error logs per category, most frequent first, top 10.
    Ties keep the order in which the categories were first encountered (sorted() is stable, Counter keeps insertion order).
    """
    errors = Counter(log.category for log in logs if log.type == LogType.ERROR)
    ranked = sorted(errors.items(), key=lambda item: item[1], reverse=True)
    return [CategoryCount(category, count) for category, count in ranked[:TOP_CATEGORIES]]


def filter_logs(
    logs: Iterable[LogModel],
    log_type: Optional[LogType] = None,
    severity: Optional[Severity] = None,
    search: Optional[str] = None,
) -> list[LogModel]:
    """Type and severity must match exactly; search is a case-insensitive substring of the message or category."""
    term = (search or "").strip().lower()
    return [
        log
        for log in logs
        if (log_type is None or log.type == log_type)
        and (severity is None or log.severity == severity)
        and (not term or term in log.message.lower() or term in log.category.lower())
    ]
