"""Unit tests for src/services/log_service.py"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Generator

import pytest

from src.api.models import LogEntryResponse, LogQuery, SuccessResponse
from src.core.exceptions import ArcadeError, LogValidationError
from src.core.models import LogModel, LogStats
from src.core.shared_types import LogType, Severity
from src.services.log_service import LogService, to_payload

NOON = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# --- MOCK DEPENDENCIES ----
class MockRepository:
    """Mock the LogRepository using a dictionary of log models."""

    def __init__(self) -> None:
        self._logs: dict[str, LogModel] = {}

    def add_log(self, log: LogModel) -> None:
        self._logs[log.id] = log

    def list_logs(self) -> list[LogModel]:
        """Most recent first, like the real thing"""
        return sorted(self._logs.values(), key=lambda log: log.timestamp, reverse=True)

    def clear_logs(self) -> int:
        count = len(self._logs)
        self._logs.clear()
        return count

    def log_stats(self) -> LogStats:
        logs = list(self._logs.values())
        return LogStats(
            total=len(logs),
            by_type={t.value: sum(log.type == t for log in logs) for t in LogType},
            by_severity={s.value: sum(log.severity == s for log in logs) for s in Severity},
        )


@pytest.fixture
def mock_repository() -> Generator[MockRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = MockRepository()
    try:
        yield repo
    finally:
        repo.clear_logs()


@pytest.fixture
def service(mock_repository: MockRepository) -> LogService:
    return LogService(mock_repository)


def valid_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": "abc123",
        "timestamp": "2024-01-01T12:00:00Z",
        "type": "error",
        "message": "Wall collision detected",
        "severity": "medium",
        "category": "collision",
        "details": {"position": {"x": 20, "y": 4}},
        "userAgent": "pytest",
        "gameState": {"score": 3},
    }
    payload.update(overrides)
    return payload


# --- CREATE ---
def test_create_log(service: LogService, mock_repository: MockRepository) -> None:
    response = service.create_log(valid_payload())
    assert isinstance(response, SuccessResponse)
    assert response.success

    [stored] = mock_repository.list_logs()
    assert stored.id == "abc123"
    assert stored.timestamp == NOON
    assert stored.type == "error"
    assert stored.severity == "medium"
    assert stored.details == {"position": {"x": 20, "y": 4}}
    assert stored.user_agent == "pytest"
    assert stored.game_state == {"score": 3}
    assert stored.stack is None


@pytest.mark.parametrize("field", ["id", "type", "message", "severity", "category"])
def test_missing_required_field(
    service: LogService, mock_repository: MockRepository, field: str
) -> None:
    """Missing and empty both count as missing. Nothing gets stored."""
    payload = valid_payload()
    del payload[field]
    with pytest.raises(LogValidationError, match=f"Missing required fields in log data: {field}"):
        service.create_log(payload)

    with pytest.raises(LogValidationError):
        service.create_log(valid_payload(**{field: ""}))

    assert mock_repository.list_logs() == []


def test_all_missing_fields_are_listed(service: LogService) -> None:
    with pytest.raises(LogValidationError) as exc_info:
        service.create_log({"id": "x", "type": "info"})
    assert str(exc_info.value) == "Missing required fields in log data: message, severity, category"


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": "fatal"},
        {"severity": "critical"},
        {"timestamp": "yesterday-ish"},
        {"details": ["not", "an", "object"]},
        {"gameState": "score: 3"},
    ],
)
def test_malformed_payload(
    service: LogService, mock_repository: MockRepository, overrides: dict[str, Any]
) -> None:
    with pytest.raises(LogValidationError):
        service.create_log(valid_payload(**overrides))
    assert mock_repository.list_logs() == []


def test_unserializable_details(service: LogService, mock_repository: MockRepository) -> None:
    with pytest.raises(LogValidationError, match="Invalid details data"):
        service.create_log(valid_payload(details={"when": object()}))
    assert mock_repository.list_logs() == []


@pytest.mark.parametrize("payload", [[1, 2], "log", 42, None])
def test_payload_must_be_an_object(
    service: LogService, mock_repository: MockRepository, payload: Any
) -> None:
    with pytest.raises(LogValidationError, match="must be a JSON object"):
        service.create_log(payload)
    assert mock_repository.list_logs() == []


def test_validation_error_is_an_arcade_error(service: LogService) -> None:
    with pytest.raises(ArcadeError):
        service.create_log({})


def test_timestamp_defaults_to_now(service: LogService, mock_repository: MockRepository) -> None:
    payload = valid_payload()
    del payload["timestamp"]
    before = datetime.now(timezone.utc)
    service.create_log(payload)
    after = datetime.now(timezone.utc)

    [stored] = mock_repository.list_logs()
    assert before <= stored.timestamp <= after


def test_naive_timestamp_is_utc(service: LogService, mock_repository: MockRepository) -> None:
    service.create_log(valid_payload(timestamp="2024-01-01T12:00:00"))
    [stored] = mock_repository.list_logs()
    assert stored.timestamp == NOON
    assert stored.timestamp.utcoffset() == timedelta(0)


def test_submit_uses_the_same_path(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    log = make_log(details={"moveCount": 6}, user_agent="pytest")
    service.submit(log)
    assert mock_repository.list_logs() == [log]

    with pytest.raises(LogValidationError):
        service.submit(make_log(category=""))


def test_to_payload_drops_absent_fields(make_log: Callable[..., LogModel]) -> None:
    payload = to_payload(make_log(id="p1", game_state={"score": 1}))
    assert payload == {
        "id": "p1",
        "timestamp": "2024-01-01T12:00:00+00:00",
        "type": "error",
        "message": "Test error",
        "severity": "high",
        "category": "test",
        "gameState": {"score": 1},
    }


# --- READ / DELETE ---
def test_list_logs_newest_first(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    mock_repository.add_log(make_log(id="old", timestamp=NOON - timedelta(hours=1)))
    mock_repository.add_log(make_log(id="new", timestamp=NOON))

    logs = service.list_logs()
    assert all(isinstance(log, LogEntryResponse) for log in logs)
    assert [log.id for log in logs] == ["new", "old"]


def test_list_logs_with_filters(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    mock_repository.add_log(make_log(id="e1", type="error", severity="high", message="Wall collision"))
    mock_repository.add_log(make_log(id="i1", type="info", severity="low", message="Food eaten"))
    mock_repository.add_log(make_log(id="w1", type="warning", severity="low", category="network"))

    assert [log.id for log in service.list_logs(LogQuery(type=LogType.INFO))] == ["i1"]
    assert {log.id for log in service.list_logs(LogQuery(severity=Severity.LOW))} == {"i1", "w1"}
    assert [log.id for log in service.list_logs(LogQuery(search="WALL"))] == ["e1"]
    assert [log.id for log in service.list_logs(LogQuery(search="netw"))] == ["w1"]
    assert len(service.list_logs(LogQuery())) == 3


def test_clear_logs(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    mock_repository.add_log(make_log())
    mock_repository.add_log(make_log())
    assert service.clear_logs().success
    assert service.list_logs() == []


def test_log_stats(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    mock_repository.add_log(make_log(type="error", severity="high"))
    mock_repository.add_log(make_log(type="info", severity="low"))
    mock_repository.add_log(make_log(type="info", severity="low"))

    stats = service.log_stats()
    assert stats.total == 3
    assert stats.by_type == {LogType.ERROR: 1, LogType.INFO: 2, LogType.WARNING: 0}
    assert stats.by_severity == {Severity.LOW: 2, Severity.MEDIUM: 0, Severity.HIGH: 1}


def test_dashboard_views(
    service: LogService, mock_repository: MockRepository, make_log: Callable[..., LogModel]
) -> None:
    mock_repository.add_log(make_log(category="collision"))
    mock_repository.add_log(make_log(category="collision", timestamp=NOON - timedelta(minutes=5)))
    mock_repository.add_log(make_log(type="info", category="input"))

    buckets = service.time_series(tz=timezone.utc)
    assert len(buckets) == 145
    assert buckets[-1].timestamp == "12:00 PM"
    assert (buckets[-1].error, buckets[-1].info) == (1, 1)
    assert buckets[-2].error == 1  # 11:55 falls into the 11:50 bucket

    categories = service.error_distribution()
    assert [(c.category, c.count) for c in categories] == [("collision", 2)]
