from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from src.api.models import CreateLogRequest, LogEntryResponse, LogStatsResponse
from src.core.models import LogModel
from src.core.shared_types import LogType, Severity

RECEIVED_AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# -- Validation - CreateLogRequest --
def test_camel_case_aliases() -> None:
    request = CreateLogRequest.model_validate(
        {
            "id": "a1",
            "type": "warning",
            "message": "Slow frame",
            "severity": "low",
            "category": "performance",
            "userAgent": "Mozilla/5.0",
            "gameState": {"score": 10},
        }
    )
    assert request.user_agent == "Mozilla/5.0"
    assert request.game_state == {"score": 10}
    assert request.type == LogType.WARNING


def test_snake_case_names_are_accepted_too() -> None:
    request = CreateLogRequest(
        id="a1",
        type=LogType.INFO,
        message="Food eaten",
        severity=Severity.LOW,
        category="game-mechanics",
        user_agent="pytest",
    )
    assert request.user_agent == "pytest"


@pytest.mark.parametrize(
    "field, value",
    [
        ("type", "debug"),  # not one of error / warning / info
        ("severity", "urgent"),  # not one of low / medium / high
        ("details", "plain text"),  # must be an object
    ],
)
def test_invalid_values(field: str, value: str) -> None:
    data = {
        "id": "a1",
        "type": "info",
        "message": "Food eaten",
        "severity": "low",
        "category": "game-mechanics",
        field: value,
    }
    with pytest.raises(ValidationError):
        CreateLogRequest.model_validate(data)


def test_timestamp_handling() -> None:
    base = {"id": "a1", "type": "info", "message": "m", "severity": "low", "category": "c"}

    # missing: server receive time
    model = CreateLogRequest.model_validate(base).to_model(received_at=RECEIVED_AT)
    assert model.timestamp == RECEIVED_AT

    # naive: taken as UTC
    naive = CreateLogRequest.model_validate({**base, "timestamp": "2024-01-01T08:30:00"})
    assert naive.timestamp == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)

    # explicit offset is kept
    aware = CreateLogRequest.model_validate({**base, "timestamp": "2024-01-01T08:30:00+02:00"})
    assert aware.timestamp is not None
    assert aware.timestamp.utcoffset() == timedelta(hours=2)


def test_to_model_uses_plain_strings() -> None:
    request = CreateLogRequest(
        id="a1", type=LogType.ERROR, message="m", severity=Severity.HIGH, category="c"
    )
    model = request.to_model(received_at=RECEIVED_AT)
    assert model == LogModel(
        id="a1",
        timestamp=RECEIVED_AT,
        type="error",
        message="m",
        severity="high",
        category="c",
    )


# -- Responses --
def test_log_entry_response_dumps_camel_case() -> None:
    model = LogModel(
        id="a1",
        timestamp=RECEIVED_AT,
        type="info",
        message="Dominoes game started",
        severity="low",
        category="game-state",
        user_agent="pytest",
        game_state={"boardSize": 0},
    )
    dumped = LogEntryResponse.from_model(model).model_dump(by_alias=True)
    assert dumped["userAgent"] == "pytest"
    assert dumped["gameState"] == {"boardSize": 0}
    assert dumped["type"] == LogType.INFO


def test_stats_response_keys() -> None:
    response = LogStatsResponse(
        total=1, by_type={"error": 1, "info": 0, "warning": 0}, by_severity={"low": 1}
    )
    assert response.by_type[LogType.ERROR] == 1
    assert response.by_severity[Severity.LOW] == 1
