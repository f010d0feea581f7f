"""
Turns gameplay events (LogDraft) into log entries and hands them to the persistence gateway.

Two ways to reach the gateway:
* ServiceLogSink: same process, calls LogService directly
* HttpLogSink: POST /logs through an httpx client
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol
from uuid import uuid4

import httpx

from src.core.exceptions import ArcadeError, LogSinkError
from src.core.models import LogModel
from src.games.events import LogDraft
from src.services.log_service import LogService, to_payload

logger = logging.getLogger(__name__)

LOGS_PATH = "/logs"


class LogSink(Protocol):
    """Anything that accepts a finished log entry. Must raise an ArcadeError when the entry is not stored."""

    def submit(self, log: LogModel) -> None: ...


class ServiceLogSink:
    def __init__(self, service: LogService) -> None:
        self.service = service

    def submit(self, log: LogModel) -> None:
        self.service.submit(log)


class HttpLogSink:
    """One request per entry. No batching, no retries."""

    def __init__(self, client: httpx.Client, path: str = LOGS_PATH) -> None:
        self.client = client
        self.path = path

    def submit(self, log: LogModel) -> None:
        try:
            response = self.client.post(self.path, json=to_payload(log))
        except httpx.HTTPError as e:
            raise LogSinkError(f"Could not reach the log API: {e}") from e

        if response.is_error:
            raise LogSinkError(
                f"Log API rejected entry {log.id!r} ({response.status_code}): {self._error_text(response)}"
            )

    def _error_text(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("error", body))
        return str(body)


def new_log_id() -> str:
    return uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EventLogEmitter:
    """Stamps drafts with an id, a capture time and the client's user agent, then forwards them to the sink."""

    def __init__(
        self,
        sink: LogSink,
        user_agent: Optional[str] = None,
        id_factory: Callable[[], str] = new_log_id,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.sink = sink
        self.user_agent = user_agent
        self.id_factory = id_factory
        self.clock = clock

    def build(self, draft: LogDraft) -> LogModel:
        return LogModel(
            id=self.id_factory(),
            timestamp=self.clock(),
            type=draft.type.value,
            message=draft.message,
            severity=draft.severity.value,
            category=draft.category,
            details=draft.details,
            stack=draft.stack,
            user_agent=self.user_agent,
            game_state=draft.game_state,
        )

    def record(self, draft: LogDraft) -> LogModel:
        """Fail-fast: whatever the sink raises propagates to the caller."""
        log = self.build(draft)
        self.sink.submit(log)
        return log

    def record_events(self, drafts: Iterable[LogDraft]) -> list[LogModel]:
        """
        Best-effort variant for game loops: a failed write is logged and dropped, so an unavailable
        log store never interrupts gameplay. Returns the entries that were stored.
        """
        recorded: list[LogModel] = []
        for draft in drafts:
            try:
                recorded.append(self.record(draft))
            except ArcadeError as e:
                logger.warning("Dropped gameplay log %r: %s", draft.message, e)
        return recorded
