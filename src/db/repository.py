"""Protocol repository (the service only relies on these methods, the SQLAlchemy version is one implementation)"""

from typing import Protocol

from src.core.models import LogModel, LogStats


class LogRepository(Protocol):
    """Persistence layer orchestration"""

    def add_log(self, log: LogModel) -> None:
        """Store a new entry. Raises StorageError if the store refuses it."""
        ...

    def list_logs(self) -> list[LogModel]:
        """Every stored entry, most recent timestamp first."""
        ...

    def clear_logs(self) -> int:
        """Remove every entry. Returns the number of rows deleted."""
        ...

    def log_stats(self) -> LogStats:
        """Total, counts by type and counts by severity in a single query."""
        ...
