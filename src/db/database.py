"""
Database handle.

Created once at process start and passed to whoever needs a session. Nothing is connected at import time:
`open()` creates the engine and the tables, `close()` disposes of the connection pool.
"""

import logging
from typing import Generator, Optional

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.exceptions import StorageError
from src.db.schema import Base

logger = logging.getLogger(__name__)


class Database:
    def __init__(self, url: str, echo: bool = False) -> None:
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker[Session]] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StorageError("Database is not open.")
        return self._engine

    def open(self) -> None:
        """Connect and make sure all tables exist. Opening twice is a no-op."""
        if self._engine is not None:
            return

        engine_kwargs: dict = {"echo": self.echo}
        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.url:
                # a single shared connection, otherwise every connection gets its own empty database
                engine_kwargs["poolclass"] = StaticPool

        engine = create_engine(self.url, **engine_kwargs)
        Base.metadata.create_all(bind=engine)
        self._engine = engine
        self._session_factory = sessionmaker(autoflush=False, bind=engine)
        logger.info("Database opened at %s", self.url)

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database closed")

    def new_session(self) -> Session:
        if self._session_factory is None:
            raise StorageError("Database is not open.")
        return self._session_factory()

    def get_db(self) -> Generator[Session, None, None]:
        db = self.new_session()
        try:
            yield db
        finally:
            db.close()
