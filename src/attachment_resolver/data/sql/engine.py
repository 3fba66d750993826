from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from attachment_resolver.config.settings import DATABASE_NAME, data_dir
from attachment_resolver.utils import get_logger

# Registers the catalog tables on SQLModel.metadata.
from . import models  # noqa: F401


logger = get_logger(__name__)


@dataclass(slots=True)
class DatabaseConfig:
    """Where the SQLite catalog lives and how connections are tuned."""

    path: Path = field(default_factory=lambda: data_dir() / DATABASE_NAME)
    echo: bool = False
    busy_timeout: float = 30.0
    pragmas: dict[str, str] = field(
        default_factory=lambda: {
            "journal_mode": "WAL",
            "synchronous": "NORMAL",
            "foreign_keys": "ON",
        }
    )

    def uri(self) -> str:
        return f"sqlite:///{self.path}"


class DatabaseManager:
    """Owns the lazily created engine and hands out sessions."""

    def __init__(self, config: DatabaseConfig | None = None) -> None:
        self._config = config or DatabaseConfig()
        self._config.path.parent.mkdir(parents=True, exist_ok=True)
        self._engine: Engine | None = None

    @property
    def path(self) -> Path:
        return self._config.path

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            logger.debug("Opening catalog database", path=str(self._config.path))
            engine = create_engine(
                self._config.uri(),
                echo=self._config.echo,
                # Resolves may run on worker threads; SQLite waits on locks up to busy_timeout.
                connect_args={"check_same_thread": False, "timeout": self._config.busy_timeout},
            )
            event.listen(engine, "connect", self._on_connect)
            self._engine = engine
        return self._engine

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def ensure_schema(self) -> None:
        """Create any missing catalog tables."""
        SQLModel.metadata.create_all(self.engine)
        logger.debug("Catalog schema ready", path=str(self._config.path))

    @contextmanager
    def session(self) -> Iterator[Session]:
        with Session(self.engine) as session:
            yield session

    def _on_connect(self, dbapi_connection: object, _connection_record: object) -> None:
        if not isinstance(dbapi_connection, sqlite3.Connection):
            return
        cursor = dbapi_connection.cursor()
        try:
            for name, value in self._config.pragmas.items():
                cursor.execute(f"PRAGMA {name}={value}")
        finally:
            cursor.close()


__all__ = ["DatabaseConfig", "DatabaseManager"]
