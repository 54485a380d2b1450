"""
SQLite database adapter implementation.
"""

from __future__ import annotations

import sqlite3
import uuid
from typing import Any, Dict, Optional, Sequence

from ..dialects.sqlite import SQLiteDialect
from ..errors import StatementError, StorageConnectionError
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import ConnectionConfig, DatabaseAdapter, row_to_dict

MEMORY_URLS = {"sqlite:///:memory:", "sqlite://", ":memory:"}


class SQLiteAdapter(DatabaseAdapter):
    """
    Adapter wrapping the Python stdlib sqlite3 module.

    Every ``acquire`` opens a new connection to the configured file. An
    in-memory URL is turned into a private shared-cache memory database kept
    alive by an anchor connection until :meth:`close`.
    """

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        slow_query_ms: int | None = None,
    ) -> None:
        self.dialect = SQLiteDialect()
        self.config = config or ConnectionConfig(url="sqlite:///:memory:")
        self.logger = get_logger("adapters.sqlite")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self._anchor: sqlite3.Connection | None = None
        self._path, self._uri = self._normalize_path(self.config.url)

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "SQLiteAdapter":
        return cls(ConnectionConfig.from_dsn(dsn), **kwargs)

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def acquire(self) -> sqlite3.Connection:
        if self._uri and self._anchor is None:
            self._anchor = self._open()
        return self._open()

    def release(self, connection: sqlite3.Connection) -> None:
        connection.close()

    def close(self) -> None:
        if self._anchor is not None:
            self._anchor.close()
            self._anchor = None

    def _open(self) -> sqlite3.Connection:
        timeout = self.config.timeout if self.config.timeout is not None else 5.0
        try:
            connection = sqlite3.connect(
                self._path,
                isolation_level=None if self.config.autocommit else "",
                timeout=timeout,
                uri=self._uri,
            )
        except sqlite3.Error as exc:
            raise StorageConnectionError(f"Failed to open SQLite database {self._path!r}.") from exc
        if self.config.isolation_level:
            connection.isolation_level = self.config.isolation_level
        return connection

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def execute(
        self, connection: sqlite3.Connection, sql: str, params: Sequence[Any] | None = None
    ) -> sqlite3.Cursor:
        params = tuple(params or ())
        cursor = connection.cursor()
        try:
            with time_call(
                "sqlite.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except sqlite3.Error as exc:
            raise StatementError(f"SQLite statement failed: {exc}") from exc
        return cursor

    def fetch_one(self, cursor: sqlite3.Cursor) -> Optional[Dict[str, Any]]:
        try:
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise StatementError(f"SQLite fetch failed: {exc}") from exc
        return row_to_dict(cursor, row)

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def commit(self, connection: sqlite3.Connection) -> None:
        try:
            connection.commit()
        except sqlite3.Error as exc:
            raise StatementError(f"SQLite commit failed: {exc}") from exc

    def rollback(self, connection: sqlite3.Connection) -> None:
        try:
            connection.rollback()
        except sqlite3.Error as exc:
            raise StatementError(f"SQLite rollback failed: {exc}") from exc

    # ------------------------------------------------------------------ #
    @staticmethod
    def _normalize_path(url: str) -> tuple[str, bool]:
        url = url.split("?", 1)[0]
        if url in MEMORY_URLS:
            return f"file:snaporm-{uuid.uuid4().hex}?mode=memory&cache=shared", True
        prefix = "sqlite:///"
        if url.startswith(prefix):
            url = url[len(prefix) :]
        return url, False
