"""
PostgreSQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..dialects.postgres import PostgresDialect
from ..errors import ConfigurationError, StatementError, StorageConnectionError
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import ConnectionConfig, DatabaseAdapter, row_to_dict, validate_format_params


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresAdapter(DatabaseAdapter):
    """
    Adapter wrapping the psycopg PostgreSQL driver.
    """

    def __init__(self, config: ConnectionConfig, *, slow_query_ms: int | None = None) -> None:
        self.dialect = PostgresDialect()
        self.config = config
        self.logger = get_logger("adapters.postgres")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "PostgresAdapter":
        return cls(ConnectionConfig.from_dsn(dsn), **kwargs)

    def _connect_options(self) -> dict[str, Any]:
        options = dict(self.config.options or {})
        if self.config.ssl:
            for key, value in self.config.ssl.postgres_options().items():
                options.setdefault(key, value)
        if self.config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(self.config.timeout)
        return options

    # ------------------------------------------------------------------ #
    def acquire(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise ConfigurationError("psycopg is required to use PostgresAdapter.")

        self.logger.debug("Connecting to PostgreSQL %s", self.config.descriptive_label())
        try:
            connection = driver.connect(self._strip_query(self.config.url), **self._connect_options())
        except Exception as exc:
            raise StorageConnectionError(
                f"Failed to connect to PostgreSQL {self.config.redacted_dsn()}."
            ) from exc
        connection.autocommit = bool(self.config.autocommit)
        if self.config.isolation_level:
            setattr(connection, "isolation_level", self.config.isolation_level)
        return connection

    def release(self, connection: Any) -> None:
        if not getattr(connection, "closed", False):
            connection.close()

    def close(self) -> None:
        return None

    # ------------------------------------------------------------------ #
    def execute(self, connection: Any, sql: str, params: Sequence[Any] | None = None) -> Any:
        params = tuple(params or ())
        validate_format_params(sql, params)
        cursor = connection.cursor()
        try:
            with time_call(
                "postgres.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except Exception as exc:
            raise StatementError(f"PostgreSQL statement failed: {exc}") from exc
        return cursor

    def fetch_one(self, cursor: Any) -> Optional[Dict[str, Any]]:
        try:
            row = cursor.fetchone()
        except Exception as exc:
            raise StatementError(f"PostgreSQL fetch failed: {exc}") from exc
        return row_to_dict(cursor, row)

    def commit(self, connection: Any) -> None:
        if getattr(connection, "autocommit", False):
            return
        try:
            connection.commit()
        except Exception as exc:
            raise StatementError(f"PostgreSQL commit failed: {exc}") from exc

    def rollback(self, connection: Any) -> None:
        if getattr(connection, "autocommit", False):
            return
        try:
            connection.rollback()
        except Exception as exc:
            raise StatementError(f"PostgreSQL rollback failed: {exc}") from exc

    @staticmethod
    def _strip_query(url: str) -> str:
        # Query options were already parsed into ConnectionConfig fields.
        return url.split("?", 1)[0]
