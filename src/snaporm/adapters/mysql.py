"""
MySQL database adapter implementation.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..dialects.mysql import MySQLDialect
from ..errors import ConfigurationError, StatementError, StorageConnectionError
from ..security.redaction import redact_params
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import ConnectionConfig, DatabaseAdapter, row_to_dict, validate_format_params


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


class MySQLAdapter(DatabaseAdapter):
    """
    Adapter wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).
    """

    def __init__(self, config: ConnectionConfig, *, slow_query_ms: int | None = None) -> None:
        if not config.dsn:
            raise ConfigurationError("ConnectionConfig must be built from a DSN for MySQL connections.")
        self.dialect = MySQLDialect()
        self.config = config
        self.logger = get_logger("adapters.mysql")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "MySQLAdapter":
        return cls(ConnectionConfig.from_dsn(dsn), **kwargs)

    def _connect_kwargs(self) -> dict[str, Any]:
        options = dict(self.config.options or {})
        if self.config.ssl:
            for key, value in self.config.ssl.mysql_options().items():
                options.setdefault(key, value)
        if self.config.timeout and "connect_timeout" not in options:
            options["connect_timeout"] = int(self.config.timeout)

        dsn = self.config.dsn
        assert dsn is not None
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            **options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        return connect_kwargs

    # ------------------------------------------------------------------ #
    def acquire(self) -> Any:
        driver = _load_driver()
        if driver is None:
            raise ConfigurationError("PyMySQL or mysqlclient is required to use MySQLAdapter.")

        self.logger.debug("Connecting to MySQL %s", self.config.descriptive_label())
        try:
            connection = driver.connect(**self._connect_kwargs())
        except Exception as exc:
            raise StorageConnectionError(
                f"Failed to connect to MySQL {self.config.redacted_dsn()}."
            ) from exc
        if callable(getattr(connection, "autocommit", None)):
            connection.autocommit(self.config.autocommit)
        return connection

    def release(self, connection: Any) -> None:
        # PyMySQL and mysqlclient expose ``open``; closing twice raises.
        if getattr(connection, "open", True):
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
                "mysql.execute",
                self.logger,
                sql=sql,
                params=redact_params(params),
                threshold_ms=self.slow_query_ms,
            ):
                cursor.execute(sql, params)
        except Exception as exc:
            raise StatementError(f"MySQL statement failed: {exc}") from exc
        return cursor

    def fetch_one(self, cursor: Any) -> Optional[Dict[str, Any]]:
        try:
            row = cursor.fetchone()
        except Exception as exc:
            raise StatementError(f"MySQL fetch failed: {exc}") from exc
        return row_to_dict(cursor, row)

    def commit(self, connection: Any) -> None:
        try:
            connection.commit()
        except Exception as exc:
            raise StatementError(f"MySQL commit failed: {exc}") from exc

    def rollback(self, connection: Any) -> None:
        try:
            connection.rollback()
        except Exception as exc:
            raise StatementError(f"MySQL rollback failed: {exc}") from exc
