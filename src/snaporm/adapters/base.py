"""
Connection provider protocol and connection configuration for snaporm.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Protocol, Sequence

from ..dialects.base import Dialect
from ..errors import ConfigurationError, StatementError
from ..security.dsns import DSNConfig, parse_dsn
from ..utils import get_logger

logger = get_logger("adapters")


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    def postgres_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if self.mode:
            options["sslmode"] = self.mode
        if self.rootcert:
            options["sslrootcert"] = self.rootcert
        if self.cert:
            options["sslcert"] = self.cert
        if self.key:
            options["sslkey"] = self.key
        return options

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {}
        if self.ca:
            ssl["ca"] = self.ca
        if self.cert:
            ssl["cert"] = self.cert
        if self.key:
            ssl["key"] = self.key
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        if not ssl:
            return {}
        return {"ssl": ssl}


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

_SSL_QUERY_KEYS = {
    "sslmode": "mode",
    "sslrootcert": "rootcert",
    "sslcert": "cert",
    "sslkey": "key",
    "ssl_ca": "ca",
    "ssl_cert": "cert",
    "ssl_key": "key",
}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


def _parse_int(value: str, *, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value for '{key}': {value!r}") from exc


def _parse_ssl(query: dict[str, str]) -> SSLConfig | None:
    ssl = SSLConfig()
    found = False
    for query_key, attr in _SSL_QUERY_KEYS.items():
        if query_key in query:
            setattr(ssl, attr, query.pop(query_key))
            found = True
    if "ssl_check_hostname" in query:
        ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
        found = True
    return ssl if found else None


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration handed to an adapter.
    """

    url: str
    autocommit: bool = False
    isolation_level: str | None = None
    timeout: float | None = None
    options: dict[str, Any] | None = None
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a connection config by parsing the DSN string. Explicit keyword
        arguments win over values found in the DSN query string.
        """

        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        parsed_autocommit = None
        if "autocommit" in query:
            parsed_autocommit = _parse_bool(query.pop("autocommit"), key="autocommit")
        parsed_timeout = None
        if "timeout" in query:
            parsed_timeout = _parse_float(query.pop("timeout"), key="timeout")
        parsed_isolation_level = query.pop("isolation_level", None)
        parsed_ssl = _parse_ssl(query)

        options: Dict[str, Any] = {}
        for key, value in query.items():
            options[key] = _parse_int(value, key=key) if key == "connect_timeout" else value
        options.update(kwargs.pop("options", None) or {})

        autocommit = kwargs.pop("autocommit", parsed_autocommit)
        return cls(
            url=dsn,
            dsn=parsed,
            autocommit=bool(autocommit) if autocommit is not None else False,
            isolation_level=kwargs.pop("isolation_level", parsed_isolation_level),
            timeout=kwargs.pop("timeout", parsed_timeout),
            options=options or None,
            ssl=kwargs.pop("ssl", parsed_ssl),
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a DSN.
        """

        value = os.getenv(env_var)
        if not value:
            raise ConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    def redacted_dsn(self) -> str:
        """
        Return a DSN safe for logging (credentials removed).
        """

        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class DatabaseAdapter(Protocol):
    """
    Connection provider used by sessions.

    A connection is acquired for a single statement and released right after;
    adapters translate driver failures into ``StorageConnectionError`` (for
    ``acquire``) and ``StatementError`` (for ``execute``).
    """

    dialect: Dialect
    slow_query_ms: int

    def acquire(self) -> Any:
        """
        Open (or borrow) a DB-API connection.
        """

    def release(self, connection: Any) -> None:
        """
        Give a connection back. Must not raise for an already closed connection.
        """

    def execute(self, connection: Any, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute one statement on ``connection`` returning a cursor.
        """

    def fetch_one(self, cursor: Any) -> Optional[Dict[str, Any]]:
        """
        Return the next row of ``cursor`` as a column-name mapping, or ``None``.
        """

    def commit(self, connection: Any) -> None:
        """
        Commit work done on ``connection``.
        """

    def rollback(self, connection: Any) -> None:
        """
        Roll back work done on ``connection``.
        """

    def close(self) -> None:
        """
        Dispose adapter-wide resources. Implementations should be idempotent.
        """


def row_to_dict(cursor: Any, row: Any) -> Optional[Dict[str, Any]]:
    """
    Pair a DB-API row with ``cursor.description`` column names.
    """

    if row is None:
        return None
    if isinstance(row, dict):
        return dict(row)
    names = [column[0] for column in (cursor.description or ())]
    return dict(zip(names, row))


@contextmanager
def scoped_connection(adapter: DatabaseAdapter) -> Iterator[Any]:
    """
    Acquire a connection for one unit of storage work.

    Commits when the block succeeds, rolls back when it raises, and always
    releases the connection. A failing rollback is logged and the error
    raised by the block propagates.
    """

    connection = adapter.acquire()
    try:
        yield connection
    except BaseException:
        try:
            adapter.rollback(connection)
        except Exception:
            logger.exception("Rollback failed; re-raising the original error")
        raise
    else:
        adapter.commit(connection)
    finally:
        adapter.release(connection)


def count_format_placeholders(sql: str) -> int:
    """
    Count ``%s`` placeholders, skipping escaped ``%%``.
    """

    count = 0
    idx = 0
    while idx < len(sql) - 1:
        if sql[idx] == "%" and sql[idx + 1] == "s":
            count += 1
            idx += 2
            continue
        if sql[idx] == "%" and sql[idx + 1] == "%":
            idx += 2
            continue
        idx += 1
    return count


def validate_format_params(sql: str, params: Sequence[Any]) -> None:
    placeholder_count = count_format_placeholders(sql)
    if placeholder_count != len(params):
        raise StatementError(
            f"Parameter count mismatch: expected {placeholder_count}, received {len(params)}."
        )
