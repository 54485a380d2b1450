"""
Connection providers: adapter protocol, configuration and implementations.
"""

from .base import (
    ConnectionConfig,
    DatabaseAdapter,
    SSLConfig,
    scoped_connection,
)
from .mysql import MySQLAdapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

__all__ = [
    "ConnectionConfig",
    "DatabaseAdapter",
    "SSLConfig",
    "scoped_connection",
    "SQLiteAdapter",
    "PostgresAdapter",
    "MySQLAdapter",
]
