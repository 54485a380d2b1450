"""
snaporm public package initialization.

A small unit-of-work session: load entities by identifier, keep one instance
per identity, and write back changed fields when the session closes.
"""

from .adapters import ConnectionConfig, MySQLAdapter, PostgresAdapter, SQLiteAdapter  # noqa: F401
from .core import (  # noqa: F401
    BooleanField,
    DecimalField,
    EntityDescriptor,
    FloatField,
    IntegerField,
    MetadataResolver,
    StringField,
    UUIDField,
    metadata,
)
from .errors import (  # noqa: F401
    ConfigurationError,
    FlushError,
    MappingError,
    MetadataError,
    NotFoundError,
    SessionClosedError,
    SnapORMError,
    StatementError,
    StorageConnectionError,
)
from .hooks import hooks  # noqa: F401
from .persistence import EntityKey, Session, SessionFactory  # noqa: F401

__all__ = [
    "BooleanField",
    "ConfigurationError",
    "ConnectionConfig",
    "DecimalField",
    "EntityDescriptor",
    "EntityKey",
    "FloatField",
    "FlushError",
    "IntegerField",
    "MappingError",
    "MetadataError",
    "MetadataResolver",
    "MySQLAdapter",
    "NotFoundError",
    "PostgresAdapter",
    "SQLiteAdapter",
    "Session",
    "SessionClosedError",
    "SessionFactory",
    "SnapORMError",
    "StatementError",
    "StorageConnectionError",
    "StringField",
    "UUIDField",
    "hooks",
    "metadata",
]
