"""
Error hierarchy for snaporm.

Every failure surfaced by a session operation derives from
:class:`SnapORMError`, so callers can catch the whole family or a single
boundary (metadata resolution, row mapping, storage access).
"""

from __future__ import annotations

from typing import Any, Sequence


class SnapORMError(Exception):
    """Base class for all snaporm errors."""


class MetadataError(SnapORMError):
    """Raised when an entity type's metadata is missing or inconsistent."""


class MappingError(SnapORMError):
    """Raised when a row cannot be turned into an entity instance."""


class NotFoundError(SnapORMError):
    """
    Raised by ``Session.find`` when no row matches the identifier.
    """

    def __init__(self, entity_type: type, identifier: Any) -> None:
        self.entity_type = entity_type
        self.identifier = identifier
        super().__init__(f"{entity_type.__name__} with identifier {identifier!r} does not exist.")


class StorageConnectionError(SnapORMError):
    """Raised when a storage connection cannot be acquired or used."""


class ConfigurationError(StorageConnectionError):
    """Raised when connection configuration or a required driver is invalid."""


class StatementError(SnapORMError):
    """Raised when building or executing a statement fails."""


class FlushError(StatementError):
    """
    Raised by ``Session.close`` when writing one entity's changes fails.

    Updates for ``flushed`` keys were committed before the failure; ``pending``
    keys were never attempted.
    """

    def __init__(self, key: Any, flushed: Sequence[Any], pending: Sequence[Any]) -> None:
        self.key = key
        self.flushed = list(flushed)
        self.pending = list(pending)
        super().__init__(
            f"Failed to flush {key}; {len(self.flushed)} update(s) committed, "
            f"{len(self.pending)} pending update(s) skipped."
        )


class SessionClosedError(SnapORMError):
    """Raised when a closed session is used again."""
