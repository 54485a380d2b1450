"""
Session management coordinating adapters, metadata and the unit of work.
"""

from __future__ import annotations

import time
from typing import Any, List, Optional, Sequence, Type, TypeVar

from ..adapters.base import DatabaseAdapter, scoped_connection
from ..core.mapping import RowMapper
from ..core.metadata import EntityDescriptor, MetadataResolver
from ..core.metadata import metadata as default_metadata
from ..errors import FlushError, MappingError, NotFoundError, SessionClosedError
from ..hooks import HookDispatcher
from ..hooks import hooks as default_hooks
from ..query.statements import StatementBuilder
from ..security.redaction import redact_params
from ..utils import PerformanceTracker, get_logger
from .identity_map import EntityKey
from .unit_of_work import PendingUpdate, UnitOfWork

T = TypeVar("T")


class Session:
    """
    Loads entities by identifier and writes back whatever changed on close.

    A session is open from construction until :meth:`close`; it never
    reopens. Each statement runs on its own short-lived connection.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        metadata: Optional[MetadataResolver] = None,
        hooks: Optional[HookDispatcher] = None,
    ) -> None:
        self.adapter = adapter
        self.dialect = adapter.dialect
        self.metadata = metadata if metadata is not None else default_metadata
        self.hooks = hooks if hooks is not None else default_hooks
        self.unit_of_work = UnitOfWork()
        self.statements = StatementBuilder(self.dialect)
        self.mapper = RowMapper()
        self.logger = get_logger("persistence.session")
        self.performance = PerformanceTracker(self.logger)
        self._closed = False

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Session":
        self._ensure_open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type:
            self._discard()
        else:
            self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def is_tracked(self, entity_type: Type[Any], identifier: Any) -> bool:
        descriptor = self.metadata.resolve(entity_type)
        return self._make_key(descriptor, identifier) in self.unit_of_work.identity_map

    # ------------------------------------------------------------------ #
    def find(self, entity_type: Type[T], identifier: Any) -> T:
        """
        Return the entity of ``entity_type`` with ``identifier``.

        Within one session the same instance is returned for the same key.
        Raises :class:`NotFoundError` when no row matches.
        """
        self._ensure_open()
        descriptor = self.metadata.resolve(entity_type)
        key = self._make_key(descriptor, identifier)

        cached = self.unit_of_work.get(key)
        if cached is not None:
            self.logger.debug("Identity map hit for %s", key)
            return cached

        self.logger.debug("Identity map miss for %s; loading from storage", key)
        sql = self.statements.build_select_by_id(descriptor)
        params = [descriptor.id_field.to_db(key.identifier)]
        with scoped_connection(self.adapter) as connection:
            cursor = self._execute(connection, sql, params)
            row = self.adapter.fetch_one(cursor)
        if row is None:
            raise NotFoundError(entity_type, key.identifier)

        instance = self.mapper.map_row(row, descriptor)
        self.unit_of_work.register_clean(key, instance, descriptor)
        self.hooks.fire("after_load", instance, session=self, key=key)
        return instance

    def close(self) -> None:
        """
        Flush every changed entity and end the session.

        Updates run in load order and stop at the first failure, which is
        raised as :class:`FlushError`. The session is closed either way.
        """
        if self._closed:
            self.logger.debug("Session already closed; ignoring close()")
            return

        tracked = len(self.unit_of_work)
        flushed: List[EntityKey] = []
        try:
            pending = self.unit_of_work.collect_dirty()
            for index, update in enumerate(pending):
                try:
                    self._flush_update(update)
                except Exception as exc:
                    skipped = [later.key for later in pending[index + 1 :]]
                    self.logger.error(
                        "Flushing %s failed after %s successful update(s); %s update(s) skipped",
                        update.key,
                        len(flushed),
                        len(skipped),
                    )
                    raise FlushError(update.key, flushed, skipped) from exc
                flushed.append(update.key)
        finally:
            self.unit_of_work.clear()
            self._closed = True

        self.logger.info("Session closed: %s tracked, %s updated", tracked, len(flushed))
        self.hooks.fire("after_close", None, session=self, updated=list(flushed))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _flush_update(self, update: PendingUpdate) -> None:
        descriptor = update.descriptor
        sql = self.statements.build_update_by_id(descriptor, update.changes.keys())
        params = self.statements.update_parameters(descriptor, update.changes, update.key.identifier)
        self.hooks.fire("before_update", update.instance, session=self, changes=dict(update.changes))
        with scoped_connection(self.adapter) as connection:
            cursor = self._execute(connection, sql, params)
        if getattr(cursor, "rowcount", -1) == 0:
            self.logger.warning("Update for %s matched no rows", update.key)
        self.hooks.fire("after_update", update.instance, session=self, changes=dict(update.changes))

    def _execute(self, connection: Any, sql: str, params: Sequence[Any]) -> Any:
        # Adapters log statement timing; the session only feeds the tracker.
        start = time.monotonic()
        cursor = self.adapter.execute(connection, sql, params)
        elapsed_ms = (time.monotonic() - start) * 1000
        self.performance.record(sql, redact_params(params), elapsed_ms)
        return cursor

    def _make_key(self, descriptor: EntityDescriptor, identifier: Any) -> EntityKey:
        id_field = descriptor.id_field
        try:
            normalized = id_field.to_python(identifier)
        except (TypeError, ValueError) as exc:
            raise MappingError(
                f"Identifier {identifier!r} is not valid for {descriptor.entity_type.__name__}.{id_field.name}"
            ) from exc
        if normalized is None:
            raise MappingError(f"Identifier for {descriptor.entity_type.__name__} must not be None.")
        return EntityKey(normalized, descriptor.entity_type)

    def _discard(self) -> None:
        if self._closed:
            return
        self.logger.warning(
            "Session exited with an error; discarding %s tracked entities without flushing",
            len(self.unit_of_work),
        )
        self.unit_of_work.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session is closed; create a new session to load entities.")


class SessionFactory:
    """
    Creates sessions sharing one adapter, metadata registry and hook dispatcher.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        metadata: Optional[MetadataResolver] = None,
        hooks: Optional[HookDispatcher] = None,
    ) -> None:
        self.adapter = adapter
        self.metadata = metadata
        self.hooks = hooks

    def create_session(self) -> Session:
        return Session(self.adapter, metadata=self.metadata, hooks=self.hooks)

    def dispose(self) -> None:
        self.adapter.close()
