"""
Unit of Work: tracks loaded entities and works out which ones changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from ..core.metadata import EntityDescriptor
from .identity_map import EntityKey, IdentityMap
from .snapshots import Snapshot, SnapshotStore


def values_differ(current: Any, original: Any) -> bool:
    """
    Value comparison used for dirty checking.

    The identity check only ever reports "unchanged" (it keeps an untouched
    NaN clean); a change is always decided by ``!=``.
    """
    if current is original:
        return False
    return bool(current != original)


class DirtyChecker:
    """
    Compares an entity's current field values with its load-time snapshot.
    """

    def diff(self, instance: Any, snapshot: Snapshot, descriptor: EntityDescriptor) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for field in descriptor.fields:
            current = field.get_value(instance)
            if values_differ(current, snapshot.get(field.name)):
                changes[field.column_name()] = current
        return changes


@dataclass(frozen=True)
class PendingUpdate:
    key: EntityKey
    instance: Any
    descriptor: EntityDescriptor
    changes: Mapping[str, Any]


class UnitOfWork:
    """
    Owns the identity map and snapshot store of one session.
    """

    def __init__(self, checker: DirtyChecker | None = None) -> None:
        self.identity_map = IdentityMap()
        self.snapshots = SnapshotStore()
        self.checker = checker or DirtyChecker()
        self._descriptors: Dict[EntityKey, EntityDescriptor] = {}

    def register_clean(self, key: EntityKey, instance: Any, descriptor: EntityDescriptor) -> None:
        """
        Track a freshly loaded instance and capture its baseline.
        """
        self.identity_map.put(key, instance)
        self.snapshots.capture(key, instance, descriptor)
        self._descriptors[key] = descriptor

    def get(self, key: EntityKey) -> Any | None:
        return self.identity_map.get(key)

    def collect_dirty(self) -> List[PendingUpdate]:
        """
        Return one pending update per tracked entity with changes, in load order.
        """
        pending: List[PendingUpdate] = []
        for key in self.identity_map.keys():
            snapshot = self.snapshots.get(key)
            if snapshot is None:
                continue
            instance = self.identity_map.get(key)
            descriptor = self._descriptors[key]
            changes = self.checker.diff(instance, snapshot, descriptor)
            if changes:
                pending.append(PendingUpdate(key, instance, descriptor, changes))
        return pending

    def clear(self) -> None:
        self.identity_map.clear()
        self.snapshots.clear()
        self._descriptors.clear()

    def __len__(self) -> int:
        return len(self.identity_map)
