"""
Load-time snapshots used as the dirty-check baseline.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, Mapping

from ..core.metadata import EntityDescriptor
from .identity_map import EntityKey

Snapshot = Mapping[str, Any]


class SnapshotStore:
    """
    Holds one read-only field-name to value mapping per tracked key.
    """

    def __init__(self) -> None:
        self._snapshots: Dict[EntityKey, Snapshot] = {}

    def capture(self, key: EntityKey, instance: Any, descriptor: EntityDescriptor) -> Snapshot:
        if key in self._snapshots:
            raise ValueError(f"A snapshot for {key} was already captured.")
        values = {field.name: field.get_value(instance) for field in descriptor.fields}
        snapshot = MappingProxyType(values)
        self._snapshots[key] = snapshot
        return snapshot

    def get(self, key: EntityKey) -> Snapshot | None:
        return self._snapshots.get(key)

    def discard(self, key: EntityKey) -> None:
        self._snapshots.pop(key, None)

    def clear(self) -> None:
        self._snapshots.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)
