"""
Identity map ensuring a single in-memory instance per row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Type


@dataclass(frozen=True)
class EntityKey:
    """
    Identity of one row: its identifier plus the entity type.
    """

    identifier: Any
    entity_type: Type[Any]

    def __str__(self) -> str:
        return f"{self.entity_type.__name__}[{self.identifier!r}]"


class IdentityMap:
    """
    Stores live entity instances keyed by :class:`EntityKey`.

    Not thread-safe; a session and its identity map belong to one caller.
    """

    def __init__(self) -> None:
        self._store: Dict[EntityKey, Any] = {}

    def get(self, key: EntityKey) -> Any | None:
        return self._store.get(key)

    def put(self, key: EntityKey, instance: Any) -> None:
        existing = self._store.get(key)
        if existing is not None and existing is not instance:
            raise ValueError(f"{key} is already tracked by a different instance.")
        self._store[key] = instance

    def remove(self, key: EntityKey) -> None:
        self._store.pop(key, None)

    def keys(self) -> List[EntityKey]:
        return list(self._store)

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[EntityKey]:
        return iter(self.keys())
