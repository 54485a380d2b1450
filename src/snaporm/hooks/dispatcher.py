"""
Hook dispatcher coordinating session lifecycle events.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Type

HookHandler = Callable[..., None]

HOOK_EVENTS = frozenset({"after_load", "before_update", "after_update", "after_close"})


class HookDispatcher:
    """
    Maintains global and per-entity-type hook handlers.

    Handlers are called as ``handler(instance, **context)``; ``instance`` is
    ``None`` for session-wide events such as ``after_close``.
    """

    def __init__(self) -> None:
        self._global_handlers: Dict[str, List[HookHandler]] = defaultdict(list)
        self._entity_handlers: Dict[Type[Any], Dict[str, List[HookHandler]]] = defaultdict(
            lambda: defaultdict(list)
        )

    def register(
        self, event: str, handler: HookHandler, *, entity_type: Optional[Type[Any]] = None
    ) -> None:
        if event not in HOOK_EVENTS:
            raise ValueError(f"Unknown hook event '{event}'. Expected one of {sorted(HOOK_EVENTS)}")
        if entity_type is not None:
            self._entity_handlers[entity_type][event].append(handler)
        else:
            self._global_handlers[event].append(handler)

    def fire(self, event: str, instance: Optional[Any], **context: Any) -> None:
        handlers = list(self._global_handlers.get(event, []))
        if instance is not None:
            per_type = self._entity_handlers.get(type(instance))
            if per_type:
                handlers.extend(per_type.get(event, []))
        for handler in handlers:
            handler(instance, **context)

    def clear(self) -> None:
        self._global_handlers.clear()
        self._entity_handlers.clear()


hooks = HookDispatcher()
