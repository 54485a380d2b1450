"""
Session lifecycle hooks for snaporm entities.
"""

from .dispatcher import HOOK_EVENTS, HookDispatcher, hooks

__all__ = ["HOOK_EVENTS", "HookDispatcher", "hooks"]
