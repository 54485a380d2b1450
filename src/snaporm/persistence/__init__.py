"""
Persistence layer components: sessions, unit of work, identity map, snapshots.
"""

from .identity_map import EntityKey, IdentityMap
from .session import Session, SessionFactory
from .snapshots import SnapshotStore
from .unit_of_work import DirtyChecker, PendingUpdate, UnitOfWork

__all__ = [
    "DirtyChecker",
    "EntityKey",
    "IdentityMap",
    "PendingUpdate",
    "Session",
    "SessionFactory",
    "SnapshotStore",
    "UnitOfWork",
]
