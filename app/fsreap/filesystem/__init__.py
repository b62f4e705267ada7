"""Filesystem inventory and eviction.

This module provides the tree walk that snapshots entry metadata, the
ownership protection rules, and the oldest-first eviction loop.
"""

from fsreap.filesystem.evictor import Evictor, eviction_order
from fsreap.filesystem.inventory import TreeInventory
from fsreap.filesystem.models import (
    DeletionFailure,
    Entry,
    EntryKind,
    EvictionResult,
    InventoryResult,
)
from fsreap.filesystem.protected import RESERVED_ID_THRESHOLD, is_protected_owner

__all__ = [
    "RESERVED_ID_THRESHOLD",
    "DeletionFailure",
    "Entry",
    "EntryKind",
    "EvictionResult",
    "Evictor",
    "InventoryResult",
    "TreeInventory",
    "eviction_order",
    "is_protected_owner",
]
