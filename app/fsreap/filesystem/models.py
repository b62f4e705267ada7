"""Filesystem domain models for inventory and eviction.

This module defines the immutable snapshot taken of every entry found
during the inventory walk, and the result types produced by the
inventory and eviction phases.
"""

from dataclasses import dataclass, field
from enum import Enum


class EntryKind(str, Enum):
    """Kind of inventoried filesystem object.

    Attributes:
        FILE: Regular file.
        DIRECTORY: Directory (removed only when empty).
        SYMLINK: Symbolic link, never followed.
    """

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class Entry:
    """Snapshot of one filesystem object discovered during inventory.

    Attributes:
        path: Absolute path, unique within an inventory.
        kind: Object kind.
        uid: Owning user id.
        gid: Owning group id.
        atime: Last access time in whole seconds since the epoch.
        size_bytes: Allocated storage (block count * 512), not logical length.
    """

    path: str
    kind: EntryKind
    uid: int
    gid: int
    atime: int
    size_bytes: int

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class InventoryResult:
    """Outcome of one inventory walk.

    Attributes:
        root: Root directory that was walked.
        entries: All inventoried entries, in walk order.
        total_size_bytes: Sum of ``size_bytes`` over all entries.
    """

    root: str
    entries: tuple[Entry, ...]
    total_size_bytes: int

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class DeletionFailure:
    """A removal the OS refused.

    Attributes:
        path: Path that could not be removed.
        error: Underlying system error message.
    """

    path: str
    error: str


@dataclass(slots=True)
class EvictionResult:
    """Outcome of one eviction pass.

    Attributes:
        removed: Entries that were removed (or would be, in a dry run).
        protected: Entries skipped because of privileged ownership.
        failures: Removals refused by the OS.
        free_bytes: Estimated free bytes after the pass.
        free_inodes: Estimated free inodes after the pass.
        threshold_met: False if entries ran out before the stop floors.
        dry_run: Whether nothing was actually removed.
    """

    free_bytes: int
    free_inodes: int
    removed: list[Entry] = field(default_factory=list)
    protected: list[Entry] = field(default_factory=list)
    failures: list[DeletionFailure] = field(default_factory=list)
    threshold_met: bool = False
    dry_run: bool = False

    @property
    def freed_bytes(self) -> int:
        """Total storage credited by removed entries."""
        return sum(entry.size_bytes for entry in self.removed)
