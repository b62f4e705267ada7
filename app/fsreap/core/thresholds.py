"""Start/stop floors for free space and free inodes.

Cleaning is triggered when either resource is at or below its start
floor, and continues until both are strictly above their stop floors.
Filesystems that report no inode table (total inodes of 0) are judged
on free space alone.
"""

from dataclasses import dataclass

from fsreap.core.config import ReapConfig
from fsreap.core.probe import FilesystemReading


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Absolute floors derived from one FilesystemReading.

    Attributes:
        start_floor_bytes: Free bytes at or below which cleaning starts.
        stop_floor_bytes: Free bytes that must be exceeded to stop.
        floor_inodes: Free inodes used as both start and stop floor.
        track_inodes: False when the filesystem has no fixed inode count,
            in which case the inode floor is ignored.
    """

    start_floor_bytes: int
    stop_floor_bytes: int
    floor_inodes: int
    track_inodes: bool = True

    @classmethod
    def from_reading(cls, reading: FilesystemReading, config: ReapConfig) -> "Thresholds":
        """Compute the floors as percentages of the reading's totals."""
        return cls(
            start_floor_bytes=reading.total_bytes * config.start_percent // 100,
            stop_floor_bytes=reading.total_bytes * config.stop_percent // 100,
            floor_inodes=reading.total_inodes * config.inode_percent // 100,
            track_inodes=reading.total_inodes > 0,
        )

    def should_clean(self, reading: FilesystemReading) -> bool:
        """Return True if either resource is scarce enough to start cleaning."""
        if reading.free_bytes <= self.start_floor_bytes:
            return True
        return self.track_inodes and reading.free_inodes <= self.floor_inodes

    def is_satisfied(self, free_bytes: int, free_inodes: int) -> bool:
        """Return True once both resources are above their stop floors."""
        if free_bytes <= self.stop_floor_bytes:
            return False
        return not self.track_inodes or free_inodes > self.floor_inodes
