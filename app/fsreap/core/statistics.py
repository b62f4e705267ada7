"""Access-time distribution of an inventory.

Walks entries newest first and emits a row each time the accumulated
size crosses another tenth of the total, showing which access-time
range the newest 10%, 20%, ... of the stored bytes spans. Nothing on
disk is touched.
"""

from dataclasses import dataclass

from fsreap.filesystem.models import InventoryResult
from fsreap.utils.formatting import format_size

_BUCKETS = 10


@dataclass(frozen=True, slots=True)
class StatisticsRow:
    """One decile boundary of the distribution.

    Attributes:
        accumulated_bytes: Size of all entries up to and including this row.
        percent: ``accumulated_bytes`` as an integer percentage of the total.
        newest_atime: Access time of the first entry since the previous row,
            or None on the closing row.
        oldest_atime: Access time of the last entry accumulated.
    """

    accumulated_bytes: int
    percent: int
    newest_atime: int | None
    oldest_atime: int

    @property
    def size_human(self) -> str:
        """Accumulated size as a human-readable string."""
        return format_size(self.accumulated_bytes)


@dataclass(frozen=True, slots=True)
class StatisticsReport:
    """Distribution rows for one inventory.

    Attributes:
        root: Root directory that was inventoried.
        total_bytes: Total size of the inventory.
        entry_count: Number of inventoried entries.
        rows: Decile rows, newest first.
        too_small: True if a tenth of the total is less than one byte.
    """

    root: str
    total_bytes: int
    entry_count: int
    rows: tuple[StatisticsRow, ...]
    too_small: bool = False


def build_statistics(inventory: InventoryResult) -> StatisticsReport:
    """Bucket an inventory by accumulated size, newest access first.

    Args:
        inventory: Complete inventory of the tree.

    Returns:
        StatisticsReport; ``rows`` is empty when the tree holds no
        storage or is too small to split into tenths.
    """
    total = inventory.total_size_bytes
    step = total // _BUCKETS

    if total == 0 or step < 1:
        return StatisticsReport(
            root=inventory.root,
            total_bytes=total,
            entry_count=len(inventory),
            rows=(),
            too_small=total > 0,
        )

    ordered = sorted(inventory.entries, key=lambda e: (-e.atime, e.path))
    rows: list[StatisticsRow] = []
    accumulated = 0
    boundary = step
    newest: int | None = None

    for entry in ordered:
        if newest is None:
            newest = entry.atime
        accumulated += entry.size_bytes
        if accumulated >= boundary:
            rows.append(
                StatisticsRow(
                    accumulated_bytes=accumulated,
                    percent=accumulated * 100 // total,
                    newest_atime=newest,
                    oldest_atime=entry.atime,
                )
            )
            newest = None
            while boundary <= accumulated:
                boundary += step

    if newest is not None:
        rows.append(
            StatisticsRow(
                accumulated_bytes=accumulated,
                percent=100,
                newest_atime=None,
                oldest_atime=ordered[-1].atime,
            )
        )

    return StatisticsReport(
        root=inventory.root,
        total_bytes=total,
        entry_count=len(inventory),
        rows=tuple(rows),
    )
