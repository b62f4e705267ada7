"""Unit tests for the access-time distribution report."""

from collections.abc import Callable

from fsreap.core.statistics import StatisticsRow, build_statistics
from fsreap.filesystem.models import Entry, InventoryResult


def _inventory(entries: list[Entry]) -> InventoryResult:
    return InventoryResult(
        root="/scratch",
        entries=tuple(entries),
        total_size_bytes=sum(e.size_bytes for e in entries),
    )


class TestBuildStatistics:
    """Tests for build_statistics."""

    def test_one_row_per_decile(self, make_entry: Callable[..., Entry]) -> None:
        """Ten equal entries produce ten rows, newest first."""
        entries = [make_entry(f"/scratch/f{i}", atime=i, size_bytes=10) for i in range(1, 11)]

        stats = build_statistics(_inventory(entries))

        assert len(stats.rows) == 10
        assert stats.rows[0] == StatisticsRow(
            accumulated_bytes=10, percent=10, newest_atime=10, oldest_atime=10
        )
        assert stats.rows[-1] == StatisticsRow(
            accumulated_bytes=100, percent=100, newest_atime=1, oldest_atime=1
        )
        assert stats.total_bytes == 100
        assert stats.entry_count == 10

    def test_rows_span_newest_to_oldest(self, make_entry: Callable[..., Entry]) -> None:
        """Each row reports the newest atime since the previous row and the current one."""
        entries = [make_entry(f"/scratch/f{i:02}", atime=i, size_bytes=1) for i in range(1, 21)]

        stats = build_statistics(_inventory(entries))

        assert len(stats.rows) == 10
        assert (stats.rows[0].newest_atime, stats.rows[0].oldest_atime) == (20, 19)
        assert (stats.rows[1].newest_atime, stats.rows[1].oldest_atime) == (18, 17)
        assert (stats.rows[-1].newest_atime, stats.rows[-1].oldest_atime) == (2, 1)

    def test_large_entry_skips_boundaries(self, make_entry: Callable[..., Entry]) -> None:
        """An entry spanning several deciles produces a single row."""
        entries = [
            make_entry("/scratch/big", atime=2, size_bytes=50),
            make_entry("/scratch/big2", atime=1, size_bytes=50),
        ]

        stats = build_statistics(_inventory(entries))

        assert [(r.accumulated_bytes, r.percent) for r in stats.rows] == [(50, 50), (100, 100)]

    def test_residual_closing_row(self, make_entry: Callable[..., Entry]) -> None:
        """Entries left below the next boundary produce a 100% row with only the oldest time."""
        entries = [make_entry(f"/scratch/f{i}", atime=100 - i, size_bytes=10) for i in range(10)]
        entries.append(make_entry("/scratch/oldest", atime=1, size_bytes=5))

        stats = build_statistics(_inventory(entries))

        assert stats.rows[-2].accumulated_bytes == 100
        assert stats.rows[-2].percent == 95
        assert stats.rows[-1] == StatisticsRow(
            accumulated_bytes=105, percent=100, newest_atime=None, oldest_atime=1
        )

    def test_too_small(self, make_entry: Callable[..., Entry]) -> None:
        """A tree where a tenth is under one byte cannot be analyzed."""
        stats = build_statistics(_inventory([make_entry("/scratch/f", atime=1, size_bytes=5)]))

        assert stats.too_small is True
        assert stats.rows == ()

    def test_empty_tree(self) -> None:
        """An empty inventory yields no rows and is not flagged as too small."""
        stats = build_statistics(_inventory([]))

        assert stats.too_small is False
        assert stats.rows == ()
        assert stats.total_bytes == 0

    def test_deterministic(self, make_entry: Callable[..., Entry]) -> None:
        """Equal access times are ordered by path, so input order does not matter."""
        entries = [make_entry(f"/scratch/{name}", atime=5, size_bytes=10) for name in "abcdefghij"]

        forward = build_statistics(_inventory(entries))
        backward = build_statistics(_inventory(list(reversed(entries))))

        assert forward == backward

    def test_size_human(self) -> None:
        """Rows format their accumulated size."""
        row = StatisticsRow(accumulated_bytes=15360, percent=10, newest_atime=1, oldest_atime=1)
        assert row.size_human == "15 kiB"
