"""Rich display functions for run results.

Provides the eviction summary, the protected-entries report and the
access-time distribution table printed by the fsreap command.
"""

import socket

from rich.table import Table

from fsreap.core.reaper import RunReport
from fsreap.core.statistics import StatisticsReport
from fsreap.core.thresholds import Thresholds
from fsreap.filesystem.models import EvictionResult
from fsreap.utils.formatting import (
    console,
    format_size,
    format_timestamp,
    print_info,
    print_success,
    print_warning,
)


def create_statistics_table(stats: StatisticsReport) -> Table:
    """Create a table with one row per decile of accumulated size.

    Args:
        stats: Statistics to display.

    Returns:
        Rich Table configured for the distribution display.
    """
    table = Table(
        title=f"Access-time distribution of {stats.root}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Size", justify="right", style="info")
    table.add_column("%", justify="right")
    table.add_column("Newest access", style="text")
    table.add_column("Oldest access", style="muted")

    for row in stats.rows:
        newest = format_timestamp(row.newest_atime) if row.newest_atime is not None else "-"
        table.add_row(row.size_human, f"{row.percent}%", newest, format_timestamp(row.oldest_atime))

    return table


def print_statistics(stats: StatisticsReport) -> None:
    """Print the distribution report, or why there is none."""
    if stats.too_small:
        print_warning(
            f"{stats.root} holds only {stats.total_bytes} bytes; too small to analyze."
        )
        return
    if not stats.rows:
        print_info(f"No storage in use under {stats.root}; nothing to analyze.")
        return

    console.print(create_statistics_table(stats))
    console.print(
        f"[muted]{stats.entry_count} entries, {format_size(stats.total_bytes)} total[/muted]"
    )


def create_dry_run_table(result: EvictionResult) -> Table:
    """Create a table of the entries a dry run would remove, in order."""
    table = Table(
        title="Planned Removals (Dry Run)",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Last access", style="muted")
    table.add_column("Type", width=9)
    table.add_column("Size", justify="right", style="info")
    table.add_column("Path", style="removed")

    for entry in result.removed:
        table.add_row(
            format_timestamp(entry.atime),
            entry.kind.value,
            format_size(entry.size_bytes),
            entry.path,
        )

    return table


def print_eviction_summary(result: EvictionResult, thresholds: Thresholds) -> None:
    """Print deletion failures, the outcome line and any shortfall.

    Args:
        result: Outcome of the eviction pass.
        thresholds: Floors the pass was aiming for.
    """
    for failure in result.failures:
        print_warning(f"Cannot remove {failure.path}: {failure.error}")

    if result.dry_run:
        if result.removed:
            console.print(create_dry_run_table(result))
        print_info(
            f"Dry-run: {len(result.removed)} entries would be removed, "
            f"freeing {format_size(result.freed_bytes)}."
        )
    else:
        print_success(
            f"Removed {len(result.removed)} entries, freed {format_size(result.freed_bytes)}."
        )

    if not result.threshold_met:
        shortfall = (
            f"{format_size(result.free_bytes)} free (need more than "
            f"{format_size(thresholds.stop_floor_bytes)})"
        )
        if thresholds.track_inodes:
            shortfall += (
                f", {result.free_inodes} inodes free (need more than {thresholds.floor_inodes})"
            )
        print_warning(f"Ran out of removable entries before reaching the stop floor: {shortfall}.")


def create_protected_table(result: EvictionResult, root: str, hostname: str) -> Table:
    """Create a table listing entries kept because of their ownership."""
    table = Table(
        title=f"Protected entries on {hostname}:{root}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("UID", justify="right", width=10)
    table.add_column("GID", justify="right", width=10)
    table.add_column("Size", justify="right", style="info")
    table.add_column("Path", style="protected")

    for entry in result.protected:
        table.add_row(str(entry.uid), str(entry.gid), format_size(entry.size_bytes), entry.path)

    return table


def print_protected_report(report: RunReport, hostname: str | None = None) -> None:
    """Print the entries that were due for removal but are privileged-owned.

    Does nothing when no protected entry was visited.

    Args:
        report: Report of an eviction run.
        hostname: Host name for the report; defaults to this host.
    """
    result = report.eviction
    if result is None or not result.protected:
        return

    host = hostname or socket.gethostname()
    console.print(create_protected_table(result, report.root, host))
    print_warning(
        f"{len(result.protected)} entries under {report.root} on {host} are owned by "
        "privileged or reserved ids and were not removed; clean them up manually."
    )
