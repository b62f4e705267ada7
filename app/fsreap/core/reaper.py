"""Run orchestration.

Ties the phases of a run together: probe the filesystem, decide whether
anything needs doing, take the full inventory, then either evict or
summarize. Fatal errors propagate as ReapError subclasses; everything
after the inventory starts is reported through the returned RunReport.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from fsreap.core.config import ReapConfig
from fsreap.core.probe import FilesystemReading, ProbeStrategy, select_probe
from fsreap.core.statistics import StatisticsReport, build_statistics
from fsreap.core.thresholds import Thresholds
from fsreap.filesystem.evictor import Evictor
from fsreap.filesystem.inventory import TreeInventory
from fsreap.filesystem.models import EvictionResult, InventoryResult

logger = logging.getLogger(__name__)


class RunOutcome(str, Enum):
    """What a run ended up doing.

    Attributes:
        HEALTHY: Free space and inodes were above their start floors.
        EVICTED: The eviction loop ran.
        STATISTICS: A distribution report was produced instead.
    """

    HEALTHY = "healthy"
    EVICTED = "evicted"
    STATISTICS = "statistics"


@dataclass(frozen=True, slots=True)
class RunReport:
    """Everything a run observed and did."""

    root: str
    outcome: RunOutcome
    reading: FilesystemReading
    thresholds: Thresholds
    inventory: InventoryResult | None = None
    eviction: EvictionResult | None = None
    statistics: StatisticsReport | None = None


class Reaper:
    """Runs one cleanup or statistics pass over a directory tree.

    Args:
        config: Validated run configuration.
        probe: Filesystem probe to use. Defaults to the first available one.
    """

    def __init__(self, config: ReapConfig, probe: ProbeStrategy | None = None) -> None:
        self._config = config
        self._probe = probe

    def run(self, root: Path) -> RunReport:
        """Probe, inventory and evict (or summarize) under ``root``.

        Raises:
            ProbeUnavailable: If filesystem usage cannot be read.
        """
        probe = self._probe if self._probe is not None else select_probe()
        reading = probe.read(root)
        thresholds = Thresholds.from_reading(reading, self._config)
        logger.debug("Reading for %s: %s", root, reading)
        logger.debug("Thresholds: %s", thresholds)

        if not self._config.statistics and not thresholds.should_clean(reading):
            logger.debug("Free space and inodes above start floors; nothing to do")
            return RunReport(
                root=str(root),
                outcome=RunOutcome.HEALTHY,
                reading=reading,
                thresholds=thresholds,
            )

        inventory = TreeInventory(
            root,
            self._config.exclude_pattern(),
            preserve_directories=self._config.preserve_directories,
            one_filesystem=self._config.one_filesystem,
        ).collect()

        if self._config.statistics:
            return RunReport(
                root=str(root),
                outcome=RunOutcome.STATISTICS,
                reading=reading,
                thresholds=thresholds,
                inventory=inventory,
                statistics=build_statistics(inventory),
            )

        eviction = Evictor(thresholds, dry_run=self._config.dry_run).evict(
            inventory.entries, reading
        )
        return RunReport(
            root=str(root),
            outcome=RunOutcome.EVICTED,
            reading=reading,
            thresholds=thresholds,
            inventory=inventory,
            eviction=eviction,
        )
