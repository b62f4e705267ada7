"""Eviction: the destructive second phase of a run.

Removes inventoried entries oldest-access-first until free space and
free inodes are both above their stop floors. Free counters are seeded
from the initial probe reading and updated in memory as entries go;
the filesystem is never re-probed mid-run.
"""

import errno
import logging
import os
from collections.abc import Sequence

from fsreap.core.probe import FilesystemReading
from fsreap.core.thresholds import Thresholds
from fsreap.filesystem.models import DeletionFailure, Entry, EntryKind, EvictionResult
from fsreap.filesystem.protected import is_protected_owner

logger = logging.getLogger(__name__)


def eviction_order(entries: Sequence[Entry]) -> list[Entry]:
    """Return entries oldest access first, ties broken by path."""
    return sorted(entries, key=lambda e: (e.atime, e.path))


class Evictor:
    """Deletes least-recently-accessed entries until the floors are met.

    Directories are only removed when empty; files and symlinks are
    unlinked. Nothing is ever removed recursively.

    Args:
        thresholds: Stop floors to reach.
        dry_run: If True, count entries as removed without touching them.
    """

    def __init__(self, thresholds: Thresholds, *, dry_run: bool = False) -> None:
        self._thresholds = thresholds
        self._dry_run = dry_run
        # Paths a dry run has counted as removed so far
        self._planned: set[str] = set()

    def evict(self, entries: Sequence[Entry], reading: FilesystemReading) -> EvictionResult:
        """Run the eviction loop over an inventory.

        No per-entry error stops the loop. Entries that have already
        disappeared are ignored; other refusals are recorded as
        failures. Neither credits any freed space.

        Args:
            entries: Complete inventory to evict from.
            reading: Initial probe reading seeding the free counters.

        Returns:
            EvictionResult with removed, protected and failed entries and
            the final free counters.
        """
        result = EvictionResult(
            free_bytes=reading.free_bytes,
            free_inodes=reading.free_inodes,
            dry_run=self._dry_run,
        )
        self._planned.clear()

        for entry in eviction_order(entries):
            if self._thresholds.is_satisfied(result.free_bytes, result.free_inodes):
                result.threshold_met = True
                break

            if is_protected_owner(entry):
                logger.debug("Protected (uid=%d gid=%d): %s", entry.uid, entry.gid, entry.path)
                result.protected.append(entry)
                continue

            if not self._remove(entry, result):
                continue

            result.removed.append(entry)
            result.free_bytes += entry.size_bytes
            result.free_inodes += 1
        else:
            result.threshold_met = self._thresholds.is_satisfied(
                result.free_bytes, result.free_inodes
            )

        logger.debug(
            "Evicted %d entries, %d protected, %d failed; free now %d bytes / %d inodes",
            len(result.removed),
            len(result.protected),
            len(result.failures),
            result.free_bytes,
            result.free_inodes,
        )
        return result

    def _remove(self, entry: Entry, result: EvictionResult) -> bool:
        """Remove a single entry.

        Returns:
            True if the entry was removed (or would be, in a dry run).
        """
        if self._dry_run:
            return self._plan(entry, result)

        try:
            if entry.kind == EntryKind.DIRECTORY:
                os.rmdir(entry.path)
            else:
                os.unlink(entry.path)
        except FileNotFoundError:
            logger.debug("Already gone: %s", entry.path)
            return False
        except OSError as e:
            error = e.strerror or str(e)
            logger.debug("Cannot remove %s: %s", entry.path, error)
            result.failures.append(DeletionFailure(path=entry.path, error=error))
            return False

        logger.debug("Removed %s (%d bytes)", entry.path, entry.size_bytes)
        return True

    def _plan(self, entry: Entry, result: EvictionResult) -> bool:
        """Decide whether a dry run would remove an entry.

        A directory counts as removable only when every child it holds
        has already been planned for removal, so the plan matches what
        ``rmdir`` would allow in a real run.
        """
        if entry.kind == EntryKind.DIRECTORY:
            try:
                with os.scandir(entry.path) as it:
                    remaining = [child.path for child in it if child.path not in self._planned]
            except FileNotFoundError:
                logger.debug("Already gone: %s", entry.path)
                return False
            except OSError as e:
                error = e.strerror or str(e)
                result.failures.append(DeletionFailure(path=entry.path, error=error))
                return False
            if remaining:
                error = os.strerror(errno.ENOTEMPTY)
                logger.debug("Cannot remove %s: %s", entry.path, error)
                result.failures.append(DeletionFailure(path=entry.path, error=error))
                return False
        elif not os.path.lexists(entry.path):
            logger.debug("Already gone: %s", entry.path)
            return False

        self._planned.add(entry.path)
        logger.info("Dry-run: would remove %s", entry.path)
        return True
