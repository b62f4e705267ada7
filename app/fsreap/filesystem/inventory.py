"""Tree inventory: the side-effect-free first phase of a run.

Walks a directory tree once and records an Entry for every regular
file, symlink and (optionally) directory below the root. The walk is
always completed before any entry is evicted or summarized.
"""

import logging
import os
import re
import stat
from pathlib import Path

from fsreap.filesystem.models import Entry, EntryKind, InventoryResult

logger = logging.getLogger(__name__)

# st_blocks is always counted in 512-byte units
_BLOCK_UNIT = 512


class TreeInventory:
    """Collects entry metadata under a root directory.

    Args:
        root: Directory to walk. The root itself is never inventoried.
        exclude: Pattern matched against the root-relative path with a
            leading ``/`` (e.g. ``/lost+found/file``); matches are skipped.
            Every path is tested on its own, so a pattern meant to cover a
            whole subtree must also match the paths below it.
        preserve_directories: If True, directories are walked but not
            inventoried, so they can never be evicted.
        one_filesystem: If True, do not enter or inventory directories
            that live on a different device than the root.
    """

    def __init__(
        self,
        root: Path,
        exclude: re.Pattern[str] | None = None,
        *,
        preserve_directories: bool = False,
        one_filesystem: bool = True,
    ) -> None:
        self._root = root
        self._exclude = exclude
        self._preserve_directories = preserve_directories
        self._one_filesystem = one_filesystem

    def collect(self) -> InventoryResult:
        """Walk the whole tree and return every eligible entry.

        Entries that vanish between listing and ``lstat`` are skipped
        silently. Directories that cannot be listed are logged and skipped.

        Returns:
            InventoryResult with the entries and their total size.
        """
        root = str(self._root)
        root_dev = os.stat(root).st_dev
        entries: list[Entry] = []
        total_size = 0

        for dirpath, dirnames, filenames in os.walk(root, onerror=self._walk_error):
            descend: list[str] = []
            for name in dirnames:
                path = os.path.join(dirpath, name)
                entry, st = self._examine(path)
                if st is None:
                    continue
                if self._one_filesystem and stat.S_ISDIR(st.st_mode) and st.st_dev != root_dev:
                    logger.debug("Not crossing into other filesystem: %s", path)
                    continue
                if stat.S_ISDIR(st.st_mode):
                    descend.append(name)
                if entry is not None:
                    entries.append(entry)
                    total_size += entry.size_bytes
            # os.walk lists symlinks to directories as dirnames without following them
            dirnames[:] = descend

            for name in filenames:
                entry, _ = self._examine(os.path.join(dirpath, name))
                if entry is not None:
                    entries.append(entry)
                    total_size += entry.size_bytes

        logger.debug("Inventoried %d entries (%d bytes) under %s", len(entries), total_size, root)
        return InventoryResult(root=root, entries=tuple(entries), total_size_bytes=total_size)

    def _examine(self, path: str) -> tuple[Entry | None, os.stat_result | None]:
        """Stat one candidate and decide whether it is inventoried.

        Returns:
            Tuple of (entry or None if not inventoried, stat result or
            None if the path could not be read).
        """
        try:
            st = os.lstat(path)
        except FileNotFoundError:
            logger.debug("Vanished during walk: %s", path)
            return None, None
        except OSError as e:
            logger.warning("Cannot stat %s: %s", path, e.strerror or e)
            return None, None

        if self._is_excluded(path):
            logger.debug("Excluded: %s", path)
            return None, st

        kind = self._kind_of(st.st_mode)
        if kind is None:
            return None, st
        if kind == EntryKind.DIRECTORY and self._preserve_directories:
            return None, st

        entry = Entry(
            path=path,
            kind=kind,
            uid=st.st_uid,
            gid=st.st_gid,
            atime=int(st.st_atime),
            size_bytes=st.st_blocks * _BLOCK_UNIT,
        )
        return entry, st

    def _is_excluded(self, path: str) -> bool:
        if self._exclude is None:
            return False
        relative = "/" + os.path.relpath(path, self._root)
        return self._exclude.match(relative) is not None

    @staticmethod
    def _kind_of(mode: int) -> EntryKind | None:
        """Map a stat mode to an EntryKind; None for sockets, devices and fifos."""
        if stat.S_ISLNK(mode):
            return EntryKind.SYMLINK
        if stat.S_ISDIR(mode):
            return EntryKind.DIRECTORY
        if stat.S_ISREG(mode):
            return EntryKind.FILE
        return None

    @staticmethod
    def _walk_error(error: OSError) -> None:
        logger.warning("Cannot read directory %s: %s", error.filename, error.strerror or error)
