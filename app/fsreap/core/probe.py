"""Filesystem usage probes.

A probe reports total and free bytes and inodes for the filesystem
holding a path. Two strategies exist, ranked by preference: a direct
``statvfs`` call and a fallback that parses ``df`` output. The first
available one is selected once at startup.
"""

import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from fsreap.core.errors import ProbeUnavailable
from fsreap.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

# Device column, then (total, used, free, used%, mount). Inode usage may
# be reported as "-" on filesystems without a fixed inode table.
_DF_LINE = re.compile(r"^\S.*?\s+(\d+)\s+(\d+)\s+(\d+)\s+(?:\d+%|-)\s+(/.*)$")

# df -k reports space in 1024-byte blocks
_DF_BLOCK_SIZE = 1024


@dataclass(frozen=True, slots=True)
class FilesystemReading:
    """Point-in-time capacity snapshot of one filesystem.

    Attributes:
        total_bytes: Total capacity in bytes.
        free_bytes: Bytes available for new data.
        total_inodes: Total number of inodes.
        free_inodes: Inodes available for new entries.
    """

    total_bytes: int
    free_bytes: int
    total_inodes: int
    free_inodes: int


class ProbeStrategy(ABC):
    """Abstract base class for filesystem usage probes.

    Example:
        >>> probe = StatvfsProbe()
        >>> if probe.is_available():
        ...     reading = probe.read(Path("/scratch"))
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier used in diagnostics."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this probe can be used on the current system."""

    @abstractmethod
    def read(self, path: Path) -> FilesystemReading:
        """Read current usage for the filesystem containing ``path``.

        Raises:
            ProbeUnavailable: If the statistics cannot be obtained.
        """


class StatvfsProbe(ProbeStrategy):
    """Probe backed by ``os.statvfs``.

    Free counts use the unprivileged figures (``f_bavail``, ``f_favail``)
    so reserved root blocks are not counted as headroom.
    """

    @property
    def name(self) -> str:
        return "statvfs"

    def is_available(self) -> bool:
        return hasattr(os, "statvfs")

    def read(self, path: Path) -> FilesystemReading:
        try:
            st = os.statvfs(path)
        except OSError as e:
            msg = f"statvfs failed for {path}: {e.strerror or e}"
            raise ProbeUnavailable(msg) from e

        return FilesystemReading(
            total_bytes=st.f_blocks * st.f_frsize,
            free_bytes=st.f_bavail * st.f_frsize,
            total_inodes=st.f_files,
            free_inodes=st.f_favail,
        )


class DfProbe(ProbeStrategy):
    """Probe that parses POSIX ``df`` output.

    Runs ``df -P -k`` for space and ``df -P -i`` for inodes. Only the
    last line of each output is parsed, so a header line is ignored.
    """

    @property
    def name(self) -> str:
        return "df"

    def is_available(self) -> bool:
        return command_exists("df")

    def read(self, path: Path) -> FilesystemReading:
        total_blocks, free_blocks = self._query(["df", "-P", "-k", str(path)])
        total_inodes, free_inodes = self._query(["df", "-P", "-i", str(path)])
        return FilesystemReading(
            total_bytes=total_blocks * _DF_BLOCK_SIZE,
            free_bytes=free_blocks * _DF_BLOCK_SIZE,
            total_inodes=total_inodes,
            free_inodes=free_inodes,
        )

    def _query(self, args: list[str]) -> tuple[int, int]:
        """Run one df invocation and return its (total, free) columns."""
        try:
            result = run_command(args, timeout=30.0, env={"LC_ALL": "C"})
        except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
            msg = f"{' '.join(args)} could not be run: {e}"
            raise ProbeUnavailable(msg) from e

        if not result.success:
            msg = f"{' '.join(args)} failed: {result.stderr.strip() or result.returncode}"
            raise ProbeUnavailable(msg)

        return parse_df_line(result.last_line)


def parse_df_line(line: str) -> tuple[int, int]:
    """Parse the (total, free) columns from one line of ``df -P`` output.

    Args:
        line: A data line such as
            ``/dev/sda1 1000 400 600 40% /scratch``.

    Returns:
        Tuple of (total, free) in the units df reported.

    Raises:
        ProbeUnavailable: If the line does not match the df column layout.
    """
    match = _DF_LINE.match(line.strip())
    if match is None:
        msg = f"Unexpected df output: {line!r}"
        raise ProbeUnavailable(msg)
    total, _used, free, _mount = match.groups()
    return int(total), int(free)


def select_probe(candidates: list[ProbeStrategy] | None = None) -> ProbeStrategy:
    """Return the first available probe strategy.

    Args:
        candidates: Strategies in order of preference. Defaults to
            statvfs, then df.

    Raises:
        ProbeUnavailable: If no strategy is available.
    """
    strategies = candidates if candidates is not None else [StatvfsProbe(), DfProbe()]
    for strategy in strategies:
        if strategy.is_available():
            logger.debug("Using %s probe", strategy.name)
            return strategy

    msg = "No filesystem statistics provider available (statvfs and df both missing)"
    raise ProbeUnavailable(msg)
