"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
from collections.abc import Callable
from pathlib import Path

import pytest
from fsreap.core.probe import FilesystemReading, ProbeStrategy
from fsreap.filesystem.models import Entry, EntryKind

# Ordinary, unprivileged owner used for entries that may be evicted
USER_ID = 1000
GROUP_ID = 1000


class FakeProbe(ProbeStrategy):
    """Probe returning a fixed reading and recording the paths it was asked about."""

    def __init__(self, reading: FilesystemReading) -> None:
        self.reading = reading
        self.calls: list[Path] = []

    @property
    def name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        return True

    def read(self, path: Path) -> FilesystemReading:
        self.calls.append(path)
        return self.reading


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory so no user config is read."""
    config_home = tmp_path / "xdg-config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for Entry snapshots owned by an unprivileged user."""

    def _make(
        path: str,
        atime: int,
        size_bytes: int = 4096,
        kind: EntryKind = EntryKind.FILE,
        uid: int = USER_ID,
        gid: int = GROUP_ID,
    ) -> Entry:
        return Entry(path=path, kind=kind, uid=uid, gid=gid, atime=atime, size_bytes=size_bytes)

    return _make


@pytest.fixture
def make_file() -> Callable[..., Path]:
    """Factory creating a real file with a given access time.

    The content is large enough that the file always has allocated blocks.
    """

    def _make(path: Path, atime: int, size: int = 64 * 1024) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"x" * size)
        os.utime(path, (atime, atime))
        return path

    return _make


@pytest.fixture
def make_probe() -> Callable[[FilesystemReading], FakeProbe]:
    """Factory for probes that report a fixed reading."""
    return FakeProbe


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """Empty directory to use as the root of a cleanup run."""
    root = tmp_path / "tree"
    root.mkdir()
    return root
