"""Unit tests for TreeInventory.

Tests entry collection, exclusion, directory preservation, object kind
filtering, symlink handling and races with concurrent deletion.
"""

import os
import re
from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fsreap.core.config import DEFAULT_EXCLUDE
from fsreap.filesystem.inventory import TreeInventory
from fsreap.filesystem.models import EntryKind


def _by_name(result, root: Path) -> dict[str, object]:
    return {os.path.relpath(e.path, root): e for e in result.entries}


class TestTreeInventory:
    """Tests for TreeInventory.collect."""

    def test_collects_files_directories_and_symlinks(
        self, tree: Path, make_file: Callable
    ) -> None:
        """Files, directories and symlinks below the root are inventoried."""
        make_file(tree / "a.dat", atime=1_000)
        make_file(tree / "sub" / "b.dat", atime=2_000)
        (tree / "link").symlink_to(tree / "a.dat")

        result = TreeInventory(tree).collect()
        entries = _by_name(result, tree)

        assert set(entries) == {"a.dat", "sub", "sub/b.dat", "link"}
        assert entries["a.dat"].kind == EntryKind.FILE
        assert entries["sub"].kind == EntryKind.DIRECTORY
        assert entries["link"].kind == EntryKind.SYMLINK
        assert str(tree) not in {e.path for e in result.entries}

    def test_records_metadata(self, tree: Path, make_file: Callable) -> None:
        """Entries carry the lstat owner, access time and allocated size."""
        path = make_file(tree / "a.dat", atime=1_234_567)
        st = os.lstat(path)

        entry = TreeInventory(tree).collect().entries[0]

        assert entry.path == str(path)
        assert entry.atime == 1_234_567
        assert entry.uid == st.st_uid
        assert entry.gid == st.st_gid
        assert entry.size_bytes == st.st_blocks * 512

    def test_total_size_is_sum(self, tree: Path, make_file: Callable) -> None:
        """The side-channel total equals the sum of entry sizes."""
        make_file(tree / "a", atime=1)
        make_file(tree / "d" / "b", atime=2)

        result = TreeInventory(tree).collect()

        assert result.total_size_bytes == sum(e.size_bytes for e in result.entries)
        assert result.total_size_bytes > 0
        assert len(result) == 3

    def test_preserve_directories(self, tree: Path, make_file: Callable) -> None:
        """With directories preserved, they are walked but not inventoried."""
        make_file(tree / "sub" / "deeper" / "c.dat", atime=1)

        result = TreeInventory(tree, preserve_directories=True).collect()

        assert [os.path.relpath(e.path, tree) for e in result.entries] == ["sub/deeper/c.dat"]

    def test_exclusion_pattern_covers_subtree(self, tree: Path, make_file: Callable) -> None:
        """An excluded subdirectory and all its contents are left out."""
        make_file(tree / "keep" / "old.dat", atime=1)
        make_file(tree / "keep" / "nested" / "older.dat", atime=0)
        make_file(tree / "other.dat", atime=5_000)

        result = TreeInventory(tree, re.compile(r"/keep(/|$)")).collect()

        assert [os.path.relpath(e.path, tree) for e in result.entries] == ["other.dat"]

    def test_pattern_is_anchored_at_root(self, tree: Path, make_file: Callable) -> None:
        """The pattern is matched against the root-relative path from its start."""
        make_file(tree / "keep" / "a", atime=1)
        make_file(tree / "data" / "keep" / "b", atime=1)

        result = TreeInventory(tree, re.compile(r"/keep(/|$)")).collect()
        names = set(_by_name(result, tree))

        assert "keep" not in names
        assert "keep/a" not in names
        assert {"data", "data/keep", "data/keep/b"} <= names

    def test_default_exclusion_skips_lost_found(self, tree: Path, make_file: Callable) -> None:
        """The default pattern leaves lost+found alone."""
        make_file(tree / "lost+found" / "#1234", atime=1)
        make_file(tree / "a", atime=1)

        result = TreeInventory(tree, re.compile(DEFAULT_EXCLUDE)).collect()

        assert set(_by_name(result, tree)) == {"a"}

    def test_special_files_skipped(self, tree: Path, make_file: Callable) -> None:
        """FIFOs are not inventoried."""
        make_file(tree / "a", atime=1)
        os.mkfifo(tree / "pipe")

        result = TreeInventory(tree).collect()

        assert set(_by_name(result, tree)) == {"a"}

    def test_symlinked_directory_not_followed(self, tree: Path, make_file: Callable) -> None:
        """A symlink to a directory is an entry of its own and is not descended."""
        make_file(tree / "real" / "f", atime=1)
        (tree / "alias").symlink_to(tree / "real", target_is_directory=True)

        result = TreeInventory(tree).collect()
        entries = _by_name(result, tree)

        assert entries["alias"].kind == EntryKind.SYMLINK
        assert "alias/f" not in entries

    def test_vanished_entry_skipped(self, tree: Path, make_file: Callable) -> None:
        """An entry that disappears before lstat is skipped without error."""
        make_file(tree / "a", atime=1)
        make_file(tree / "gone", atime=1)
        real_lstat = os.lstat

        def racing_lstat(path, *args, **kwargs):
            if str(path).endswith("gone"):
                raise FileNotFoundError(2, "No such file or directory", str(path))
            return real_lstat(path, *args, **kwargs)

        with patch("fsreap.filesystem.inventory.os.lstat", side_effect=racing_lstat):
            result = TreeInventory(tree).collect()

        assert set(_by_name(result, tree)) == {"a"}

    def test_unreadable_entry_skipped(self, tree: Path, make_file: Callable) -> None:
        """An lstat failure other than disappearance is skipped as well."""
        make_file(tree / "a", atime=1)
        make_file(tree / "denied", atime=1)
        real_lstat = os.lstat

        def denying_lstat(path, *args, **kwargs):
            if str(path).endswith("denied"):
                raise PermissionError(13, "Permission denied", str(path))
            return real_lstat(path, *args, **kwargs)

        with patch("fsreap.filesystem.inventory.os.lstat", side_effect=denying_lstat):
            result = TreeInventory(tree).collect()

        assert set(_by_name(result, tree)) == {"a"}

    @pytest.mark.parametrize("one_filesystem", [True, False])
    def test_other_filesystem(self, tree: Path, make_file: Callable, one_filesystem: bool) -> None:
        """Directories on another device are only entered when allowed."""
        make_file(tree / "mnt" / "inner", atime=1)
        make_file(tree / "local", atime=1)
        real_lstat = os.lstat

        def mounted_lstat(path, *args, **kwargs):
            st = real_lstat(path, *args, **kwargs)
            if str(path).endswith("mnt"):
                return SimpleNamespace(
                    st_mode=st.st_mode,
                    st_dev=st.st_dev + 1,
                    st_uid=st.st_uid,
                    st_gid=st.st_gid,
                    st_atime=st.st_atime,
                    st_blocks=st.st_blocks,
                )
            return st

        with patch("fsreap.filesystem.inventory.os.lstat", side_effect=mounted_lstat):
            result = TreeInventory(tree, one_filesystem=one_filesystem).collect()

        names = set(_by_name(result, tree))
        if one_filesystem:
            assert names == {"local"}
        else:
            assert names == {"local", "mnt", "mnt/inner"}

    def test_collect_does_not_modify_tree(self, tree: Path, make_file: Callable) -> None:
        """Inventory is read-only."""
        make_file(tree / "a", atime=1)
        make_file(tree / "d" / "b", atime=2)
        before = sorted(str(p) for p in tree.rglob("*"))

        TreeInventory(tree).collect()

        assert sorted(str(p) for p in tree.rglob("*")) == before
