"""Tests for directory sizing and the scan phase."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from reclaim.core.scanner import (
    NotADirectoryScanError,
    PathNotFoundError,
    ScanError,
    dir_size,
    size_entries,
)
from reclaim.models.candidate import CandidateEntry


@pytest.fixture
def tree(tmp_path):
    """A small nested tree totalling 1000 bytes."""
    root = tmp_path / "cache"
    (root / "a" / "b").mkdir(parents=True)
    (root / "top.bin").write_bytes(b"x" * 100)
    (root / "a" / "mid.bin").write_bytes(b"y" * 300)
    (root / "a" / "b" / "deep.bin").write_bytes(b"z" * 600)
    return root


class TestDirSize:
    def test_sums_nested_files(self, tree):
        assert dir_size(tree) == 1000

    def test_same_total_on_rescan(self, tree):
        assert dir_size(tree) == dir_size(tree)

    def test_empty_directory(self, tmp_path):
        assert dir_size(tmp_path) == 0

    def test_missing_path(self, tmp_path):
        with pytest.raises(PathNotFoundError):
            dir_size(tmp_path / "nope")

    def test_file_is_not_a_directory(self, tree):
        with pytest.raises(NotADirectoryScanError) as exc_info:
            dir_size(tree / "top.bin")
        assert isinstance(exc_info.value, ScanError)
        assert exc_info.value.path == tree / "top.bin"

    def test_symlinks_are_not_followed(self, tree, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "big.bin").write_bytes(b"o" * 5000)
        os.symlink(outside, tree / "link_dir")
        os.symlink(outside / "big.bin", tree / "link_file")
        assert dir_size(tree) == 1000

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs POSIX permissions as non-root")
    def test_unreadable_subdir_is_skipped_with_warning(self, tree, caplog):
        locked = tree / "a" / "b"
        locked.chmod(0)
        try:
            with caplog.at_level(logging.WARNING, logger="reclaim.core.scanner"):
                total = dir_size(tree)
        finally:
            locked.chmod(0o755)
        assert total == 400
        assert any("Cannot list directory" in r.message for r in caplog.records)

    def test_failed_listing_is_skipped_with_warning(self, tree, caplog, monkeypatch):
        locked = str(tree / "a" / "b")
        real_scandir = os.scandir

        def fake_scandir(path):
            if str(path) == locked:
                raise PermissionError(13, "Permission denied", locked)
            return real_scandir(path)

        monkeypatch.setattr("reclaim.core.scanner.os.scandir", fake_scandir)
        with caplog.at_level(logging.WARNING, logger="reclaim.core.scanner"):
            total = dir_size(tree)

        assert total == 400
        assert any("Cannot list directory" in r.message and locked in r.message for r in caplog.records)

    def test_unstattable_root_raises_scan_error(self, tmp_path):
        with pytest.raises(ScanError) as exc_info:
            dir_size(tmp_path / ("n" * 300) / "cache")
        assert not isinstance(exc_info.value, NotADirectoryScanError)


class TestSizeEntries:
    def test_fills_sizes_drops_empty_and_missing_and_sorts(self, tmp_path):
        small = tmp_path / "small"
        small.mkdir()
        (small / "f").write_bytes(b"s" * 10)
        big = tmp_path / "big"
        big.mkdir()
        (big / "f").write_bytes(b"b" * 500)
        empty = tmp_path / "empty"
        empty.mkdir()
        a_file = tmp_path / "file.txt"
        a_file.write_bytes(b"f" * 50)

        entries = [
            CandidateEntry(path=small, description="small"),
            CandidateEntry(path=tmp_path / "missing", description="missing"),
            CandidateEntry(path=empty, description="empty"),
            CandidateEntry(path=a_file, description="file"),
            CandidateEntry(path=big, description="big"),
        ]

        result = size_entries(entries)

        assert [e.description for e in result] == ["big", "small"]
        assert [e.size for e in result] == [500, 10]
        assert all(not e.selected for e in result)

    def test_progress_called_once_per_entry(self, tmp_path):
        (tmp_path / "one").mkdir()
        entries = [
            CandidateEntry(path=tmp_path / "one", description="one"),
            CandidateEntry(path=tmp_path / "two", description="two"),
        ]
        calls: list[tuple[int, int, str]] = []

        size_entries(entries, on_progress=lambda i, n, e: calls.append((i, n, e.description)))

        assert calls == [(0, 2, "one"), (1, 2, "two")]

    def test_no_entries(self):
        assert size_entries([]) == []

    def test_unreachable_entry_does_not_abort_the_scan(self, tmp_path):
        good = tmp_path / "good"
        good.mkdir()
        (good / "f").write_bytes(b"g" * 20)
        entries = [
            CandidateEntry(path=tmp_path / ("n" * 300) / "cache", description="too long"),
            CandidateEntry(path=good, description="good"),
        ]

        result = size_entries(entries)

        assert [e.description for e in result] == ["good"]


class TestCandidateEntry:
    def test_relative_path_rejected(self):
        with pytest.raises(ValueError):
            CandidateEntry(path=Path("relative/dir"), description="bad")

    def test_string_path_converted(self, tmp_path):
        entry = CandidateEntry(path=str(tmp_path), description="ok")
        assert isinstance(entry.path, Path)
        assert entry.size is None
        assert entry.score == 1.0
