"""Directory size scanning."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Callable, Iterable

from reclaim.models.candidate import CandidateEntry

log = logging.getLogger(__name__)

ScanProgressCallback = Callable[[int, int, CandidateEntry], None]  # (index, total, entry)


class ScanError(Exception):
    """Raised when a path cannot be sized at all."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(message)
        self.path = Path(path)


class PathNotFoundError(ScanError):
    """The path does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, f"Path '{path}' does not exist")


class NotADirectoryScanError(ScanError):
    """The path exists but is not a directory."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, f"Path '{path}' is not a directory")


def dir_size(path: Path | str) -> int:
    """Return the total byte size of all regular files under *path*.

    Traversal is best-effort: entries whose metadata cannot be read and
    directories that cannot be listed are logged as warnings and skipped,
    so the result may undercount.  Symlinks are never followed.

    Raises:
        PathNotFoundError: *path* does not exist.
        NotADirectoryScanError: *path* is not a directory.
        ScanError: *path* itself cannot be stat'ed.
    """
    root = Path(path)
    try:
        st = root.stat()
    except (FileNotFoundError, NotADirectoryError):
        raise PathNotFoundError(root) from None
    except OSError as e:
        raise ScanError(root, f"Cannot access '{root}': {e}") from e
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryScanError(root)

    total = 0
    stack: list[str] = [str(root)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError as e:
                        log.warning("Cannot read metadata of '%s': %s", entry.path, e)
        except OSError as e:
            log.warning("Cannot list directory '%s': %s", current, e)
    return total


def size_entries(
    entries: Iterable[CandidateEntry],
    on_progress: ScanProgressCallback | None = None,
) -> list[CandidateEntry]:
    """Size every entry, drop the empty or missing ones, and sort largest first.

    Each entry is sized exactly once and its ``size`` is written back in
    place.  Entries whose path is missing or not a directory never reach
    the returned list.
    """
    pending = list(entries)
    total = len(pending)

    for index, entry in enumerate(pending):
        if on_progress:
            on_progress(index, total, entry)
        try:
            entry.size = dir_size(entry.path)
        except ScanError as e:
            log.debug("Skipping %s: %s", entry.description, e)
            continue
        entry.selected = False

    sized = [e for e in pending if e.size]
    sized.sort(key=lambda e: e.size or 0, reverse=True)
    log.info("Sized %d of %d candidate entries", len(sized), total)
    return sized
