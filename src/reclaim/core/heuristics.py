"""Heuristics that derive extra candidate entries from on-disk state.

Two retention policies live here:

* **Version pruning** looks at a directory whose children are named
  ``<AppName><DottedVersion>`` (JetBrains keeps one per IDE release) and
  offers every version except the newest for deletion.
* **Staleness** looks for build-output folders inside project trees and
  offers the ones nobody has touched for a while.

Both are pure functions of the filesystem: they never delete or prompt.
"""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Iterable, Iterator

from reclaim.models.candidate import CandidateEntry

log = logging.getLogger(__name__)

HEURISTIC_SCORE = 0.8
DEFAULT_STALE_DAYS = 30
DEFAULT_CACHES_MARKER = "Caches"

# Depth limits for the staleness walk: where to look for target folders,
# and how deep to look inside them for recent activity.
_SEARCH_DEPTH = 2
_ACTIVITY_DEPTH = 5

_ELECTRON_CACHE_DIRS = ("Cache", "Code Cache", "GPUCache", "page_cache")


# ── version pruning ──────────────────────────────────────────────────────

def split_versioned_name(name: str) -> tuple[str, str]:
    """Split ``'PyCharm2024.3'`` into ``('PyCharm', '2024.3')``.

    The app name is the run of leading alphabetic characters; the
    version is whatever follows, unvalidated.
    """
    prefix_len = 0
    for char in name:
        if not char.isalpha():
            break
        prefix_len += 1
    return name[:prefix_len], name[prefix_len:]


def _versioned_children(root: Path) -> list[tuple[str, str]]:
    """Return ``(app_name, version)`` for every eligible child directory."""
    try:
        with os.scandir(root) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError:
        log.debug("Cannot read versions directory: %s", root)
        return []

    found: list[tuple[str, str]] = []
    for child in children:
        try:
            if not child.is_dir(follow_symlinks=False):
                continue
        except OSError:
            log.debug("Cannot access: %s", child.path)
            continue
        app_name, version = split_versioned_name(child.name)
        if version and "." in version:
            found.append((app_name, version))
    return found


def prune_versions(
    root: Path | str,
    caches_marker: str = DEFAULT_CACHES_MARKER,
) -> list[CandidateEntry]:
    """Offer every installed version except the newest one per app.

    Versions are compared as plain strings, so ``"2.0"`` beats ``"10.0"``.
    When *caches_marker* occurs in *root*, the retained versions also
    contribute their rebuildable plugin and IDE caches.
    """
    root = Path(root)
    entries: list[CandidateEntry] = []
    current: dict[str, str] = {}

    for app_name, version in _versioned_children(root):
        kept = current.get(app_name)
        if kept is None:
            current[app_name] = version
            continue
        old = min(kept, version)
        current[app_name] = max(kept, version)
        entries.append(
            CandidateEntry(
                path=root / f"{app_name}{old}",
                description=f"{app_name} old version {old}",
                score=HEURISTIC_SCORE,
            )
        )

    if caches_marker and caches_marker in str(root):
        for app_name, version in current.items():
            version_dir = root / f"{app_name}{version}"
            entries.extend(
                [
                    CandidateEntry(
                        path=version_dir / "intellij-rust" / "crates-local-index-cargo-home",
                        description=f"{app_name} Rust plugin cache",
                        score=HEURISTIC_SCORE,
                    ),
                    CandidateEntry(
                        path=version_dir / "intellij-rust" / "macros",
                        description=f"{app_name} Rust plugin cache",
                        score=HEURISTIC_SCORE,
                    ),
                    CandidateEntry(
                        path=version_dir / "caches",
                        description=f"{app_name} IDE cache",
                        score=HEURISTIC_SCORE,
                    ),
                ]
            )

    log.debug("Version pruning in %s produced %d entries", root, len(entries))
    return entries


# ── staleness ────────────────────────────────────────────────────────────

def _walk(path: Path, max_depth: int, depth: int = 0) -> Iterator[tuple[Path, int, bool]]:
    """Yield ``(path, depth, is_dir)`` for *path* and everything below it.

    Symlinks are reported but never followed.  Unreadable directories
    are skipped silently.
    """
    try:
        is_dir = path.is_dir() if depth == 0 else (path.is_dir() and not path.is_symlink())
    except OSError:
        is_dir = False
    yield path, depth, is_dir
    if not is_dir or depth >= max_depth:
        return

    try:
        with os.scandir(path) as it:
            children = sorted(it, key=lambda e: e.name)
    except OSError:
        log.debug("Cannot read %s", path)
        return

    for child in children:
        yield from _walk(Path(child.path), max_depth, depth + 1)


def _entry_times(path: Path) -> tuple[float, float, float] | None:
    """Return ``(modified, accessed, created)`` for *path*, or None if unreadable.

    Platforms without a birth time report the inode change time instead.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return None
    created = getattr(st, "st_birthtime", None)
    if created is None:
        created = st.st_ctime
    return st.st_mtime, st.st_atime, created


def last_activity(path: Path | str, max_depth: int = _ACTIVITY_DEPTH) -> tuple[float, float, float]:
    """Return the most recent modified, accessed and created times under *path*.

    Anything unreadable counts as the epoch.
    """
    modified = accessed = created = 0.0
    for entry_path, _depth, _is_dir in _walk(Path(path), max_depth):
        times = _entry_times(entry_path)
        if times is None:
            continue
        modified = max(modified, times[0])
        accessed = max(accessed, times[1])
        created = max(created, times[2])
    return modified, accessed, created


def is_stale(
    activity: tuple[float, float, float],
    threshold_seconds: int,
    now: float,
) -> bool:
    """True when any of the three activity signals is older than the threshold."""
    for stamp in activity:
        idle = int(max(0.0, now - stamp))
        if idle > threshold_seconds:
            return True
    return False


def find_stale_artifacts(
    root: Path | str,
    targets: Iterable[str],
    threshold_days: int = DEFAULT_STALE_DAYS,
    now: float | None = None,
) -> list[CandidateEntry]:
    """Find target folders under *root* that have been idle for too long.

    Only the top two levels of *root* are searched for folders named in
    *targets*.  A match is stale when its newest modified, accessed or
    created timestamp (any one of them) is more than *threshold_days*
    old.
    """
    root = Path(root)
    wanted = frozenset(targets)
    threshold_seconds = threshold_days * 24 * 60 * 60
    if now is None:
        now = time.time()

    entries: list[CandidateEntry] = []
    for path, _depth, is_dir in _walk(root, _SEARCH_DEPTH):
        if not is_dir or path.name not in wanted:
            continue
        if not is_stale(last_activity(path), threshold_seconds, now):
            continue
        entries.append(
            CandidateEntry(
                path=path,
                description=f"Unused {path.name} in {path.parent.name}",
                score=HEURISTIC_SCORE,
            )
        )
    return entries


def find_stale_in_projects(
    projects_root: Path | str,
    targets: Iterable[str],
    threshold_days: int = DEFAULT_STALE_DAYS,
    now: float | None = None,
) -> list[CandidateEntry]:
    """Apply the staleness policy to every project directory in *projects_root*.

    A missing *projects_root* yields nothing; any other failure to list
    it propagates as ``OSError``.
    """
    projects_root = Path(projects_root)
    targets = tuple(targets)
    try:
        projects = sorted(projects_root.iterdir())
    except FileNotFoundError:
        log.info("Projects directory not found: %s", projects_root)
        return []

    log.info("Looking for stale build artifacts in %s", projects_root)
    entries: list[CandidateEntry] = []
    for project in projects:
        try:
            if not project.is_dir():
                continue
        except OSError:
            log.debug("Cannot access: %s", project)
            continue
        entries.extend(find_stale_artifacts(project, targets, threshold_days, now))
    return entries


# ── app-specific expansions ──────────────────────────────────────────────

def electron_entries(root: Path | str, app: str) -> list[CandidateEntry]:
    """Return the cache and log folders an Electron app keeps under *root*."""
    root = Path(root)
    entries = [CandidateEntry(path=root / name, description=f"{app} cache") for name in _ELECTRON_CACHE_DIRS]
    entries.append(CandidateEntry(path=root / "logs", description=f"{app} logs"))
    return entries


def qq_log_entries(root: Path | str) -> list[CandidateEntry]:
    """Return the log folders of every QQ NT account data directory under *root*."""
    root = Path(root)
    try:
        children = sorted(root.iterdir())
    except OSError:
        log.debug("Cannot read QQ data directory: %s", root)
        return []

    entries: list[CandidateEntry] = []
    for child in children:
        if not child.name.startswith("nt_qq"):
            continue
        nt_data = child / "nt_data"
        try:
            if child.is_dir() and nt_data.exists():
                entries.append(CandidateEntry(path=nt_data / "log", description="QQ logs"))
        except OSError:
            log.debug("Cannot access: %s", child)
    return entries
