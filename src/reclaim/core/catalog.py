"""Catalog of well-known cache locations and candidate discovery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from reclaim.core.environment import Environment
from reclaim.core.heuristics import (
    DEFAULT_STALE_DAYS,
    electron_entries,
    find_stale_in_projects,
    prune_versions,
    qq_log_entries,
)
from reclaim.models.candidate import CandidateEntry
from reclaim.settings import Settings

log = logging.getLogger(__name__)

MACOS = frozenset({"darwin"})
LINUX = frozenset({"linux"})
ALL_PLATFORMS = MACOS | LINUX


@dataclass(frozen=True)
class CatalogTemplate:
    """A path under the home directory that is always safe to clear."""

    relative_path: str
    description: str
    platforms: frozenset[str] = ALL_PLATFORMS


@dataclass(frozen=True)
class ElectronApp:
    """An Electron app whose data directory holds Chromium caches."""

    relative_path: str
    app: str
    platforms: frozenset[str] = ALL_PLATFORMS


@dataclass(frozen=True)
class VersionedRoot:
    """A directory holding one ``<App><Version>`` folder per installed release."""

    relative_path: str
    caches_marker: str
    platforms: frozenset[str] = ALL_PLATFORMS


@dataclass(frozen=True)
class ProjectsRoot:
    """A directory of projects whose build outputs go stale."""

    relative_path: str
    targets: tuple[str, ...]


BUILTIN_CATALOG: tuple[CatalogTemplate, ...] = (
    # macOS
    CatalogTemplate("Library/Caches/Microsoft Edge", "Microsoft Edge cache", MACOS),
    CatalogTemplate("Library/Caches/Google/Chrome", "Google Chrome cache", MACOS),
    CatalogTemplate("Library/Caches/Google/Jib", "Google Jib cache", MACOS),
    CatalogTemplate("Library/Caches/com.hnc.Discord.ShipIt", "Discord auto-update cache", MACOS),
    CatalogTemplate("Library/Caches/ms-playwright", "Playwright cache", MACOS),
    CatalogTemplate("Library/Caches/Homebrew/downloads", "Homebrew download cache", MACOS),
    CatalogTemplate("Library/Containers/com.microsoft.onenote.mac/Data/Library/Logs", "OneNote logs", MACOS),
    CatalogTemplate("Library/Containers/com.microsoft.Powerpoint/Data/Library/Logs", "PowerPoint logs", MACOS),
    CatalogTemplate("Library/Containers/com.shangguanyangguang.MyZip/Data/tmp", "MyZip temporary files", MACOS),
    CatalogTemplate("Library/Containers/com.netease.163music/Data/Library/Caches", "NetEase Music cache", MACOS),
    CatalogTemplate("Library/Caches/Yarn", "Yarn (yarnpkg) cache", MACOS),
    CatalogTemplate("Library/Caches/electron", "Electron binary cache", MACOS),
    CatalogTemplate("Library/Application Support/Microsoft/EdgeUpdater", "Microsoft Edge updater", MACOS),
    CatalogTemplate("Library/Containers/com.tencent.qq/Data/Library/Record", "QQ screen recordings", MACOS),
    CatalogTemplate(
        "Library/Group Containers/UBF8T346G9.OneDriveStandaloneSuite/FileProviderLogs", "OneDrive logs", MACOS
    ),
    CatalogTemplate("Library/Logs/OneDrive", "OneDrive logs", MACOS),
    CatalogTemplate(
        "Library/Containers/com.apple.mediaanalysisd/Data/Library/Caches", "mediaanalysisd cache", MACOS
    ),
    CatalogTemplate(
        "Library/Containers/com.tencent.meeting/Data/Library/Global/Data/DynamicResourcePackage",
        "Tencent Meeting download cache",
        MACOS,
    ),
    CatalogTemplate("Library/Application Support/Caches", "Unattributed application cache", MACOS),
    CatalogTemplate("Library/Containers/com.tencent.meeting/Data/Library/Global/Logs", "Tencent Meeting logs", MACOS),
    CatalogTemplate("Library/Application Support/Adobe/Common/Media Cache Files", "Adobe Media Cache", MACOS),
    CatalogTemplate("Library/Application Support/Adobe/Common/Media Cache", "Adobe Media Cache", MACOS),
    CatalogTemplate("Library/Application Support/zoom.us/AutoUpdater", "Zoom auto-update", MACOS),
    CatalogTemplate("Library/Logs/JetBrains", "JetBrains logs", MACOS),
    # Linux
    CatalogTemplate(".cache/google-chrome", "Google Chrome cache", LINUX),
    CatalogTemplate(".cache/chromium", "Chromium cache", LINUX),
    CatalogTemplate(".cache/microsoft-edge", "Microsoft Edge cache", LINUX),
    CatalogTemplate(".cache/mozilla/firefox", "Firefox cache", LINUX),
    CatalogTemplate(".cache/ms-playwright", "Playwright cache", LINUX),
    CatalogTemplate(".cache/yarn", "Yarn (yarnpkg) cache", LINUX),
    CatalogTemplate(".cache/electron", "Electron binary cache", LINUX),
    CatalogTemplate(".cache/pip", "pip cache", LINUX),
    CatalogTemplate(".cache/thumbnails", "Thumbnail cache", LINUX),
    CatalogTemplate(".npm/_cacache", "npm cache", LINUX),
    CatalogTemplate(".gradle/caches", "Gradle cache", LINUX),
)

ELECTRON_APPS: tuple[ElectronApp, ...] = (
    ElectronApp("Library/Application Support/Code", "VSCode", MACOS),
    ElectronApp("Library/Application Support/Code - Insiders", "VSCode - Insiders", MACOS),
    ElectronApp("Library/Application Support/discord", "Discord", MACOS),
    ElectronApp("Library/Application Support/Notion/Partitions/notion", "Notion", MACOS),
    ElectronApp("Library/Application Support/cnkiexpress", "CNKI Express", MACOS),
    ElectronApp("Library/Application Support/quark-cloud-drive", "Quark Cloud Drive", MACOS),
    ElectronApp(".config/Code", "VSCode", LINUX),
    ElectronApp(".config/Code - Insiders", "VSCode - Insiders", LINUX),
    ElectronApp(".config/discord", "Discord", LINUX),
    ElectronApp(".config/Slack", "Slack", LINUX),
)

JETBRAINS_ROOTS: tuple[VersionedRoot, ...] = (
    VersionedRoot("Library/Application Support/JetBrains", "Caches", MACOS),
    VersionedRoot("Library/Caches/JetBrains", "Caches", MACOS),
    VersionedRoot(".config/JetBrains", ".cache", LINUX),
    VersionedRoot(".local/share/JetBrains", ".cache", LINUX),
    VersionedRoot(".cache/JetBrains", ".cache", LINUX),
)

QQ_DATA_DIR = "Library/Containers/com.tencent.qq/Data/Library/Application Support/QQ"

DEFAULT_PROJECTS: tuple[ProjectsRoot, ...] = (
    ProjectsRoot("IdeaProjects", (".gradle", "out", "build")),
)


def platform_key(platform: str) -> str:
    """Normalize ``sys.platform`` values to the keys used by the catalog."""
    if platform.startswith("linux"):
        return "linux"
    return platform


def _applies(platforms: frozenset[str], env: Environment) -> bool:
    return platform_key(env.platform) in platforms


def _resolve(env: Environment, raw: str) -> Path:
    """Resolve a user-supplied path against the home directory."""
    if raw == "~" or raw.startswith("~/"):
        return env.home / raw[2:]
    path = Path(raw)
    if not path.is_absolute():
        path = env.home / path
    return path


def expand_catalog(
    env: Environment,
    templates: Iterable[CatalogTemplate] = BUILTIN_CATALOG,
) -> list[CandidateEntry]:
    """Turn the templates that apply to this platform into candidate entries."""
    return [
        CandidateEntry(path=env.home / t.relative_path, description=t.description)
        for t in templates
        if _applies(t.platforms, env)
    ]


def _extra_catalog(env: Environment, settings: Settings) -> list[CandidateEntry]:
    """Candidate entries listed under ``catalog.extra`` in the settings file."""
    entries: list[CandidateEntry] = []
    for item in settings.get("catalog.extra", []) or []:
        try:
            path = _resolve(env, item["path"])
            description = item.get("description") or path.name
        except (KeyError, TypeError, AttributeError):
            log.warning("Ignoring malformed catalog.extra item: %r", item)
            continue
        entries.append(CandidateEntry(path=path, description=description))
    return entries


def _projects_roots(settings: Settings) -> list[ProjectsRoot]:
    configured = settings.get("stale.projects")
    if configured is None:
        return list(DEFAULT_PROJECTS)
    if not isinstance(configured, list):
        log.warning("Ignoring stale.projects: expected a list, got %r", configured)
        return list(DEFAULT_PROJECTS)

    roots: list[ProjectsRoot] = []
    for item in configured:
        try:
            targets = item["targets"]
            if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
                raise TypeError("targets must be a list of folder names")
            roots.append(ProjectsRoot(str(item["path"]), tuple(targets)))
        except (KeyError, TypeError):
            log.warning("Ignoring malformed stale.projects item: %r", item)
    return roots


def discover(env: Environment, settings: Settings | None = None) -> list[CandidateEntry]:
    """Collect every candidate entry for this machine, unsized and unsorted.

    Per-item failures are skipped.  Failing to list a configured projects
    directory (other than it being absent) raises ``OSError``.
    """
    if settings is None:
        settings = Settings.instance()

    entries = expand_catalog(env)
    entries.extend(_extra_catalog(env, settings))

    for electron_app in ELECTRON_APPS:
        if _applies(electron_app.platforms, env):
            entries.extend(electron_entries(env.home / electron_app.relative_path, electron_app.app))

    if env.is_macos:
        entries.extend(qq_log_entries(env.home / QQ_DATA_DIR))

    if settings.get("jetbrains.enabled", True):
        for root in JETBRAINS_ROOTS:
            if _applies(root.platforms, env):
                entries.extend(prune_versions(env.home / root.relative_path, root.caches_marker))

    threshold_days = settings.get_int("stale.threshold_days", DEFAULT_STALE_DAYS)
    for projects in _projects_roots(settings):
        entries.extend(
            find_stale_in_projects(_resolve(env, projects.relative_path), projects.targets, threshold_days)
        )

    log.info("Discovered %d candidate entries", len(entries))
    return entries
