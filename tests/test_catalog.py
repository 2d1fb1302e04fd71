"""Tests for catalog expansion and discovery."""

from __future__ import annotations

import json
import os
import time
from pathlib import Path

import pytest

from reclaim.core.catalog import (
    BUILTIN_CATALOG,
    CatalogTemplate,
    LINUX,
    MACOS,
    discover,
    expand_catalog,
    platform_key,
)
from reclaim.core.environment import Environment
from reclaim.settings import Settings


@pytest.fixture
def home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


def _env(home: Path, platform: str = "linux") -> Environment:
    return Environment(home=home, username="tester", platform=platform)


class TestExpandCatalog:
    def test_filters_by_platform(self, home):
        templates = (
            CatalogTemplate("Library/Caches/A", "A cache", MACOS),
            CatalogTemplate(".cache/b", "B cache", LINUX),
            CatalogTemplate("shared", "Shared"),
        )

        linux = expand_catalog(_env(home, "linux"), templates)
        mac = expand_catalog(_env(home, "darwin"), templates)

        assert [e.path for e in linux] == [home / ".cache/b", home / "shared"]
        assert [e.path for e in mac] == [home / "Library/Caches/A", home / "shared"]
        assert all(e.score == 1.0 and e.size is None for e in linux + mac)

    def test_builtin_catalog_is_relative(self):
        assert all(not Path(t.relative_path).is_absolute() for t in BUILTIN_CATALOG)

    def test_platform_key(self):
        assert platform_key("linux2") == "linux"
        assert platform_key("darwin") == "darwin"


class TestEnvironment:
    def test_detect(self):
        env = Environment.detect()
        assert env.home.is_absolute()
        assert env.username


class TestDiscover:
    def test_linux_discovery(self, home, isolate_settings):
        jetbrains = home / ".cache" / "JetBrains"
        (jetbrains / "PyCharm2023.3").mkdir(parents=True)
        (jetbrains / "PyCharm2024.1").mkdir()

        entries = discover(_env(home), Settings())
        paths = {e.path for e in entries}

        assert home / ".cache/google-chrome" in paths
        assert home / ".config/Code/GPUCache" in paths
        assert jetbrains / "PyCharm2023.3" in paths
        assert jetbrains / "PyCharm2024.1" / "caches" in paths
        assert not any("Library" in str(p) for p in paths)

    def test_macos_discovery_includes_qq(self, home, isolate_settings):
        qq = home / "Library/Containers/com.tencent.qq/Data/Library/Application Support/QQ"
        (qq / "nt_qq_1" / "nt_data").mkdir(parents=True)

        paths = {e.path for e in discover(_env(home, "darwin"), Settings())}

        assert qq / "nt_qq_1" / "nt_data" / "log" in paths
        assert home / "Library/Logs/JetBrains" in paths

    def test_settings_extend_and_override(self, home, isolate_settings):
        project = home / "work" / "app"
        (project / "node_modules" / "pkg").mkdir(parents=True)
        old = time.time() - 5 * 24 * 60 * 60
        for path in (project / "node_modules" / "pkg", project / "node_modules"):
            os.utime(path, (old, old))
        (home / ".cache" / "JetBrains" / "Foo1.0").mkdir(parents=True)
        (home / ".cache" / "JetBrains" / "Foo2.0").mkdir()

        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(
            json.dumps(
                {
                    "catalog": {"extra": [{"path": "~/scratch", "description": "Scratch"}, {"nope": 1}]},
                    "stale": {"threshold_days": 2, "projects": [{"path": "work", "targets": ["node_modules"]}]},
                    "jetbrains": {"enabled": False},
                }
            )
        )

        entries = discover(_env(home), Settings())
        by_path = {e.path: e for e in entries}

        assert by_path[home / "scratch"].description == "Scratch"
        assert by_path[project / "node_modules"].description == "Unused node_modules in app"
        assert not any("JetBrains" in str(p) for p in by_path)

    def test_unlistable_projects_dir_is_fatal(self, home, isolate_settings):
        (home / "IdeaProjects").write_text("not a directory")

        with pytest.raises(OSError):
            discover(_env(home), Settings())

    def test_string_targets_are_rejected(self, home, isolate_settings, caplog):
        (home / "work" / "app" / "build").mkdir(parents=True)
        isolate_settings.parent.mkdir(parents=True)
        isolate_settings.write_text(
            json.dumps({"stale": {"threshold_days": 0, "projects": [{"path": "work", "targets": "build"}]}})
        )

        entries = discover(_env(home), Settings())

        assert not any("work" in str(e.path) for e in entries)
        assert "Ignoring malformed stale.projects item" in caplog.text

    def test_no_flat_linux_jetbrains_logs_entry(self):
        assert not any(t.relative_path.startswith(".cache/JetBrains") for t in BUILTIN_CATALOG)
