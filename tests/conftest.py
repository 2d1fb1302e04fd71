"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from reclaim.models.candidate import CandidateEntry
from reclaim.settings import Settings
from reclaim.utils import MIB


@pytest.fixture
def make_entry():
    """Factory for sized entries that never touch the filesystem."""

    def _make(name: str, size_mib: float, selected: bool = False) -> CandidateEntry:
        return CandidateEntry(
            path=Path("/tmp/reclaim-test") / name,
            description=name,
            size=int(size_mib * MIB),
            selected=selected,
        )

    return _make


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Point settings at an empty temp config directory."""
    config = tmp_path / "config"
    config.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    monkeypatch.setattr(Settings, "_instance", None)
    return config / "reclaim" / "settings.json"
