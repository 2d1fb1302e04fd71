"""Shared utility functions."""

from __future__ import annotations

import os
from pathlib import Path

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024
TIB = GIB * 1024


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string using binary units."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes < KIB:
        return f"{size_bytes} B"

    for unit, factor in (("KiB", KIB), ("MiB", MIB), ("GiB", GIB)):
        if size_bytes < factor * 1024:
            return f"{size_bytes / factor:.2f} {unit}"
    return f"{size_bytes / TIB:.2f} TiB"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
