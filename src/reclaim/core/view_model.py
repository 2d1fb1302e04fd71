"""Render-ready projection of the selection engine.

Nothing here knows about colours or the terminal; ``reclaim.tui`` turns
a :class:`FrameView` into styled output.
"""

from __future__ import annotations

from dataclasses import dataclass

from reclaim.core.selection import SelectionEngine, is_small
from reclaim.utils import bytes_to_human

# Checkbox, separators and padding around the three columns.
_ROW_CHROME = 10
_ELLIPSIS = "..."
_MIN_PATH_WIDTH = 7


@dataclass(frozen=True, slots=True)
class RowView:
    """One visible line of the entry list."""

    path: str
    description: str
    size: str
    selected: bool
    current: bool
    small: bool


@dataclass(frozen=True, slots=True)
class FrameView:
    """Everything a single frame needs to draw."""

    rows: tuple[RowView, ...]
    desc_width: int
    size_width: int
    path_width: int
    start: int
    end: int
    visible_count: int
    total_count: int
    hidden_count: int
    show_small_files: bool
    scrollable: bool
    selected_count: int
    total_selected_size: int

    @property
    def scroll_text(self) -> str:
        if not self.scrollable:
            return ""
        return f"Items {self.start + 1}-{self.end} of {self.visible_count} visible"

    @property
    def filter_text(self) -> str:
        if self.show_small_files:
            return "Showing all entries"
        return f"Hiding entries under 10 MiB ({self.hidden_count} hidden)"

    @property
    def status_text(self) -> str:
        parts = [self.scroll_text] if self.scrollable else []
        parts.append(f"Selected: {self.selected_count}, total size: {bytes_to_human(self.total_selected_size)}")
        return " ".join(parts) + " | Ctrl+A: select all  Ctrl+D: deselect all  S: toggle small entries"


def truncate_path(path: str, width: int) -> str:
    """Shorten *path* from the left so it fits in *width* columns."""
    if width <= _MIN_PATH_WIDTH:
        return ""
    if len(path) <= width:
        return path
    keep = max(width - len(_ELLIPSIS), 0)
    return _ELLIPSIS + path[len(path) - keep:]


def project(engine: SelectionEngine) -> FrameView:
    """Project the current engine state into a :class:`FrameView`."""
    visible = engine.visible_entries()
    start = min(engine.scroll_offset, len(visible))
    end = min(start + engine.page_size, len(visible))
    window = visible[start:end]

    sizes = [bytes_to_human(entry.size or 0) for _, entry in window]
    desc_width = max((len(entry.description) for _, entry in window), default=0)
    size_width = max((len(s) for s in sizes), default=0)
    path_width = max(engine.viewport_width - desc_width - size_width - _ROW_CHROME, 0)

    rows = tuple(
        RowView(
            path=truncate_path(str(entry.path), path_width),
            description=entry.description,
            size=size,
            selected=entry.selected,
            current=start + offset == engine.cursor,
            small=is_small(entry),
        )
        for offset, ((_, entry), size) in enumerate(zip(window, sizes))
    )

    total = len(engine.entries)
    return FrameView(
        rows=rows,
        desc_width=desc_width,
        size_width=size_width,
        path_width=path_width,
        start=start,
        end=end,
        visible_count=len(visible),
        total_count=total,
        hidden_count=0 if engine.show_small_files else total - len(visible),
        show_small_files=engine.show_small_files,
        scrollable=len(visible) > engine.page_size,
        selected_count=engine.selected_count,
        total_selected_size=engine.total_selected_size,
    )
