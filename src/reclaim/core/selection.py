"""Selection state for the interactive candidate list."""

from __future__ import annotations

from reclaim.models.candidate import CandidateEntry
from reclaim.utils import MIB

SMALL_ENTRY_THRESHOLD = 10 * MIB

# Rows taken by the title, the key help line and the two status lines.
RESERVED_ROWS = 4


def is_small(entry: CandidateEntry) -> bool:
    """True for entries below the small-entry threshold."""
    return (entry.size or 0) < SMALL_ENTRY_THRESHOLD


class SelectionEngine:
    """Filterable, paginated list of candidate entries with selection stats.

    The cursor and scroll offset index into the *visible* entries, i.e.
    after the small-entry filter is applied.  Selection flags live on the
    entries themselves and the two aggregates always mirror them.
    The list is expected to arrive sorted; the engine never reorders it.
    """

    def __init__(self, entries: list[CandidateEntry], width: int = 80, height: int = 24) -> None:
        self.entries = entries
        self.cursor = 0
        self.scroll_offset = 0
        self.viewport_width = width
        self.viewport_height = height
        self.show_small_files = False
        self.total_selected_size = 0
        self.selected_count = 0
        self._recount()

    # -- Queries --

    @property
    def page_size(self) -> int:
        """Number of entry rows that fit in the viewport."""
        return max(self.viewport_height - RESERVED_ROWS, 0)

    def visible_entries(self) -> list[tuple[int, CandidateEntry]]:
        """Return ``(underlying_index, entry)`` for every navigable entry."""
        if self.show_small_files:
            return list(enumerate(self.entries))
        return [(i, e) for i, e in enumerate(self.entries) if not is_small(e)]

    def selected_entries(self) -> tuple[CandidateEntry, ...]:
        """Return every selected entry in list order, visible or not."""
        return tuple(e for e in self.entries if e.selected)

    def current_entry(self) -> CandidateEntry | None:
        """Return the entry under the cursor, if any."""
        visible = self.visible_entries()
        if 0 <= self.cursor < len(visible):
            return visible[self.cursor][1]
        return None

    # -- Navigation --

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            if self.cursor < self.scroll_offset:
                self.scroll_offset = self.cursor

    def move_down(self) -> None:
        if self.cursor < len(self.visible_entries()) - 1:
            self.cursor += 1
            self._scroll_to_cursor()

    def page_up(self) -> None:
        page = self.page_size
        self.cursor = max(self.cursor - page, 0)
        self.scroll_offset = max(self.scroll_offset - page, 0)

    def page_down(self) -> None:
        last = max(len(self.visible_entries()) - 1, 0)
        self.cursor = min(self.cursor + self.page_size, last)
        self._scroll_to_cursor()

    def _scroll_to_cursor(self) -> None:
        """Scroll down just far enough to keep the cursor on screen."""
        page = self.page_size
        if page and self.cursor >= self.scroll_offset + page:
            self.scroll_offset = self.cursor - page + 1

    def resize(self, width: int, height: int) -> None:
        """Apply new terminal dimensions, keeping the cursor on screen."""
        self.viewport_width = width
        self.viewport_height = height
        if self.cursor < self.scroll_offset:
            self.scroll_offset = self.cursor
        self._scroll_to_cursor()

    # -- Selection --

    def toggle_current(self) -> None:
        """Flip the selection of the entry under the cursor."""
        visible = self.visible_entries()
        if not 0 <= self.cursor < len(visible):
            return
        entry = self.entries[visible[self.cursor][0]]
        entry.selected = not entry.selected
        if entry.size is None:
            return
        if entry.selected:
            self.total_selected_size += entry.size
            self.selected_count += 1
        else:
            self.total_selected_size = max(self.total_selected_size - entry.size, 0)
            self.selected_count = max(self.selected_count - 1, 0)

    def select_all(self) -> None:
        """Select every entry at or above the small-entry threshold.

        Small entries are never bulk-selected, whatever the filter shows.
        """
        for entry in self.entries:
            if not is_small(entry):
                entry.selected = True
        self._recount()

    def deselect_all(self) -> None:
        for entry in self.entries:
            entry.selected = False
        self._recount()

    def toggle_small_files(self) -> None:
        """Show or hide small entries and jump back to the top."""
        self.show_small_files = not self.show_small_files
        self.cursor = 0
        self.scroll_offset = 0

    def _recount(self) -> None:
        """Recompute both aggregates from the selection flags."""
        chosen = [e for e in self.entries if e.selected and e.size is not None]
        self.total_selected_size = sum(e.size or 0 for e in chosen)
        self.selected_count = len(chosen)
