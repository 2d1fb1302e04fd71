"""Interactive terminal front end for the selection engine."""

from __future__ import annotations

import enum
import shutil
from typing import Callable, Sequence

import click

from reclaim.core.cleaner import delete_entries
from reclaim.core.selection import SelectionEngine
from reclaim.core.view_model import FrameView, RowView, project
from reclaim.models.candidate import CandidateEntry
from reclaim.models.clean_result import CleanResult
from reclaim.utils import bytes_to_human

_CONFIRM_PREVIEW = 10


class Key(enum.Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    TOGGLE = "toggle"
    SELECT_ALL = "select_all"
    DESELECT_ALL = "deselect_all"
    TOGGLE_SMALL = "toggle_small"
    ENTER = "enter"
    QUIT = "quit"
    OTHER = "other"


class Action(enum.Enum):
    CONTINUE = "continue"
    CONFIRM = "confirm"
    QUIT = "quit"


_KEYS: dict[str, Key] = {
    # ANSI terminals
    "\x1b[A": Key.UP,
    "\x1bOA": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1bOB": Key.DOWN,
    "\x1b[5~": Key.PAGE_UP,
    "\x1b[6~": Key.PAGE_DOWN,
    # Windows console
    "\xe0H": Key.UP,
    "\x00H": Key.UP,
    "\xe0P": Key.DOWN,
    "\x00P": Key.DOWN,
    "\xe0I": Key.PAGE_UP,
    "\x00I": Key.PAGE_UP,
    "\xe0Q": Key.PAGE_DOWN,
    "\x00Q": Key.PAGE_DOWN,
    " ": Key.TOGGLE,
    "\x01": Key.SELECT_ALL,
    "\x04": Key.DESELECT_ALL,
    "s": Key.TOGGLE_SMALL,
    "S": Key.TOGGLE_SMALL,
    "\r": Key.ENTER,
    "\n": Key.ENTER,
    "\x1b": Key.QUIT,
    "q": Key.QUIT,
}


def decode_key(raw: str) -> Key:
    """Map a raw ``click.getchar()`` sequence to a :class:`Key`."""
    return _KEYS.get(raw, Key.OTHER)


def read_key(getchar: Callable[[], str] = click.getchar) -> Key:
    """Block until the next key press."""
    try:
        return decode_key(getchar())
    except EOFError:
        # click reports Ctrl+D as end of input on POSIX terminals
        return Key.DESELECT_ALL
    except KeyboardInterrupt:
        return Key.QUIT


def dispatch(engine: SelectionEngine, key: Key) -> Action:
    """Apply *key* to the engine and tell the loop what to do next."""
    match key:
        case Key.UP:
            engine.move_up()
        case Key.DOWN:
            engine.move_down()
        case Key.PAGE_UP:
            engine.page_up()
        case Key.PAGE_DOWN:
            engine.page_down()
        case Key.TOGGLE:
            engine.toggle_current()
        case Key.SELECT_ALL:
            engine.select_all()
        case Key.DESELECT_ALL:
            engine.deselect_all()
        case Key.TOGGLE_SMALL:
            engine.toggle_small_files()
        case Key.ENTER:
            return Action.CONFIRM
        case Key.QUIT:
            return Action.QUIT
    return Action.CONTINUE


# ── drawing ──────────────────────────────────────────────────────────────

def _format_row(row: RowView, frame: FrameView) -> str:
    if row.selected:
        checkbox = click.style("✓", fg="green")
    elif row.small:
        checkbox = click.style("□", fg="bright_black")
    else:
        checkbox = click.style("□", fg="white")

    desc = row.description.ljust(frame.desc_width)
    if row.current:
        desc = click.style(desc, fg="black", bg="white")
    elif row.small:
        desc = click.style(desc, fg="bright_black")
    else:
        desc = click.style(desc, fg="white")

    size = click.style(row.size.ljust(frame.size_width), fg="yellow")
    path = click.style(row.path.ljust(frame.path_width), fg="cyan") if row.path else ""
    return f"{checkbox} {desc} {size} {path}"


def render_frame(frame: FrameView, page_size: int) -> str:
    """Render a frame into styled text, status lines pinned to the bottom."""
    lines = [
        click.style("Reclaim - disk cleanup", fg="cyan", bold=True),
        click.style(
            "Arrows: move  Space: select  Enter: delete  S: toggle small entries  Esc/q: quit",
            fg="bright_black",
        ),
    ]
    lines.extend(_format_row(row, frame) for row in frame.rows)
    lines.extend("" for _ in range(page_size - len(frame.rows)))
    lines.append(click.style(frame.filter_text, fg="bright_black"))
    lines.append(click.style(frame.status_text, fg="blue", bold=True))
    return "\n".join(lines)


def _sync_terminal_size(engine: SelectionEngine) -> None:
    size = shutil.get_terminal_size()
    if (size.columns, size.lines) != (engine.viewport_width, engine.viewport_height):
        engine.resize(size.columns, size.lines)


def draw(engine: SelectionEngine) -> None:
    click.clear()
    click.echo(render_frame(project(engine), engine.page_size), nl=False)


# ── confirmation & cleanup ───────────────────────────────────────────────

def render_confirmation(entries: Sequence[CandidateEntry]) -> str:
    total = sum(e.size or 0 for e in entries)
    lines = [
        click.style("Confirm deletion", fg="red", bold=True),
        "",
        f"About to delete {len(entries)} entries, total size: {bytes_to_human(total)}",
        click.style("Entries to delete:", fg="yellow"),
    ]
    lines.extend(f"• {e.description}" for e in entries[:_CONFIRM_PREVIEW])
    if len(entries) > _CONFIRM_PREVIEW:
        lines.append(f"... and {len(entries) - _CONFIRM_PREVIEW} more")
    lines.extend(
        [
            "",
            click.style("Really delete these directories? This cannot be undone.", fg="red", bold=True),
            click.style("Y/Enter: delete    N/Esc: cancel", fg="bright_black"),
        ]
    )
    return "\n".join(lines)


def confirm(entries: Sequence[CandidateEntry], getchar: Callable[[], str] = click.getchar) -> bool:
    """Show the confirmation dialog and wait for a yes or no."""
    click.clear()
    click.echo(render_confirmation(entries))
    while True:
        try:
            raw = getchar()
        except (EOFError, KeyboardInterrupt):
            return False
        if raw in ("y", "Y", "\r", "\n"):
            return True
        if raw in ("n", "N", "\x1b"):
            return False


def _report_progress(index: int, total: int, entry: CandidateEntry, error: str | None) -> None:
    percent = (index + 1) * 100 // total
    prefix = f"[{percent:3d}%] {index + 1}/{total}"
    if error is None:
        click.echo(f"{prefix} {click.style('✓ Removed:', fg='green')} {entry.description}")
    else:
        click.echo(f"{prefix} {click.style('✗ Failed:', fg='red')} {entry.description} - {error}")


def execute_cleanup(entries: Sequence[CandidateEntry]) -> CleanResult:
    """Delete *entries* while printing a line per item, then a summary."""
    click.clear()
    click.echo(click.style("Cleaning...", fg="green", bold=True) + "\n")

    result = delete_entries(entries, on_progress=_report_progress)

    click.echo(
        "\n"
        + click.style(
            f"Done! Removed: {result.success_count}, failed: {result.error_count}, "
            f"freed {bytes_to_human(result.freed_bytes)}",
            bold=True,
        )
    )
    return result


def run(engine: SelectionEngine, getchar: Callable[[], str] = click.getchar) -> CleanResult | None:
    """Drive the interactive loop until the user quits or confirms a deletion.

    Returns the deletion outcome, or None when nothing was deleted.
    """
    while True:
        _sync_terminal_size(engine)
        draw(engine)
        action = dispatch(engine, read_key(getchar))

        if action is Action.QUIT:
            click.clear()
            return None
        if action is Action.CONFIRM:
            selected = engine.selected_entries()
            if not selected:
                continue
            if confirm(selected, getchar):
                result = execute_cleanup(selected)
                click.echo("\nPress any key to exit...")
                try:
                    getchar()
                except (EOFError, KeyboardInterrupt):
                    pass
                return result
