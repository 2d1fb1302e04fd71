"""CLI interface for Reclaim."""

from __future__ import annotations

import json
import logging
import shutil
import sys
import time

import click

from reclaim import tui
from reclaim.core.catalog import discover
from reclaim.core.environment import Environment
from reclaim.core.scanner import size_entries
from reclaim.core.selection import SelectionEngine, is_small
from reclaim.models.candidate import CandidateEntry
from reclaim.settings import Settings
from reclaim.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _on_scan_progress(index: int, total: int, entry: CandidateEntry) -> None:
    percent = (index + 1) * 100 // total
    click.echo(
        f"\r\x1b[K{click.style(f'Scanning [{index + 1}/{total}] {percent}% - {entry.description}', fg='green')}",
        nl=False,
        err=True,
    )


def _collect(env: Environment, show_progress: bool = True) -> list[CandidateEntry]:
    """Discover candidate entries and size them, largest first."""
    started = time.monotonic()
    try:
        candidates = discover(env, Settings.instance())
    except OSError as e:
        raise click.ClickException(f"Discovery failed: {e}") from e
    log.info("Discovery took %s", format_elapsed(time.monotonic() - started))

    entries = size_entries(candidates, on_progress=_on_scan_progress if show_progress else None)
    if show_progress and candidates:
        click.echo(err=True)
    return entries


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """Reclaim: find and delete cache, log and stale build directories.

    Without a subcommand, runs the interactive cleaner.
    """
    _setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        ctx.invoke(clean)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
def clean() -> None:
    """Scan, pick entries interactively, and delete them."""
    env = Environment.detect()
    click.echo(f"Current user: {env.username}")

    entries = _collect(env)
    if not entries:
        click.echo("Nothing to clean.")
        return

    width, height = shutil.get_terminal_size()
    engine = SelectionEngine(entries, width=width, height=height)
    result = tui.run(engine)

    if result is not None and not result.ok:
        sys.exit(1)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--all", "show_all", is_flag=True, help="Include entries under 10 MiB")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(show_all: bool, as_json: bool) -> None:
    """Scan for cleanable directories (preview only, never deletes)."""
    env = Environment.detect()
    entries = _collect(env, show_progress=not as_json)
    if not show_all:
        entries = [e for e in entries if not is_small(e)]

    if as_json:
        data = [
            {
                "path": str(e.path),
                "description": e.description,
                "score": e.score,
                "size_bytes": e.size,
            }
            for e in entries
        ]
        click.echo(json.dumps(data, indent=2))
        return

    if not entries:
        click.echo("Nothing to clean.")
        return

    for entry in entries:
        click.echo(
            f"  {click.style('✓', fg='green')} {entry.description:35s} — "
            f"{click.style(bytes_to_human(entry.size or 0), fg='green', bold=True)}  "
            f"{click.style(str(entry.path), fg='cyan')}"
        )

    total = sum(e.size or 0 for e in entries)
    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")
