"""Deletion of selected candidate entries."""

from __future__ import annotations

import logging
import shutil
from typing import Callable, Sequence

from reclaim.models.candidate import CandidateEntry
from reclaim.models.clean_result import CleanFailure, CleanResult

log = logging.getLogger(__name__)

# (index, total, entry, error message or None on success)
CleanProgressCallback = Callable[[int, int, CandidateEntry, "str | None"], None]


def delete_entries(
    entries: Sequence[CandidateEntry],
    on_progress: CleanProgressCallback | None = None,
) -> CleanResult:
    """Recursively remove every entry's directory, in order.

    A symlinked entry is removed as a link.  A path that is already gone
    counts as removed.  Any other failure is
    recorded and the batch moves on to the next entry.  Deletion is
    permanent; there is no retry or rollback.
    """
    snapshot = tuple(entries)
    result = CleanResult()

    for index, entry in enumerate(snapshot):
        error: str | None = None
        try:
            if entry.path.is_symlink():
                # the link is the entry, never its target
                entry.path.unlink()
            else:
                shutil.rmtree(entry.path)
        except FileNotFoundError:
            log.debug("Already gone: %s", entry.path)
        except OSError as e:
            error = str(e)

        if error is None:
            result.success_count += 1
            result.freed_bytes += entry.size or 0
            log.info("Removed %s (%s)", entry.path, entry.description)
        else:
            result.error_count += 1
            result.failures.append(CleanFailure(entry=entry, message=error))
            log.info("Failed to remove %s (%s): %s", entry.path, entry.description, error)

        if on_progress:
            on_progress(index, len(snapshot), entry, error)

    return result
