"""Deletion result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

from reclaim.models.candidate import CandidateEntry


@dataclass(frozen=True, slots=True)
class CleanFailure:
    """A single entry that could not be removed."""

    entry: CandidateEntry
    message: str


@dataclass(slots=True)
class CleanResult:
    """Result of a deletion run."""

    success_count: int = 0
    error_count: int = 0
    freed_bytes: int = 0
    failures: list[CleanFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every entry was removed (or was already gone)."""
        return self.error_count == 0
