"""Candidate entry dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True)
class CandidateEntry:
    """Single directory tree that can be deleted.

    ``size`` stays ``None`` until the scanner has walked the tree.
    ``selected`` belongs to the selection engine; nothing else flips it.
    ``score`` is informational: catalog paths carry 1.0, heuristic
    matches 0.8.
    """

    path: Path
    description: str
    score: float = 1.0
    size: int | None = None
    selected: bool = False

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        if not self.path.is_absolute():
            raise ValueError(f"Candidate path must be absolute: {self.path}")
