"""Reclaim data models."""

from reclaim.models.candidate import CandidateEntry
from reclaim.models.clean_result import CleanFailure, CleanResult

__all__ = [
    "CandidateEntry",
    "CleanFailure",
    "CleanResult",
]
