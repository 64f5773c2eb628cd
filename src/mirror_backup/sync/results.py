"""Outcome types for backup runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class JobStatus(Enum):
    """Outcome of a single entry operation or of a whole run."""
    SUCCESS = 0
    FAILURE = 1


@dataclass
class RunSummary:
    """Counters collected while a run walks the trees."""
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    marked_deleted: int = 0
    deleted: int = 0
    skipped: int = 0
    bytes_copied: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def files_processed(self) -> int:
        return self.created + self.updated + self.unchanged + self.skipped

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
