"""
Module: exportplan
Purpose: Export plan dataclass definitions.
"""

from dataclasses import dataclass, field
from typing import List

from .payload import ImagePayload


@dataclass(frozen=True)
class ExportEntry:
    """Archive-relative path paired with the payload written there."""
    path: str
    payload: ImagePayload


@dataclass
class ExportPlan:
    """
    Represents a full archive layout: the archive name and every
    (path, payload) pair in write order.
    """

    archive_name: str
    entries: List[ExportEntry] = field(default_factory=list)
    group_count: int = 0

    @property
    def total_size(self) -> int:
        return sum(entry.payload.size for entry in self.entries)

    @property
    def paths(self) -> List[str]:
        return [entry.path for entry in self.entries]
