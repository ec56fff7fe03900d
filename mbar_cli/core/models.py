"""Lightweight data models used across commands."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class BatchStatus(str, Enum):
    """Outcome of one measurement batch."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    EMPTY = "empty"


@dataclass(frozen=True)
class BatchResult:
    """Status and item count reported by a measurement batch."""

    status: BatchStatus
    processed: int = 0
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "processed": self.processed, "total": self.total}


@dataclass(frozen=True)
class MediaItem:
    """An attachment in the host media library."""

    id: int
    width: Optional[int] = None
    height: Optional[int] = None
    mime_type: str = "image/jpeg"
    status: str = "inherit"
    date: str = ""
    title: str = ""
    ratio: Optional[Decimal] = None

