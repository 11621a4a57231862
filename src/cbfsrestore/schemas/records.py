"""
Pydantic schemas for the objects flowing through a restore run.

ArchiveRecord mirrors one JSON object of the backup archive. Its ``Meta``
document is kept exactly as decoded (key order included) and is only ever
re-serialized for the restore request.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ArchiveRecord(BaseModel):
    """One file entry of a backup archive."""
    path: str = Field(default="", alias="Path")
    meta: Any = Field(default=None, alias="Meta")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }


class OutcomeStatus(str, Enum):
    """Result tags of a single restore submission."""
    SUCCESS = "success"
    FAILED = "failed"


class RestoreOutcome(BaseModel):
    """
    Per-record result of a restore submission.

    Built through :meth:`success` and :meth:`failed`; ``reason`` is only set
    for failures.
    """
    status: OutcomeStatus
    reason: Optional[str] = None

    model_config = {"frozen": True}

    @classmethod
    def success(cls) -> "RestoreOutcome":
        return cls(status=OutcomeStatus.SUCCESS)

    @classmethod
    def failed(cls, reason: str) -> "RestoreOutcome":
        return cls(status=OutcomeStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


class RunSummary(BaseModel):
    """Totals of a completed restore run."""
    records_read: int = 0
    matched: int = 0
    dispatched: int = 0
    elapsed: float = 0.0
    dry_run: bool = False

    model_config = {"frozen": True}

    def describe(self) -> str:
        return f"Restored {self.matched} files in {self.elapsed:.3f}s"
