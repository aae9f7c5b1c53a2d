"""Result models for verification and reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal, Optional

from gdrivesync.errors import ClassifiedError

from .record import RecordStatus

ErrorStage = Literal["verify", "update"]


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of checking one record against the remote store."""

    record_id: str
    existed: bool
    old_status: RecordStatus
    new_status: RecordStatus
    error: Optional[ClassifiedError] = None

    @property
    def changed(self) -> bool:
        return self.new_status is not self.old_status


@dataclass(frozen=True, slots=True)
class RecordError:
    """A per-record failure captured during reconciliation."""

    record_id: str
    stage: ErrorStage
    error: ClassifiedError


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Aggregate result of one sync_with_remote run."""

    total: int = 0
    verified: int = 0
    missing: int = 0
    errored: int = 0
    updated_ids: tuple[str, ...] = ()
    missing_ids: tuple[str, ...] = ()
    errors: tuple[RecordError, ...] = ()
    duration: timedelta = field(default_factory=timedelta)
    offline: bool = False
