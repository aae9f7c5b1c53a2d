"""Public model exports for gdrivesync."""

from __future__ import annotations

from .record import (
    SKIP_VERIFICATION,
    TERMINAL_LEANING,
    CatalogRecord,
    RecordStatus,
    is_status_change_allowed,
)
from .results import ErrorStage, RecordError, SyncOutcome, VerificationResult

__all__ = [
    "CatalogRecord",
    "RecordStatus",
    "TERMINAL_LEANING",
    "SKIP_VERIFICATION",
    "is_status_change_allowed",
    "ErrorStage",
    "RecordError",
    "SyncOutcome",
    "VerificationResult",
]
