"""Data model for catalog records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum


class RecordStatus(str, Enum):
    UPLOADING = "uploading"
    ACTIVE = "active"
    EXPIRED = "expired"
    DELETED = "deleted"
    ERROR = "error"


# Statuses that a sweep or a reconciliation only ever moves records into.
TERMINAL_LEANING: frozenset[RecordStatus] = frozenset(
    {RecordStatus.EXPIRED, RecordStatus.DELETED}
)

# Records in these statuses are not verified against the remote store.
SKIP_VERIFICATION: frozenset[RecordStatus] = frozenset(
    {RecordStatus.DELETED, RecordStatus.ERROR}
)


def is_status_change_allowed(old: RecordStatus, new: RecordStatus) -> bool:
    """
    Status only moves forward.

    Nothing returns to UPLOADING, and ACTIVE is only entered from UPLOADING.
    EXPIRED <-> DELETED stays allowed: concurrent sweeps and reconciliations
    settle last-write-wins.
    """
    if old is new:
        return True
    if new is RecordStatus.UPLOADING:
        return False
    if new is RecordStatus.ACTIVE and old is not RecordStatus.UPLOADING:
        return False
    return True


@dataclass(slots=True)
class CatalogRecord:
    """
    Local belief about one uploaded file.

    Notes:
        - remote_key is the Drive file id of the uploaded object.
        - created_at / expires_at are tz-aware UTC datetimes.
    """

    record_id: str
    name: str
    local_path: str
    size: int
    created_at: datetime
    expires_at: datetime
    remote_key: str
    status: RecordStatus = RecordStatus.UPLOADING

    def copy(self) -> CatalogRecord:
        return replace(self)
