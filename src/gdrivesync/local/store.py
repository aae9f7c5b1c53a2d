"""Local catalog collaborator contract."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from gdrivesync.models import CatalogRecord, RecordStatus

LAST_SYNC_TIME_KEY = "last_sync_time"
OFFLINE_MODE_KEY = "offline_mode"


@runtime_checkable
class CatalogStore(Protocol):
    """
    Storage for catalog records and string config values.

    Missing records and missing config keys raise RecordNotFoundError so
    callers can tell "absent" apart from other failures.
    """

    def get_record(self, record_id: str) -> CatalogRecord: ...

    def list_records(self) -> list[CatalogRecord]: ...

    def update_status(self, record_id: str, status: RecordStatus) -> None: ...

    def update_expiration(self, record_id: str, expires_at: datetime) -> None: ...

    def save_config_value(self, key: str, value: str) -> None: ...

    def get_config_value(self, key: str) -> str: ...
