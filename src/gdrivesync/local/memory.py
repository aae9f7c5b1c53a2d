"""In-memory CatalogStore (thread-safe; records are copied in and out)."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Iterable, Optional

from gdrivesync.errors import DuplicateRecordError, InvalidStatusTransition, RecordNotFoundError
from gdrivesync.models import CatalogRecord, RecordStatus, is_status_change_allowed
from gdrivesync.util.time import ensure_aware

logger = logging.getLogger(__name__)


class InMemoryCatalogStore:
    """
    Catalog records keyed by record_id plus a string config table.

    Readers always get copies, so callers cannot mutate stored state behind
    the store's back.
    """

    def __init__(self, records: Optional[Iterable[CatalogRecord]] = None) -> None:
        self._lock = threading.Lock()
        self._records_by_id: dict[str, CatalogRecord] = {}
        self._config: dict[str, str] = {}
        for record in records or ():
            self.add_record(record)

    # ----------------------------
    # Records
    # ----------------------------
    def add_record(self, record: CatalogRecord) -> None:
        """Insert a new record. Creation happens upstream of sync/sweep."""
        ensure_aware(record.created_at)
        ensure_aware(record.expires_at)
        with self._lock:
            if record.record_id in self._records_by_id:
                raise DuplicateRecordError(
                    f"record already exists: {record.record_id}",
                    details={"record_id": record.record_id},
                )
            self._records_by_id[record.record_id] = record.copy()

    def get_record(self, record_id: str) -> CatalogRecord:
        with self._lock:
            return self._require(record_id).copy()

    def list_records(self) -> list[CatalogRecord]:
        with self._lock:
            records = [r.copy() for r in self._records_by_id.values()]
        records.sort(key=lambda r: (r.created_at, r.record_id))
        return records

    def update_status(self, record_id: str, status: RecordStatus) -> None:
        with self._lock:
            record = self._require(record_id)
            if not is_status_change_allowed(record.status, status):
                raise InvalidStatusTransition(
                    f"cannot move record {record_id} from {record.status.value} "
                    f"to {status.value}",
                    details={
                        "record_id": record_id,
                        "old_status": record.status.value,
                        "new_status": status.value,
                    },
                )
            old = record.status
            record.status = status
        logger.debug("Record %s status %s -> %s", record_id, old.value, status.value)

    def update_expiration(self, record_id: str, expires_at: datetime) -> None:
        expires_at = ensure_aware(expires_at)
        with self._lock:
            self._require(record_id).expires_at = expires_at

    def delete_record(self, record_id: str) -> None:
        with self._lock:
            self._require(record_id)
            del self._records_by_id[record_id]

    # ----------------------------
    # Config
    # ----------------------------
    def save_config_value(self, key: str, value: str) -> None:
        with self._lock:
            self._config[key] = value

    def get_config_value(self, key: str) -> str:
        with self._lock:
            if key not in self._config:
                raise RecordNotFoundError(
                    f"config key not set: {key}",
                    details={"key": key},
                )
            return self._config[key]

    # ----------------------------
    # Internals
    # ----------------------------
    def _require(self, record_id: str) -> CatalogRecord:
        record = self._records_by_id.get(record_id)
        if record is None:
            raise RecordNotFoundError(
                f"record not found: {record_id}",
                details={"record_id": record_id},
            )
        return record
