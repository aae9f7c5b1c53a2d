"""Lifecycle sweep: promote records past their expiration to EXPIRED."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from gdrivesync.config import SyncSettings
from gdrivesync.errors import ExpirationCleanupError, classify
from gdrivesync.local.store import CatalogStore
from gdrivesync.local.validators import validate_positive_duration, validate_record_id
from gdrivesync.models import CatalogRecord, RecordStatus, TERMINAL_LEANING
from gdrivesync.util.context import SyncContext
from gdrivesync.util.time import is_due, now_utc, remaining_until, to_rfc3339

from .periodic import PeriodicTask

logger = logging.getLogger(__name__)


class LifecycleSweeper:
    """
    Local-only expiration engine (no network access).

    A record whose expiration equals "now" exactly is already expired: every
    check here uses before-or-equal semantics.
    """

    def __init__(
        self,
        store: CatalogStore,
        *,
        settings: Optional[SyncSettings] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._store = store
        self._settings = settings or SyncSettings()
        self._clock = clock

    def start_monitor(
        self,
        ctx: Optional[SyncContext] = None,
        *,
        interval_sec: Optional[float] = None,
    ) -> PeriodicTask:
        """
        Run cleanup_expired_files on a background PeriodicTask.

        interval_sec defaults to settings.sweep_interval_sec. The task stops
        when ctx is cancelled or when the returned task is stopped.
        """
        interval = interval_sec if interval_sec is not None else self._settings.sweep_interval_sec
        task = PeriodicTask("expiration-sweep", self.cleanup_expired_files, interval)
        task.start(ctx)
        return task

    def check_expirations(self) -> list[CatalogRecord]:
        """Records that are due and not yet EXPIRED/DELETED. Read only."""
        now = self._clock()
        due = [
            record
            for record in self._store.list_records()
            if record.status not in TERMINAL_LEANING and is_due(record.expires_at, now)
        ]
        logger.info("Found %d expired records", len(due))
        return due

    def cleanup_expired_files(self) -> list[str]:
        """
        Mark every due record EXPIRED.

        Individual failures do not stop the sweep.

        Returns:
            Ids of records that were marked EXPIRED (empty if nothing was due).

        Raises:
            ExpirationCleanupError: if at least one update failed; details
                ["failures"] holds every per-record failure message.
        """
        due = self.check_expirations()
        if not due:
            logger.debug("No expired records to clean up")
            return []

        cleaned: list[str] = []
        failures: dict[str, str] = {}
        for record in due:
            try:
                self._store.update_status(record.record_id, RecordStatus.EXPIRED)
            except Exception as exc:
                classified = classify(exc)
                failures[record.record_id] = (
                    f"failed to update status for record {record.record_id}: {exc}"
                )
                logger.error(
                    "Failed to expire record %s (%s): %s",
                    record.record_id,
                    classified.code.value,
                    exc,
                )
                continue
            cleaned.append(record.record_id)
            logger.info("Expired record %s (%s)", record.record_id, record.name)

        logger.info("Cleaned up %d expired records", len(cleaned))
        if failures:
            raise ExpirationCleanupError(
                f"cleanup completed with errors: {sorted(failures.values())}",
                details={"failures": failures, "cleaned": cleaned},
            )
        return cleaned

    def is_file_expired(self, record_id: str) -> bool:
        validate_record_id(record_id)
        record = self._store.get_record(record_id)
        return is_due(record.expires_at, self._clock())

    def get_time_until_expiration(self, record_id: str) -> timedelta:
        """Time left before expiration; zero once expired."""
        validate_record_id(record_id)
        record = self._store.get_record(record_id)
        return remaining_until(record.expires_at, self._clock())

    def set_expiration(self, record_id: str, duration: timedelta) -> None:
        """
        Expire the record `duration` from now.

        Raises:
            ClassifiedError: INVALID_INPUT for an empty id or non-positive duration.
            RecordNotFoundError: if the record does not exist.
        """
        validate_record_id(record_id)
        validate_positive_duration(duration)

        self._store.get_record(record_id)
        expires_at = self._clock() + duration
        self._store.update_expiration(record_id, expires_at)
        logger.info("Updated expiration for record %s to %s", record_id, to_rfc3339(expires_at))
