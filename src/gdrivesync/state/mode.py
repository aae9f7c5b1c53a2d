"""Offline-mode flag and last-sync bookkeeping shared by remote-facing code."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Optional

from gdrivesync.errors import (
    ClassifiedError,
    ErrorCode,
    RecordNotFoundError,
    classify,
    is_network_failure,
)
from gdrivesync.local.store import LAST_SYNC_TIME_KEY, OFFLINE_MODE_KEY, CatalogStore
from gdrivesync.util.time import parse_rfc3339, to_rfc3339

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


class ModeController:
    """
    Shared "offline mode" state.

    One instance is created per process and passed by reference to every
    component that needs the remote store. When a store is attached, the flag
    and the last successful sync time are persisted in its config table.
    """

    def __init__(self, store: Optional[CatalogStore] = None, *, offline: bool = False) -> None:
        self._lock = threading.Lock()
        self._store = store
        self._offline = offline
        if store is not None:
            self._offline = self._load_offline(store, default=offline)

    def is_offline(self) -> bool:
        with self._lock:
            return self._offline

    def set_offline(self, offline: bool) -> None:
        with self._lock:
            changed = self._offline != offline
            self._offline = offline

        if changed:
            logger.info("Entered offline mode" if offline else "Exited offline mode")
        self._persist(OFFLINE_MODE_KEY, "true" if offline else "false")

    def ensure_online(self, operation: str) -> None:
        """
        Fail fast instead of attempting a doomed network call.

        Raises:
            ClassifiedError: SERVICE_UNAVAILABLE while offline.
        """
        if self.is_offline():
            raise ClassifiedError(
                ErrorCode.SERVICE_UNAVAILABLE,
                f"cannot {operation} in offline mode",
                context={"operation": operation},
            )

    def enter_offline_on_network_error(self, error: BaseException) -> ClassifiedError:
        """Classify error and switch to offline mode if the remote is unreachable."""
        classified = classify(error)
        if is_network_failure(classified):
            logger.info("Network failure detected (%s); entering offline mode", classified.code.value)
            self.set_offline(True)
        return classified

    def record_sync(self, when: datetime) -> None:
        """Persist the time of a successful sync."""
        if self._store is None:
            raise ClassifiedError(ErrorCode.INVALID_STATE, "no store attached to record sync time")
        self._store.save_config_value(LAST_SYNC_TIME_KEY, to_rfc3339(when))

    def last_sync_time(self) -> datetime:
        """
        Raises:
            RecordNotFoundError: if no sync has completed yet.
        """
        if self._store is None:
            raise RecordNotFoundError("no sync has completed yet", details={"key": LAST_SYNC_TIME_KEY})
        value = self._store.get_config_value(LAST_SYNC_TIME_KEY)
        return parse_rfc3339(value)

    # ----------------------------
    # Internals
    # ----------------------------
    def _persist(self, key: str, value: str) -> None:
        if self._store is None:
            return
        # The in-memory flag stays authoritative even if persisting fails.
        try:
            self._store.save_config_value(key, value)
        except Exception as exc:
            logger.error("Failed to persist %s: %s", key, exc)

    @staticmethod
    def _load_offline(store: CatalogStore, *, default: bool) -> bool:
        try:
            value = store.get_config_value(OFFLINE_MODE_KEY)
        except RecordNotFoundError:
            return default
        return value.strip().lower() in _TRUE_VALUES
