"""Reconcile the local catalog against the remote object store."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Callable, Optional

from gdrivesync.config import SyncSettings
from gdrivesync.errors import (
    ClassifiedError,
    ErrorCode,
    SyncAbortedError,
    classify,
)
from gdrivesync.local.store import CatalogStore
from gdrivesync.local.validators import validate_record_id
from gdrivesync.models import (
    SKIP_VERIFICATION,
    CatalogRecord,
    RecordError,
    RecordStatus,
    SyncOutcome,
    VerificationResult,
)
from gdrivesync.remote.store import RemoteStore
from gdrivesync.retry import retry_with_backoff
from gdrivesync.state import ModeController
from gdrivesync.util.context import SyncContext
from gdrivesync.util.time import is_due, now_utc

logger = logging.getLogger(__name__)


class Reconciler:
    """
    Detect and correct drift between the local catalog and the remote store.

    Notes:
        - Only a failed connectivity probe aborts a sync. Per-record failures
          are collected into the SyncOutcome.
        - The remote store wins on existence; the local expiration wins over
          upload-completion promotion.
        - Offline state lives in the shared ModeController.
    """

    def __init__(
        self,
        store: CatalogStore,
        remote: Optional[RemoteStore] = None,
        *,
        mode: Optional[ModeController] = None,
        settings: Optional[SyncSettings] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._store = store
        self._remote = remote
        self._mode = mode if mode is not None else ModeController(store)
        self._settings = settings or SyncSettings()
        self._clock = clock

    @property
    def mode(self) -> ModeController:
        return self._mode

    # ----------------------------
    # Public API
    # ----------------------------
    def sync_with_remote(self, ctx: SyncContext) -> SyncOutcome:
        """
        Verify every catalog record against the remote store.

        Returns:
            SyncOutcome aggregating per-record results and errors.

        Raises:
            SyncAbortedError: remote store absent or unreachable. Offline mode
                is set and the error carries an offline outcome.
            ClassifiedError: listing the local catalog failed.
        """
        started = time.monotonic()
        logger.info("Starting synchronization with remote store")

        try:
            remote = self._probe(ctx)
        except Exception as exc:
            classified = classify(exc)
            self._mode.set_offline(True)
            outcome = SyncOutcome(offline=True, duration=_elapsed(started))
            logger.error("Remote connectivity check failed: %s", classified)
            raise SyncAbortedError(
                f"remote connectivity failed, entering offline mode: {classified}",
                outcome=outcome,
                error=classified,
            ) from exc

        self._mode.set_offline(False)

        try:
            records = self._store.list_records()
        except Exception as exc:
            classified = classify(exc)
            if classified is exc:
                raise
            raise classified from exc

        logger.info("Found %d records in local catalog", len(records))
        eligible = [r for r in records if r.status not in SKIP_VERIFICATION]
        results = sorted(
            self._check_all(ctx, remote, eligible), key=lambda r: r.record_id
        )

        verified = missing = errored = 0
        updated_ids: list[str] = []
        missing_ids: list[str] = []
        errors: list[RecordError] = []

        for result in results:
            record_id = result.record_id
            if result.error is not None:
                errored += 1
                errors.append(RecordError(record_id, "verify", result.error))
                continue

            if result.existed:
                verified += 1
            else:
                missing += 1
                missing_ids.append(record_id)

            if not result.changed:
                continue
            try:
                self._store.update_status(record_id, result.new_status)
            except Exception as exc:
                classified = classify(exc)
                logger.error("Failed to update status for record %s: %s", record_id, classified)
                errored += 1
                errors.append(RecordError(record_id, "update", classified))
                continue
            updated_ids.append(record_id)
            logger.info(
                "Updated record %s status from %s to %s",
                record_id,
                result.old_status.value,
                result.new_status.value,
            )

        try:
            self._mode.record_sync(self._clock())
        except Exception as exc:
            logger.error("Failed to save last sync time: %s", exc)

        outcome = SyncOutcome(
            total=len(records),
            verified=verified,
            missing=missing,
            errored=errored,
            updated_ids=tuple(updated_ids),
            missing_ids=tuple(missing_ids),
            errors=tuple(errors),
            duration=_elapsed(started),
            offline=self._mode.is_offline(),
        )
        logger.info(
            "Synchronization completed: %d total, %d verified, %d missing, %d errors in %.3fs",
            outcome.total,
            outcome.verified,
            outcome.missing,
            outcome.errored,
            outcome.duration.total_seconds(),
        )
        return outcome

    def verify_one(self, ctx: SyncContext, record_id: str) -> VerificationResult:
        """
        Verify one record without persisting anything.

        While offline (or with no remote store), ACTIVE records are assumed to
        exist and the status is left unchanged.

        Raises:
            ClassifiedError: existence could not be determined, or the id is empty.
            RecordNotFoundError: the record is not in the catalog.
        """
        validate_record_id(record_id)
        record = self._store.get_record(record_id)

        remote = self._remote
        if remote is None or self._mode.is_offline():
            return VerificationResult(
                record_id=record.record_id,
                existed=record.status is RecordStatus.ACTIVE,
                old_status=record.status,
                new_status=record.status,
            )
        result = self._verify_record(ctx, remote, record)
        if result.error is not None:
            raise result.error
        return result

    def is_offline_mode(self) -> bool:
        return self._mode.is_offline()

    def set_offline_mode(self, offline: bool) -> None:
        self._mode.set_offline(offline)

    def get_last_sync_time(self) -> datetime:
        return self._mode.last_sync_time()

    # ----------------------------
    # Internals
    # ----------------------------
    def _probe(self, ctx: SyncContext) -> RemoteStore:
        if self._remote is None:
            raise ClassifiedError(
                ErrorCode.SERVICE_UNAVAILABLE,
                "remote store is not configured",
            )
        probe_ctx = ctx.with_timeout(self._settings.probe_timeout_sec)
        self._remote.test_connectivity(probe_ctx)
        return self._remote

    def _check_all(
        self, ctx: SyncContext, remote: RemoteStore, records: list[CatalogRecord]
    ) -> list[VerificationResult]:
        workers = min(self._settings.max_workers, len(records))
        if workers <= 1:
            return [self._check(ctx, remote, r) for r in records]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gdrivesync-verify") as pool:
            return list(pool.map(lambda r: self._check(ctx, remote, r), records))

    def _check(
        self, ctx: SyncContext, remote: RemoteStore, record: CatalogRecord
    ) -> VerificationResult:
        try:
            result = self._verify_record(ctx, remote, record)
        except Exception as exc:
            result = _failed(record, classify(exc))
        if result.error is not None:
            logger.warning("Failed to verify record %s: %s", record.record_id, result.error)
        return result

    def _verify_record(
        self, ctx: SyncContext, remote: RemoteStore, record: CatalogRecord
    ) -> VerificationResult:
        """Existence errors other than not-found are returned on the result."""
        verify_ctx = ctx.with_timeout(self._settings.verify_timeout_sec)
        try:
            exists = retry_with_backoff(
                verify_ctx,
                lambda: remote.check_exists(verify_ctx, record.remote_key),
                self._settings.retry,
            )
        except ClassifiedError as exc:
            if exc.code is not ErrorCode.OBJECT_NOT_FOUND:
                return _failed(record, exc)
            exists = False

        old = record.status
        if not exists:
            new = RecordStatus.DELETED if old is RecordStatus.ACTIVE else old
            return VerificationResult(record.record_id, False, old, new)

        if is_due(record.expires_at, self._clock()) and old is not RecordStatus.EXPIRED:
            new = RecordStatus.EXPIRED
        elif old is RecordStatus.UPLOADING:
            new = RecordStatus.ACTIVE
        else:
            new = old
        return VerificationResult(record.record_id, True, old, new)


def _failed(record: CatalogRecord, error: ClassifiedError) -> VerificationResult:
    return VerificationResult(
        record.record_id,
        False,
        record.status,
        record.status,
        error=error.with_context(record_id=record.record_id),
    )


def _elapsed(started: float) -> timedelta:
    return timedelta(seconds=time.monotonic() - started)
