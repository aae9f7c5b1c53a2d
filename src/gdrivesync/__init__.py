"""gdrivesync public API."""

from __future__ import annotations

import logging

from gdrivesync.config import SyncSettings
from gdrivesync.errors import (
    AccessDeniedError,
    AuthError,
    BucketNotFoundError,
    ClassifiedError,
    DeadlineExceeded,
    DuplicateRecordError,
    ErrorCode,
    ExpirationCleanupError,
    GDriveSyncError,
    HttpErrorInfo,
    InvalidStatusTransition,
    ObjectNotFoundError,
    OperationCanceled,
    RateLimitError,
    RecordNotFoundError,
    RemoteStoreError,
    ServiceError,
    SyncAbortedError,
    classify,
    map_http_error,
)
from gdrivesync.lifecycle import LifecycleSweeper, PeriodicTask
from gdrivesync.local import CatalogStore, InMemoryCatalogStore
from gdrivesync.models import (
    CatalogRecord,
    RecordError,
    RecordStatus,
    SyncOutcome,
    VerificationResult,
)
from gdrivesync.reconciler import Reconciler
from gdrivesync.remote import DriveObjectStore, RemoteStore
from gdrivesync.retry import RetryConfig, retry_with_backoff
from gdrivesync.state import ModeController
from gdrivesync.util import SyncContext

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # High-level
    "Reconciler",
    "LifecycleSweeper",
    "PeriodicTask",
    "ModeController",
    "SyncSettings",
    "SyncContext",
    # Collaborators
    "CatalogStore",
    "InMemoryCatalogStore",
    "RemoteStore",
    "DriveObjectStore",
    # Models
    "CatalogRecord",
    "RecordStatus",
    "RecordError",
    "SyncOutcome",
    "VerificationResult",
    # Retry
    "RetryConfig",
    "retry_with_backoff",
    # Errors
    "GDriveSyncError",
    "ClassifiedError",
    "ErrorCode",
    "classify",
    "OperationCanceled",
    "DeadlineExceeded",
    "RecordNotFoundError",
    "DuplicateRecordError",
    "InvalidStatusTransition",
    "ExpirationCleanupError",
    "SyncAbortedError",
    "RemoteStoreError",
    "AuthError",
    "AccessDeniedError",
    "BucketNotFoundError",
    "ObjectNotFoundError",
    "RateLimitError",
    "ServiceError",
    "HttpErrorInfo",
    "map_http_error",
]
