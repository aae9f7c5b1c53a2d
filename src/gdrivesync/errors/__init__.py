"""Public error exports for gdrivesync."""

from __future__ import annotations

from .classifier import (
    CLASSIFICATION_RULES,
    ClassificationRule,
    ClassifiedError,
    classify,
    is_canceled,
    is_network_failure,
    is_temporary,
    is_timeout,
)
from .codes import ErrorCode
from .exceptions import (
    AccessDeniedError,
    AuthError,
    BucketNotFoundError,
    DeadlineExceeded,
    DuplicateRecordError,
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
    map_http_error,
)

__all__ = [
    "GDriveSyncError",
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
    "ErrorCode",
    "ClassifiedError",
    "ClassificationRule",
    "CLASSIFICATION_RULES",
    "classify",
    "is_canceled",
    "is_timeout",
    "is_temporary",
    "is_network_failure",
]
