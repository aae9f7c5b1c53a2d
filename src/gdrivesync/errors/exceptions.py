"""Exception hierarchy and Drive HTTP error mapping for gdrivesync."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class GDriveSyncError(Exception):
    """
    Base exception for gdrivesync.

    Attributes:
        details: Optional structured information (e.g., record id, HTTP status).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


# ----------------------------
# Context sentinels
# ----------------------------
class OperationCanceled(GDriveSyncError):
    """Raised when a SyncContext was cancelled."""


class DeadlineExceeded(GDriveSyncError):
    """Raised when a SyncContext deadline passed before the work finished."""


# ----------------------------
# Local catalog
# ----------------------------
class RecordNotFoundError(GDriveSyncError):
    """Raised when a catalog record or config key does not exist."""


class DuplicateRecordError(GDriveSyncError):
    """Raised when a record id is already present in the catalog."""


class InvalidStatusTransition(GDriveSyncError):
    """Raised when a status update would move a record backwards."""


class ExpirationCleanupError(GDriveSyncError):
    """
    Raised when one or more expired records could not be marked Expired.

    details["failures"] maps record_id -> failure message.
    """

    @property
    def failures(self) -> dict[str, str]:
        return dict(self.details.get("failures", {}))


class SyncAbortedError(GDriveSyncError):
    """
    Raised when reconciliation could not reach the remote store.

    Attributes:
        outcome: SyncOutcome with offline=True and zero counts.
        error: ClassifiedError describing the connectivity failure.
    """

    def __init__(self, message: str, *, outcome: Any, error: Any) -> None:
        super().__init__(message, cause=error)
        self.outcome = outcome
        self.error = error


# ----------------------------
# Remote store (Drive)
# ----------------------------
class RemoteStoreError(GDriveSyncError):
    """Base class for errors reported by the remote object store."""


class AuthError(RemoteStoreError):
    """Raised when credentials are rejected (HTTP 401) or cannot be loaded."""


class AccessDeniedError(RemoteStoreError):
    """Raised when access is denied (HTTP 403 non-rate-limit)."""


class BucketNotFoundError(RemoteStoreError):
    """Raised when the configured root folder / shared drive does not exist."""


class ObjectNotFoundError(RemoteStoreError):
    """Raised when a remote object is not found (HTTP 404)."""


class RateLimitError(RemoteStoreError):
    """Raised when rate-limited (HTTP 429, or 403 with a rate/quota reason)."""


class ServiceError(RemoteStoreError):
    """Raised for unclassified remote errors (5xx, unknown 4xx, etc.)."""

    @property
    def status_code(self) -> Optional[int]:
        value = self.details.get("status_code")
        return value if isinstance(value, int) else None


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivesync exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_RATE_LIMIT_REASON_KEYWORDS: tuple[str, ...] = (
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "quotaExceeded",
    "storageQuotaExceeded",
)


def _is_rate_limit_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _RATE_LIMIT_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> RemoteStoreError:
    """
    Map a Drive HTTP error to a gdrivesync remote exception.

    Policy:
        - 401 -> AuthError
        - 403 -> AccessDeniedError, or RateLimitError if rate/quota related
        - 404 -> ObjectNotFoundError
        - 429 -> RateLimitError
        - 5xx and anything else -> ServiceError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_rate_limit_reason(info.reason):
            return RateLimitError(message, details=details, cause=cause)
        return AccessDeniedError(message, details=details, cause=cause)
    if info.status_code == 404:
        return ObjectNotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ServiceError(message, details=details, cause=cause)
