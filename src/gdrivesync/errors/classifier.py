"""
Normalize arbitrary failures into ClassifiedError.

Classification is an ordered list of rules; the first matching rule wins.
Several categories overlap by substring (e.g. "expired", "not found"), so the
order of CLASSIFICATION_RULES is part of the contract:

    1. already classified (passthrough)
    2. cancellation / deadline sentinels, typed local catalog errors
    3. transport timeout / temporary failures
    4. name resolution failures
    5. remote store (access denied, bucket, object, credentials, expired,
       then service availability and other remote errors)
    6. filesystem
    7. local store messages ("database"/"sql" text)
    8. fallback: UNKNOWN_ERROR
"""

from __future__ import annotations

import socket
from concurrent.futures import CancelledError
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

import httplib2
from google.auth import exceptions as google_auth_exceptions

from gdrivesync.util.time import now_utc

from .codes import (
    GENERIC_USER_MESSAGE,
    ErrorCode,
    is_recoverable_code,
    retry_after_for,
    suggested_action_for,
    user_message_for,
)
from .exceptions import (
    AccessDeniedError,
    AuthError,
    BucketNotFoundError,
    DeadlineExceeded,
    DuplicateRecordError,
    GDriveSyncError,
    InvalidStatusTransition,
    ObjectNotFoundError,
    OperationCanceled,
    RateLimitError,
    RecordNotFoundError,
    RemoteStoreError,
    ServiceError,
)


class ClassifiedError(GDriveSyncError):
    """
    A normalized error with a stable code and user guidance.

    Every field is fixed at construction: recoverable, retry_after and
    suggested_action come from the static tables in codes.py.
    """

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        context: Optional[Mapping[str, Any]] = None,
        user_message: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        code = ErrorCode(code)
        ctx = dict(context or {})
        super().__init__(message, details=dict(ctx), cause=cause)
        self._code = code
        self._message = message
        self._user_message = (
            user_message if user_message is not None else user_message_for(code, message)
        )
        self._recoverable = is_recoverable_code(code)
        self._retry_after = retry_after_for(code)
        self._suggested_action = suggested_action_for(code)
        self._context: Mapping[str, Any] = MappingProxyType(ctx)
        self._timestamp = timestamp or now_utc()

    @property
    def code(self) -> ErrorCode:
        return self._code

    @property
    def message(self) -> str:
        """Technical message."""
        return self._message

    @property
    def user_message(self) -> str:
        return self._user_message

    @property
    def recoverable(self) -> bool:
        return self._recoverable

    @property
    def retry_after(self) -> Optional[timedelta]:
        return self._retry_after

    @property
    def suggested_action(self) -> Optional[str]:
        return self._suggested_action

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def timestamp(self) -> datetime:
        return self._timestamp

    def with_context(self, **extra: Any) -> "ClassifiedError":
        """Return a copy with extra context entries (the original is untouched)."""
        merged = dict(self._context)
        merged.update(extra)
        return ClassifiedError(
            self._code,
            self._message,
            cause=self.cause,
            context=merged,
            user_message=self._user_message,
            timestamp=self._timestamp,
        )

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self._code.value}: {self._message} (caused by: {self.cause})"
        return f"{self._code.value}: {self._message}"

    def __repr__(self) -> str:
        return f"ClassifiedError(code={self._code.value!r}, message={self._message!r})"


Predicate = Callable[[BaseException, str], bool]


@dataclass(frozen=True)
class ClassificationRule:
    """(predicate, code) pair; `message` becomes the technical message."""

    name: str
    code: ErrorCode
    message: str
    predicate: Predicate


def _instance_of(*types: type) -> Predicate:
    return lambda error, text: isinstance(error, types)


def _contains_any(*fragments: str) -> Predicate:
    return lambda error, text: any(fragment in text for fragment in fragments)


def _either(*predicates: Predicate) -> Predicate:
    return lambda error, text: any(p(error, text) for p in predicates)


def _is_server_error(error: BaseException, text: str) -> bool:
    if not isinstance(error, ServiceError):
        return False
    status_code = error.status_code
    return status_code is not None and 500 <= status_code <= 599


def _mentions_database(text: str) -> bool:
    return "database" in text or "sql" in text


def _db_no_rows(error: BaseException, text: str) -> bool:
    return _mentions_database(text) and "no rows" in text


def _db_duplicate(error: BaseException, text: str) -> bool:
    return _mentions_database(text) and ("unique" in text or "duplicate" in text)


def _db_other(error: BaseException, text: str) -> bool:
    return _mentions_database(text)


CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    # Cancellation / deadline sentinels
    ClassificationRule(
        "canceled",
        ErrorCode.CANCELED,
        "Operation was canceled",
        _instance_of(OperationCanceled, CancelledError),
    ),
    ClassificationRule(
        "deadline",
        ErrorCode.CONNECTION_TIMEOUT,
        "Operation timed out",
        _instance_of(DeadlineExceeded),
    ),
    # Local catalog errors are matched by type: their messages embed record
    # ids and status names that would otherwise hit fragment rules.
    ClassificationRule(
        "record-not-found",
        ErrorCode.RECORD_NOT_FOUND,
        "Record not found",
        _instance_of(RecordNotFoundError),
    ),
    ClassificationRule(
        "duplicate-record",
        ErrorCode.DUPLICATE_RECORD,
        "Duplicate record",
        _instance_of(DuplicateRecordError),
    ),
    ClassificationRule(
        "invalid-state",
        ErrorCode.INVALID_STATE,
        "Invalid status transition",
        _instance_of(InvalidStatusTransition),
    ),
    # Transport
    ClassificationRule(
        "transport-timeout",
        ErrorCode.CONNECTION_TIMEOUT,
        "Network operation timed out",
        _instance_of(TimeoutError),
    ),
    ClassificationRule(
        "transport-error",
        ErrorCode.NETWORK_ERROR,
        "Network error occurred",
        _instance_of(ConnectionError, google_auth_exceptions.TransportError),
    ),
    # Name resolution
    ClassificationRule(
        "dns",
        ErrorCode.DNS_RESOLUTION_FAILED,
        "Failed to resolve DNS",
        _instance_of(socket.gaierror, socket.herror, httplib2.ServerNotFoundError),
    ),
    # Remote store
    ClassificationRule(
        "remote-access-denied",
        ErrorCode.REMOTE_ACCESS_DENIED,
        "Access denied to the remote store",
        _either(
            _instance_of(AccessDeniedError),
            _contains_any("accessdenied", "insufficientpermissions"),
        ),
    ),
    ClassificationRule(
        "remote-bucket-not-found",
        ErrorCode.BUCKET_NOT_FOUND,
        "Remote root folder not found",
        _either(
            _instance_of(BucketNotFoundError),
            _contains_any("nosuchbucket", "teamdrivenotfound"),
        ),
    ),
    ClassificationRule(
        "remote-object-not-found",
        ErrorCode.OBJECT_NOT_FOUND,
        "File not found in the remote store",
        _either(_instance_of(ObjectNotFoundError), _contains_any("nosuchkey")),
    ),
    ClassificationRule(
        "remote-invalid-credentials",
        ErrorCode.INVALID_CREDENTIALS,
        "Invalid credentials",
        _either(
            _instance_of(AuthError),
            _contains_any("invalidaccesskeyid", "signaturemismatch", "invalid_grant"),
        ),
    ),
    ClassificationRule(
        "remote-credentials-expired",
        ErrorCode.CREDENTIALS_EXPIRED,
        "Credentials have expired",
        _either(
            _instance_of(google_auth_exceptions.RefreshError),
            _contains_any("tokenrefreshrequired", "expired"),
        ),
    ),
    ClassificationRule(
        "remote-service-unavailable",
        ErrorCode.SERVICE_UNAVAILABLE,
        "Remote service is unavailable",
        _either(
            _instance_of(RateLimitError),
            _is_server_error,
            _contains_any("serviceunavailable", "service unavailable", "slowdown"),
        ),
    ),
    ClassificationRule(
        "remote-service-error",
        ErrorCode.REMOTE_SERVICE_ERROR,
        "Remote store error",
        _instance_of(RemoteStoreError),
    ),
    # Filesystem
    ClassificationRule(
        "fs-not-found",
        ErrorCode.FILE_NOT_FOUND,
        "File not found",
        _contains_any("no such file", "file not found"),
    ),
    ClassificationRule(
        "fs-permission",
        ErrorCode.ACCESS_DENIED,
        "Permission denied",
        _contains_any("permission denied"),
    ),
    ClassificationRule(
        "fs-exists",
        ErrorCode.FILE_ALREADY_EXISTS,
        "File already exists",
        _contains_any("file exists"),
    ),
    # Local store
    ClassificationRule(
        "db-no-rows",
        ErrorCode.RECORD_NOT_FOUND,
        "Record not found",
        _db_no_rows,
    ),
    ClassificationRule(
        "db-duplicate",
        ErrorCode.DUPLICATE_RECORD,
        "Duplicate record",
        _db_duplicate,
    ),
    ClassificationRule(
        "db-error",
        ErrorCode.DATABASE_ERROR,
        "Database error",
        _db_other,
    ),
)

UNKNOWN_ERROR_MESSAGE = "An unexpected error occurred"


def classify(error: BaseException) -> ClassifiedError:
    """
    Classify any exception into a ClassifiedError.

    Total and deterministic; a ClassifiedError is returned unchanged.

    Raises:
        TypeError: if error is None.
    """
    if error is None:
        raise TypeError("classify() requires an exception, got None")

    if isinstance(error, ClassifiedError):
        return error

    text = str(error).lower()
    context = _context_for(error)

    for rule in CLASSIFICATION_RULES:
        if rule.predicate(error, text):
            context["rule"] = rule.name
            return ClassifiedError(rule.code, rule.message, cause=error, context=context)

    return ClassifiedError(
        ErrorCode.UNKNOWN_ERROR,
        UNKNOWN_ERROR_MESSAGE,
        cause=error,
        context=context,
        user_message=str(error) or GENERIC_USER_MESSAGE,
    )


def _context_for(error: BaseException) -> dict[str, Any]:
    context: dict[str, Any] = {"error_type": type(error).__name__}
    if isinstance(error, GDriveSyncError) and error.details:
        context.update(error.details)
    return context


def is_canceled(error: BaseException) -> bool:
    return classify(error).code is ErrorCode.CANCELED


def is_timeout(error: BaseException) -> bool:
    return classify(error).code in (ErrorCode.CONNECTION_TIMEOUT, ErrorCode.UPLOAD_TIMEOUT)


def is_temporary(error: BaseException) -> bool:
    return classify(error).recoverable


_NETWORK_FAILURE_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.NETWORK_ERROR,
        ErrorCode.CONNECTION_TIMEOUT,
        ErrorCode.DNS_RESOLUTION_FAILED,
        ErrorCode.SERVICE_UNAVAILABLE,
    }
)


def is_network_failure(error: BaseException) -> bool:
    """True when the failure means the remote store is unreachable right now."""
    return classify(error).code in _NETWORK_FAILURE_CODES
