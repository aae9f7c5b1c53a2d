"""Error codes and the static lookup tables attached to each code."""

from __future__ import annotations

from datetime import timedelta
from enum import Enum


class ErrorCode(str, Enum):
    # Credentials / authorization
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCESS_DENIED = "ACCESS_DENIED"
    CREDENTIALS_EXPIRED = "CREDENTIALS_EXPIRED"

    # Filesystem
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_TOO_BIG = "FILE_TOO_BIG"
    FILE_EMPTY = "FILE_EMPTY"
    INVALID_FILE_PATH = "INVALID_FILE_PATH"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"

    # Transfer
    UPLOAD_FAILED = "UPLOAD_FAILED"
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"
    UPLOAD_TIMEOUT = "UPLOAD_TIMEOUT"
    CANCELED = "CANCELED"

    # Network / connectivity
    NETWORK_ERROR = "NETWORK_ERROR"
    CONNECTION_TIMEOUT = "CONNECTION_TIMEOUT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    DNS_RESOLUTION_FAILED = "DNS_RESOLUTION_FAILED"

    # Remote store
    REMOTE_SERVICE_ERROR = "REMOTE_SERVICE_ERROR"
    BUCKET_NOT_FOUND = "BUCKET_NOT_FOUND"
    OBJECT_NOT_FOUND = "OBJECT_NOT_FOUND"
    REMOTE_ACCESS_DENIED = "REMOTE_ACCESS_DENIED"
    SHARE_LINK_EXPIRED = "SHARE_LINK_EXPIRED"

    # Local store
    DATABASE_ERROR = "DATABASE_ERROR"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    DUPLICATE_RECORD = "DUPLICATE_RECORD"
    DATABASE_CONNECTION = "DATABASE_CONNECTION"

    # Input validation
    INVALID_INPUT = "INVALID_INPUT"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    MISSING_REQUIRED = "MISSING_REQUIRED"

    # Configuration
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Application state
    INVALID_STATE = "INVALID_STATE"
    OPERATION_NOT_ALLOWED = "OPERATION_NOT_ALLOWED"
    RESOURCE_BUSY = "RESOURCE_BUSY"

    # Generic
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


RECOVERABLE_CODES: frozenset[ErrorCode] = frozenset(
    {
        ErrorCode.NETWORK_ERROR,
        ErrorCode.CONNECTION_TIMEOUT,
        ErrorCode.SERVICE_UNAVAILABLE,
        ErrorCode.UPLOAD_TIMEOUT,
        ErrorCode.DATABASE_CONNECTION,
        ErrorCode.RESOURCE_BUSY,
    }
)

# Only recoverable codes carry a hint.
RETRY_AFTER: dict[ErrorCode, timedelta] = {
    ErrorCode.NETWORK_ERROR: timedelta(seconds=5),
    ErrorCode.CONNECTION_TIMEOUT: timedelta(seconds=10),
    ErrorCode.SERVICE_UNAVAILABLE: timedelta(seconds=30),
    ErrorCode.UPLOAD_TIMEOUT: timedelta(seconds=15),
    ErrorCode.DATABASE_CONNECTION: timedelta(seconds=5),
    ErrorCode.RESOURCE_BUSY: timedelta(seconds=3),
}

USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_CREDENTIALS: (
        "Your Google credentials are invalid. Please sign in again."
    ),
    ErrorCode.ACCESS_DENIED: (
        "You don't have permission to perform this operation."
    ),
    ErrorCode.CREDENTIALS_EXPIRED: (
        "Your Google credentials have expired. Please refresh them and try again."
    ),
    ErrorCode.FILE_NOT_FOUND: (
        "The file you're looking for could not be found. "
        "It may have been moved or deleted."
    ),
    ErrorCode.FILE_TOO_BIG: "The file is too large to upload.",
    ErrorCode.FILE_EMPTY: "The file appears to be empty. Please choose a file with content.",
    ErrorCode.UPLOAD_FAILED: (
        "Failed to upload the file. Please check your internet connection and try again."
    ),
    ErrorCode.UPLOAD_TIMEOUT: (
        "The upload took too long and timed out. "
        "Please check your internet connection and try again."
    ),
    ErrorCode.CANCELED: "The operation was canceled.",
    ErrorCode.NETWORK_ERROR: (
        "A network error occurred. Please check your internet connection and try again."
    ),
    ErrorCode.CONNECTION_TIMEOUT: (
        "The connection timed out. Please check your internet connection and try again."
    ),
    ErrorCode.SERVICE_UNAVAILABLE: (
        "The service is temporarily unavailable. Please try again in a few minutes."
    ),
    ErrorCode.DNS_RESOLUTION_FAILED: (
        "The storage service could not be reached. Please check your network settings."
    ),
    ErrorCode.BUCKET_NOT_FOUND: (
        "The storage folder could not be found. Please check your configuration."
    ),
    ErrorCode.OBJECT_NOT_FOUND: (
        "The file was not found in storage. It may have been deleted or expired."
    ),
    ErrorCode.REMOTE_ACCESS_DENIED: (
        "Access to the storage service was denied. Please check your permissions."
    ),
    ErrorCode.SHARE_LINK_EXPIRED: "The sharing link has expired. Please generate a new link.",
    ErrorCode.DATABASE_ERROR: "A database error occurred. Please try again.",
    ErrorCode.RECORD_NOT_FOUND: "The requested record was not found.",
    ErrorCode.INVALID_INPUT: (
        "The provided input is invalid. Please check your input and try again."
    ),
    ErrorCode.CONFIGURATION_ERROR: "There's a configuration error. Please check your settings.",
    ErrorCode.MISSING_CONFIG: "Required configuration is missing. Please check your settings.",
    ErrorCode.INVALID_STATE: "The operation cannot be performed in the current state.",
    ErrorCode.OPERATION_NOT_ALLOWED: "This operation is not allowed.",
}

SUGGESTED_ACTIONS: dict[ErrorCode, str] = {
    ErrorCode.INVALID_CREDENTIALS: "Go to Settings and sign in to Google Drive again",
    ErrorCode.ACCESS_DENIED: "Contact your administrator to check your permissions",
    ErrorCode.CREDENTIALS_EXPIRED: "Go to Settings and refresh your Google credentials",
    ErrorCode.FILE_NOT_FOUND: "Check the file path and ensure the file exists",
    ErrorCode.FILE_TOO_BIG: "Choose a smaller file or compress the file",
    ErrorCode.FILE_EMPTY: "Choose a file that contains data",
    ErrorCode.NETWORK_ERROR: "Check your internet connection and try again",
    ErrorCode.CONNECTION_TIMEOUT: "Check your internet connection and try again",
    ErrorCode.SERVICE_UNAVAILABLE: "Wait a few minutes and try again",
    ErrorCode.BUCKET_NOT_FOUND: "Go to Settings and verify the Drive folder configuration",
    ErrorCode.CONFIGURATION_ERROR: "Go to Settings and check your configuration",
    ErrorCode.MISSING_CONFIG: "Go to Settings and complete your configuration",
    ErrorCode.INVALID_CONFIG: "Go to Settings and correct the invalid value",
}

GENERIC_USER_MESSAGE = "An unexpected error occurred. Please try again."


def is_recoverable_code(code: ErrorCode) -> bool:
    return code in RECOVERABLE_CODES


def retry_after_for(code: ErrorCode) -> timedelta | None:
    return RETRY_AFTER.get(code)


def suggested_action_for(code: ErrorCode) -> str | None:
    return SUGGESTED_ACTIONS.get(code)


def user_message_for(code: ErrorCode, original_message: str) -> str:
    """Return the user-facing text; codes without an entry fall back to original_message."""
    message = USER_MESSAGES.get(code)
    if message is not None:
        return message
    return original_message or GENERIC_USER_MESSAGE
