"""Input validation helpers shared by the sweeper and the reconciler."""

from __future__ import annotations

from datetime import timedelta

from gdrivesync.errors import ClassifiedError, ErrorCode


def validate_record_id(record_id: str) -> None:
    if not isinstance(record_id, str) or not record_id.strip():
        raise ClassifiedError(ErrorCode.INVALID_INPUT, "record id cannot be empty")


def validate_positive_duration(duration: timedelta) -> None:
    if not isinstance(duration, timedelta):
        raise ClassifiedError(
            ErrorCode.INVALID_INPUT,
            "expiration duration must be a timedelta",
            context={"type": type(duration).__name__},
        )
    if duration <= timedelta(0):
        raise ClassifiedError(
            ErrorCode.INVALID_INPUT,
            "expiration duration must be positive",
            context={"duration_sec": duration.total_seconds()},
        )
