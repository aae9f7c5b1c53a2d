"""Public retry exports for gdrivesync."""

from __future__ import annotations

from .backoff import (
    DEFAULT_RETRY_CONFIG,
    TRANSIENT_HINTS,
    RetryConfig,
    backoff_delay,
    retry_with_backoff,
    should_retry,
)

__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "TRANSIENT_HINTS",
    "backoff_delay",
    "should_retry",
    "retry_with_backoff",
]
