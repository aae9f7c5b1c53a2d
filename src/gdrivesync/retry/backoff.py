"""Exponential backoff driven by error classification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from gdrivesync.errors import ClassifiedError, ErrorCode, classify
from gdrivesync.util.context import SyncContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

# UNKNOWN_ERROR messages containing any of these are retried anyway.
TRANSIENT_HINTS: tuple[str, ...] = ("temporary", "network", "timeout", "connection")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay_sec: float = 1.0
    max_delay_sec: float = 30.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_sec < 0 or self.max_delay_sec < 0:
            raise ValueError("delays must be >= 0")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")


DEFAULT_RETRY_CONFIG = RetryConfig()


def backoff_delay(config: RetryConfig, attempt: int) -> float:
    """Delay in seconds after the given 1-based attempt."""
    delay = config.base_delay_sec * (config.multiplier ** (attempt - 1))
    return min(config.max_delay_sec, delay)


def should_retry(classified: ClassifiedError, original: BaseException) -> bool:
    """
    Recoverable codes are retried. UNKNOWN_ERROR is retried too when the
    original message hints at a transient failure.
    """
    if classified.recoverable:
        return True
    if classified.code is ErrorCode.UNKNOWN_ERROR:
        text = str(original).lower()
        return any(hint in text for hint in TRANSIENT_HINTS)
    return False


def retry_with_backoff(
    ctx: SyncContext,
    operation: Callable[[], T],
    config: Optional[RetryConfig] = None,
) -> T:
    """
    Run operation up to config.max_attempts times.

    Returns:
        The operation's return value from the first successful attempt.

    Raises:
        ClassifiedError: the classified failure when it is not retryable, the
            classified last failure when attempts run out, or a CANCELED error
            when ctx finishes during a backoff wait.
    """
    cfg = config or DEFAULT_RETRY_CONFIG
    attempt = 0

    while True:
        attempt += 1
        try:
            return operation()
        except Exception as exc:
            classified = classify(exc)
            retryable = should_retry(classified, exc)
            if retryable and attempt >= cfg.max_attempts:
                logger.warning("All %d attempts failed: %s", cfg.max_attempts, classified)
                retryable = False
            if not retryable:
                if classified is exc:
                    raise
                raise classified from exc

        delay = backoff_delay(cfg, attempt)
        logger.warning(
            "Attempt %d/%d failed (%s); retrying in %.2fs",
            attempt,
            cfg.max_attempts,
            classified.code.value,
            delay,
        )
        if ctx.wait(delay):
            ctx_error = ctx.err()
            raise ClassifiedError(
                ErrorCode.CANCELED,
                "Operation was canceled",
                cause=ctx_error,
                context={"attempt": attempt},
            ) from ctx_error
