"""Runtime settings for reconciliation and the lifecycle sweep."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping, Optional, TypeVar

from gdrivesync.errors import ClassifiedError, ErrorCode
from gdrivesync.retry import RetryConfig

N = TypeVar("N", int, float)

ENV_PREFIX = "GDRIVESYNC_"


@dataclass(frozen=True)
class SyncSettings:
    """
    Timeouts, sweep interval and retry policy.

    Defaults:
        - probe_timeout_sec: connectivity probe bound (10s)
        - verify_timeout_sec: per-record verification bound (30s)
        - sweep_interval_sec: lifecycle sweep period (5 minutes)
        - max_workers: per-record verification concurrency (1 = sequential)
    """

    probe_timeout_sec: float = 10.0
    verify_timeout_sec: float = 30.0
    sweep_interval_sec: float = 300.0
    max_workers: int = 1
    retry: RetryConfig = field(default_factory=RetryConfig)

    def __post_init__(self) -> None:
        for name in ("probe_timeout_sec", "verify_timeout_sec", "sweep_interval_sec"):
            if getattr(self, name) <= 0:
                raise _invalid(name, getattr(self, name), "must be > 0")
        if self.max_workers < 1:
            raise _invalid("max_workers", self.max_workers, "must be >= 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> SyncSettings:
        """
        Build settings from GDRIVESYNC_* environment variables.

        Recognized:
            GDRIVESYNC_PROBE_TIMEOUT, GDRIVESYNC_VERIFY_TIMEOUT,
            GDRIVESYNC_SWEEP_INTERVAL, GDRIVESYNC_MAX_WORKERS,
            GDRIVESYNC_RETRY_ATTEMPTS
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        retry = defaults.retry
        attempts = _read(env, "RETRY_ATTEMPTS", int)
        if attempts is not None:
            if attempts < 1:
                raise _invalid("RETRY_ATTEMPTS", attempts, "must be >= 1")
            retry = replace(retry, max_attempts=attempts)

        return cls(
            probe_timeout_sec=_read(env, "PROBE_TIMEOUT", float, defaults.probe_timeout_sec),
            verify_timeout_sec=_read(env, "VERIFY_TIMEOUT", float, defaults.verify_timeout_sec),
            sweep_interval_sec=_read(env, "SWEEP_INTERVAL", float, defaults.sweep_interval_sec),
            max_workers=_read(env, "MAX_WORKERS", int, defaults.max_workers),
            retry=retry,
        )


def _read(env: Mapping[str, str], name: str, parse: Callable[[str], N], default=None):
    raw = env.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        return parse(raw)
    except ValueError as exc:
        raise ClassifiedError(
            ErrorCode.INVALID_CONFIG,
            f"{ENV_PREFIX}{name} is not a valid {parse.__name__}: {raw!r}",
            cause=exc,
            context={"variable": ENV_PREFIX + name},
        ) from exc


def _invalid(name: str, value: object, reason: str) -> ClassifiedError:
    return ClassifiedError(
        ErrorCode.INVALID_CONFIG,
        f"{name} {reason} (got {value!r})",
        context={"setting": name},
    )
