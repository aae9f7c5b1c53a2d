"""
Cancellation and deadline propagation.

A SyncContext is passed explicitly to every remote-facing call. Children made
with `with_timeout` share the parent's cancellation and never outlive the
parent's deadline.
"""

from __future__ import annotations

import threading
import time
import weakref
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from gdrivesync.errors.exceptions import DeadlineExceeded, GDriveSyncError, OperationCanceled

T = TypeVar("T")


class SyncContext:
    """Cancellation signal plus an optional monotonic deadline."""

    def __init__(
        self,
        *,
        deadline: Optional[float] = None,
        parent: Optional[SyncContext] = None,
    ) -> None:
        self._deadline = deadline
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: weakref.WeakSet[SyncContext] = weakref.WeakSet()
        self._callbacks: list[Callable[[], None]] = []
        if parent is not None:
            parent._attach(self)

    @classmethod
    def background(cls) -> SyncContext:
        """A context that is never done unless cancelled explicitly."""
        return cls()

    def with_timeout(self, seconds: float) -> SyncContext:
        """Child context that expires after `seconds` (or at the parent's deadline)."""
        deadline = time.monotonic() + max(0.0, seconds)
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return SyncContext(deadline=deadline, parent=self)

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        for child in children:
            child.cancel()
        for callback in callbacks:
            callback()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def done(self) -> bool:
        return self.cancelled or self.expired()

    def err(self) -> Optional[GDriveSyncError]:
        if self.cancelled:
            return OperationCanceled("context canceled")
        if self.expired():
            return DeadlineExceeded("context deadline exceeded")
        return None

    def raise_if_done(self) -> None:
        error = self.err()
        if error is not None:
            raise error

    def wait(self, seconds: float) -> bool:
        """
        Block for up to `seconds`; return True if the context is done.

        Cancellation wakes the waiter immediately.
        """
        timeout = max(0.0, seconds)
        remaining = self.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)
        if timeout > 0:
            self._event.wait(timeout)
        return self.done()

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register callback for cancellation; returns an unregister function."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def _unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return _unregister

        callback()
        return lambda: None

    def _attach(self, child: SyncContext) -> None:
        with self._lock:
            if not self._event.is_set():
                self._children.add(child)
                return
        child.cancel()


_REMOTE_POOL: Optional[ThreadPoolExecutor] = None
_REMOTE_POOL_LOCK = threading.Lock()
_REMOTE_POOL_WORKERS = 8


def _remote_pool() -> ThreadPoolExecutor:
    global _REMOTE_POOL
    with _REMOTE_POOL_LOCK:
        if _REMOTE_POOL is None:
            _REMOTE_POOL = ThreadPoolExecutor(
                max_workers=_REMOTE_POOL_WORKERS,
                thread_name_prefix="gdrivesync-remote",
            )
        return _REMOTE_POOL


def call_with_deadline(ctx: SyncContext, func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Run a blocking call on the shared remote pool, bounded by ctx.

    The caller is released as soon as the call finishes, the context is
    cancelled, or its deadline passes. A call that is abandoned keeps running
    in its worker thread; its result is discarded.

    Raises:
        OperationCanceled / DeadlineExceeded: if ctx finished first.
    """
    ctx.raise_if_done()

    future = _remote_pool().submit(func, *args, **kwargs)
    finished = threading.Event()
    future.add_done_callback(lambda _f: finished.set())
    unregister = ctx.on_cancel(finished.set)
    try:
        finished.wait(ctx.remaining())
    finally:
        unregister()

    if future.done():
        return future.result()

    future.cancel()
    error = ctx.err() or DeadlineExceeded("context deadline exceeded")
    raise error
