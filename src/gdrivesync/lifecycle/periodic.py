"""Cancellable periodic driver for the sweeper and the reconciler."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from gdrivesync.util.context import SyncContext

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Run `func` every `interval_sec` seconds until stopped.

    A failing tick is logged and the loop re-arms. `stop()` wakes the waiting
    loop immediately.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Any],
        interval_sec: float,
        *,
        run_immediately: bool = False,
    ) -> None:
        if interval_sec <= 0:
            raise ValueError("interval_sec must be > 0")
        self.name = name
        self._func = func
        self._interval = float(interval_sec)
        self._run_immediately = run_immediately

        self._ctx: Optional[SyncContext] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.ticks = 0
        self.failures = 0

    @property
    def interval_sec(self) -> float:
        return self._interval

    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, ctx: Optional[SyncContext] = None) -> None:
        """Start the loop on a daemon thread. Cancelling ctx stops it too."""
        with self._lock:
            if self.is_running():
                return
            parent = ctx or SyncContext.background()
            self._ctx = SyncContext(parent=parent, deadline=parent.deadline)
            self._thread = threading.Thread(
                target=self.run_forever,
                args=(self._ctx,),
                daemon=True,
                name=f"gdrivesync-{self.name}",
            )
            self._thread.start()
        logger.info("Periodic task %s started (interval=%.0fs)", self.name, self._interval)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        with self._lock:
            ctx, thread = self._ctx, self._thread
            self._ctx = None
            self._thread = None
        if ctx is not None:
            ctx.cancel()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Periodic task %s stopped", self.name)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run_forever(self, ctx: SyncContext) -> None:
        """Run the loop on the calling thread until ctx is done."""
        if self._run_immediately and not ctx.done():
            self.run_once()
        while not ctx.wait(self._interval):
            self.run_once()
        logger.debug("Periodic task %s loop exited", self.name)

    def run_once(self) -> bool:
        """Run one tick; returns False if it raised."""
        self.ticks += 1
        try:
            self._func()
        except Exception:
            self.failures += 1
            logger.exception("Periodic task %s tick failed", self.name)
            return False
        return True
