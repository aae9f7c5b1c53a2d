import threading
import time
import unittest

from gdrivesync.lifecycle import PeriodicTask
from gdrivesync.util.context import SyncContext


class TestPeriodicTask(unittest.TestCase):
    def test_rejects_non_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            PeriodicTask("sweep", lambda: None, 0)

    def test_ticks_until_stopped(self) -> None:
        ticked = threading.Event()
        calls = []

        def work():
            calls.append(1)
            if len(calls) >= 3:
                ticked.set()

        task = PeriodicTask("sweep", work, 0.01)
        task.start()
        try:
            self.assertTrue(ticked.wait(5))
        finally:
            task.stop()

        self.assertFalse(task.is_running())
        self.assertGreaterEqual(len(calls), 3)

    def test_stop_is_prompt_with_long_interval(self) -> None:
        task = PeriodicTask("sweep", lambda: None, 300)
        task.start()

        started = time.monotonic()
        task.stop()

        self.assertLess(time.monotonic() - started, 5)
        self.assertFalse(task.is_running())
        self.assertEqual(task.ticks, 0)

    def test_failing_tick_does_not_stop_loop(self) -> None:
        done = threading.Event()
        calls = []

        def work():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            done.set()

        task = PeriodicTask("sweep", work, 0.01)
        with self.assertLogs("gdrivesync.lifecycle.periodic", level="ERROR"):
            task.start()
            try:
                self.assertTrue(done.wait(5))
            finally:
                task.stop()

        self.assertGreaterEqual(task.failures, 1)

    def test_run_immediately(self) -> None:
        ran = threading.Event()
        task = PeriodicTask("sync", ran.set, 300, run_immediately=True)
        task.start()
        try:
            self.assertTrue(ran.wait(5))
        finally:
            task.stop()

    def test_run_forever_exits_when_context_cancelled(self) -> None:
        ctx = SyncContext.background()
        task = PeriodicTask("sweep", lambda: None, 300)
        threading.Timer(0.05, ctx.cancel).start()

        started = time.monotonic()
        task.run_forever(ctx)

        self.assertLess(time.monotonic() - started, 5)

    def test_parent_context_cancel_stops_thread(self) -> None:
        parent = SyncContext.background()
        task = PeriodicTask("sweep", lambda: None, 300)
        task.start(parent)

        parent.cancel()
        thread = task._thread
        assert thread is not None
        thread.join(5)

        self.assertFalse(thread.is_alive())

    def test_run_once_reports_failure(self) -> None:
        def boom():
            raise RuntimeError("x")

        task = PeriodicTask("sweep", boom, 1)
        with self.assertLogs("gdrivesync.lifecycle.periodic", level="ERROR"):
            self.assertFalse(task.run_once())
        self.assertTrue(PeriodicTask("sweep", lambda: None, 1).run_once())


if __name__ == "__main__":
    unittest.main()
