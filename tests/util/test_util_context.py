import threading
import time
import unittest
from unittest.mock import Mock

from gdrivesync.errors import DeadlineExceeded, OperationCanceled
from gdrivesync.util.context import SyncContext, call_with_deadline


class TestSyncContext(unittest.TestCase):
    def test_background_is_never_done(self) -> None:
        ctx = SyncContext.background()
        self.assertFalse(ctx.done())
        self.assertIsNone(ctx.err())
        self.assertIsNone(ctx.remaining())

    def test_cancel_propagates_to_children(self) -> None:
        parent = SyncContext.background()
        child = parent.with_timeout(60)
        grandchild = child.with_timeout(60)

        parent.cancel()

        self.assertTrue(child.cancelled)
        self.assertTrue(grandchild.cancelled)
        self.assertIsInstance(grandchild.err(), OperationCanceled)

    def test_child_of_cancelled_parent_starts_cancelled(self) -> None:
        parent = SyncContext.background()
        parent.cancel()
        self.assertTrue(parent.with_timeout(10).cancelled)

    def test_cancelling_child_leaves_parent_running(self) -> None:
        parent = SyncContext.background()
        child = parent.with_timeout(60)
        child.cancel()
        self.assertFalse(parent.done())

    def test_child_keeps_tighter_deadline(self) -> None:
        parent = SyncContext.background().with_timeout(1)
        child = parent.with_timeout(100)
        self.assertEqual(child.deadline, parent.deadline)

    def test_expired_context_reports_deadline(self) -> None:
        ctx = SyncContext.background().with_timeout(0)
        self.assertTrue(ctx.done())
        self.assertIsInstance(ctx.err(), DeadlineExceeded)
        with self.assertRaises(DeadlineExceeded):
            ctx.raise_if_done()

    def test_wait_unblocks_on_cancel(self) -> None:
        ctx = SyncContext.background()
        threading.Timer(0.05, ctx.cancel).start()

        started = time.monotonic()
        done = ctx.wait(30)

        self.assertTrue(done)
        self.assertLess(time.monotonic() - started, 5)

    def test_wait_returns_false_when_not_done(self) -> None:
        self.assertFalse(SyncContext.background().wait(0.01))

    def test_on_cancel_unregister(self) -> None:
        ctx = SyncContext.background()
        calls = []
        unregister = ctx.on_cancel(lambda: calls.append("x"))
        unregister()
        ctx.cancel()
        self.assertEqual(calls, [])

    def test_on_cancel_after_cancel_runs_immediately(self) -> None:
        ctx = SyncContext.background()
        ctx.cancel()
        calls = []
        ctx.on_cancel(lambda: calls.append("x"))
        self.assertEqual(calls, ["x"])


class TestCallWithDeadline(unittest.TestCase):
    def test_returns_result(self) -> None:
        self.assertEqual(call_with_deadline(SyncContext.background(), lambda a, b: a + b, 1, 2), 3)

    def test_propagates_exception(self) -> None:
        def boom():
            raise ValueError("nope")

        with self.assertRaises(ValueError):
            call_with_deadline(SyncContext.background(), boom)

    def test_deadline_releases_caller_from_hung_call(self) -> None:
        release = threading.Event()
        ctx = SyncContext.background().with_timeout(0.05)
        try:
            with self.assertRaises(DeadlineExceeded):
                call_with_deadline(ctx, release.wait, 30)
        finally:
            release.set()

    def test_cancel_releases_caller(self) -> None:
        release = threading.Event()
        ctx = SyncContext.background()
        threading.Timer(0.05, ctx.cancel).start()
        try:
            with self.assertRaises(OperationCanceled):
                call_with_deadline(ctx, release.wait, 30)
        finally:
            release.set()

    def test_done_context_fails_fast(self) -> None:
        ctx = SyncContext.background()
        ctx.cancel()
        func = Mock()
        with self.assertRaises(OperationCanceled):
            call_with_deadline(ctx, func)
        func.assert_not_called()


if __name__ == "__main__":
    unittest.main()
