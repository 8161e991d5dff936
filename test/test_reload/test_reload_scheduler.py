"""
Test suite for ReloadScheduler.
"""

import threading
import time
import unittest

from hotprops.core.enums import TimeUnit
from hotprops.reload.scheduler import ReloadScheduler


def wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestReloadScheduler(unittest.TestCase):

    def setUp(self):
        self.scheduler = ReloadScheduler()
        self.calls = []
        self.calls_lock = threading.Lock()

    def tearDown(self):
        self.scheduler.shutdown(wait=True, timeout=2)

    def record(self):
        with self.calls_lock:
            self.calls.append(time.monotonic())

    def test_runs_periodically(self):
        self.scheduler.schedule_at_fixed_rate(self.record, 0, 20, TimeUnit.MILLISECONDS)
        self.assertTrue(wait_until(lambda: len(self.calls) >= 3))

    def test_initial_delay(self):
        start = time.monotonic()
        self.scheduler.schedule_at_fixed_rate(self.record, 200, 200, TimeUnit.MILLISECONDS)
        time.sleep(0.05)
        self.assertEqual(self.calls, [])

        self.assertTrue(wait_until(lambda: len(self.calls) >= 1))
        self.assertGreaterEqual(self.calls[0] - start, 0.19)

    def test_failing_task_keeps_its_schedule(self):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise IOError("source unavailable")

        self.scheduler.schedule_at_fixed_rate(flaky, 0, 10, TimeUnit.MILLISECONDS)
        self.assertTrue(wait_until(lambda: len(attempts) >= 3))

    def test_cancel_stops_task(self):
        handle = self.scheduler.schedule_at_fixed_rate(self.record, 0, 10, TimeUnit.MILLISECONDS)
        self.assertTrue(wait_until(lambda: len(self.calls) >= 1))

        handle.cancel()
        handle.join(2)
        count = len(self.calls)
        time.sleep(0.05)

        self.assertTrue(handle.cancelled)
        self.assertEqual(len(self.calls), count)

    def test_cancelled_task_is_discarded(self):
        kept = self.scheduler.schedule_at_fixed_rate(self.record, 1, 1)
        dropped = self.scheduler.schedule_at_fixed_rate(self.record, 1, 1)

        dropped.cancel()

        self.assertEqual(self.scheduler.scheduled_tasks, [kept])
        self.assertNotEqual(kept.name, self.scheduler.schedule_at_fixed_rate(self.record, 1, 1).name)

    def test_shutdown_rejects_new_tasks(self):
        handle = self.scheduler.schedule_at_fixed_rate(self.record, 1, 1)
        self.scheduler.shutdown(wait=True, timeout=2)

        self.assertTrue(handle.cancelled)
        self.assertTrue(self.scheduler.is_shutdown)
        with self.assertRaises(RuntimeError):
            self.scheduler.schedule_at_fixed_rate(self.record, 1, 1)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            self.scheduler.schedule_at_fixed_rate(self.record, 0, 0)
        with self.assertRaises(ValueError):
            self.scheduler.schedule_at_fixed_rate(self.record, -1, 1)


if __name__ == "__main__":
    unittest.main()
