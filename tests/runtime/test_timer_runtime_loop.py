import threading
import unittest
from unittest.mock import Mock

from runtime import TimerRuntime


class FakeMonotonic:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TimerRuntimeTests(unittest.TestCase):
    def test_drain_runs_submitted_commands_in_order(self) -> None:
        runtime = TimerRuntime(clock=FakeMonotonic())
        calls = []

        first = runtime.submit(calls.append, "a")
        second = runtime.submit(lambda: calls.append("b") or "done")

        self.assertEqual(2, runtime.drain())
        self.assertEqual(["a", "b"], calls)
        self.assertIsNone(first.result(timeout=0))
        self.assertEqual("done", second.result(timeout=0))

    def test_failed_command_sets_future_exception(self) -> None:
        runtime = TimerRuntime(clock=FakeMonotonic())
        future = runtime.submit(Mock(side_effect=ValueError("bad")))

        with self.assertLogs("runtime", level="ERROR"):
            runtime.drain()

        with self.assertRaises(ValueError):
            future.result(timeout=0)

    def test_call_later_runs_only_when_due(self) -> None:
        clock = FakeMonotonic()
        runtime = TimerRuntime(clock=clock)
        callback = Mock()

        runtime.call_later(1.0, callback)
        runtime.run_due(100.5)
        callback.assert_not_called()
        self.assertEqual(1, runtime.pending_callbacks)

        runtime.run_due(101.0)
        callback.assert_called_once_with()
        self.assertEqual(0, runtime.pending_callbacks)

    def test_delayed_callbacks_fire_in_due_order(self) -> None:
        runtime = TimerRuntime(clock=FakeMonotonic())
        calls = []
        runtime.call_later(2.0, lambda: calls.append("late"))
        runtime.call_later(1.0, lambda: calls.append("early"))

        runtime.run_due(103.0)

        self.assertEqual(["early", "late"], calls)

    def test_tick_handler_fires_once_per_interval(self) -> None:
        runtime = TimerRuntime(tick_interval_seconds=1.0, clock=FakeMonotonic())
        tick = Mock()
        runtime.set_tick_handler(tick)

        runtime.run_due(100.0)
        runtime.run_due(100.4)
        runtime.run_due(101.0)

        self.assertEqual(2, tick.call_count)

    def test_failing_tick_handler_is_logged(self) -> None:
        runtime = TimerRuntime(clock=FakeMonotonic())
        runtime.set_tick_handler(Mock(side_effect=RuntimeError("boom")))

        with self.assertLogs("runtime", level="ERROR"):
            runtime.run_due(100.0)

    def test_thread_processes_commands_and_stops(self) -> None:
        runtime = TimerRuntime(tick_interval_seconds=0.05)
        ticked = threading.Event()
        runtime.set_tick_handler(ticked.set)

        runtime.start()
        try:
            self.assertTrue(runtime.is_running)
            self.assertEqual(42, runtime.submit(lambda: 42).result(timeout=2.0))
            self.assertTrue(ticked.wait(timeout=2.0))
        finally:
            runtime.stop(timeout_seconds=2.0)

        self.assertFalse(runtime.is_running)


if __name__ == "__main__":
    unittest.main()
