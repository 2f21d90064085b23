"""Tests for throttle()."""

import threading
import time

import pytest
from structlog.testing import capture_logs

from underbar.core.errors import InvalidArgument
from underbar.execution.testing import ManualTimerFacility
from underbar.execution.throttle import Throttled, throttle
from underbar.execution.timers import set_default_timers


class TestLeadingEdge:
    """Calls outside an active window run immediately."""

    def test_first_call_runs_immediately(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        assert throttled("a") == 1
        assert recorder.args == [("a",)]

    def test_calls_spaced_beyond_window_run_immediately(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        timers.advance(150)
        throttled(2)
        assert recorder.args == [(1,), (2,)]
        assert timers.pending == 0
        timers.run_all()
        assert recorder.count == 2

    def test_call_exactly_at_window_end_runs_immediately(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        timers.advance(100)
        assert throttled(2) == 2
        assert recorder.count == 2

    def test_zero_wait_never_defers(self, timers, recorder):
        throttled = throttle(recorder, 0, timers=timers)
        for i in range(5):
            throttled(i)
        assert recorder.count == 5
        assert timers.pending == 0


class TestTrailingEdge:
    """Calls inside an active window coalesce into one trailing call."""

    @pytest.mark.parametrize("n", [2, 3, 10, 50])
    def test_n_calls_in_one_window_invoke_twice(self, timers, recorder, n):
        throttled = throttle(recorder, 100, timers=timers)
        for i in range(n):
            throttled(i)
            timers.advance(1)
        timers.run_all()
        assert recorder.count == 2

    def test_trailing_call_uses_latest_arguments(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled("first")
        throttled("second")
        throttled("third", flag=True)
        timers.advance(100)
        assert recorder.calls == [(("first",), {}), (("third",), {"flag": True})]

    def test_trailing_fires_at_window_close(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        timers.advance(30)
        throttled(2)
        timers.advance(69)
        assert recorder.count == 1
        timers.advance(1)
        assert recorder.count == 2

    def test_only_one_trailing_timer_outstanding(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        for i in range(5):
            throttled(i)
            assert timers.pending == 1
        assert throttled.pending is True

    def test_returns_last_known_result(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        assert throttled() == 1
        # Trailing call is scheduled, not run: stale result
        assert throttled() == 1
        timers.advance(100)
        assert recorder.count == 2
        timers.advance(50)
        # Still inside the window the trailing call opened
        assert throttled() == 2

    def test_trailing_call_opens_new_window(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        throttled(2)
        timers.advance(100)  # trailing fires at t=100
        timers.advance(50)
        throttled(3)  # t=150, inside window opened at t=100
        assert recorder.count == 2
        timers.advance(49)
        assert recorder.count == 2
        timers.advance(1)  # t=200
        assert recorder.args == [(1,), (2,), (3,)]

    def test_no_trailing_call_without_calls_in_window(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        timers.run_all()
        assert recorder.count == 1
        assert throttled.pending is False


class TestLateTimer:
    """A late trailing timer is superseded by a leading call."""

    def test_leading_call_cancels_overdue_trailing(self, timers, recorder):
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        throttled(2)
        timers.stall(250)
        with capture_logs() as logs:
            throttled(3)
        assert recorder.args == [(1,), (3,)]
        assert timers.pending == 0
        assert "throttle.superseded" in [log["event"] for log in logs]
        timers.run_all()
        assert recorder.count == 2

    def test_stale_trailing_callback_is_ignored(self, recorder):
        """A callback claimed before it was superseded must not run the next window's call."""

        class CapturingTimers(ManualTimerFacility):
            def __init__(self):
                super().__init__()
                self.scheduled = []

            def call_later(self, delay_ms, callback, *args):
                self.scheduled.append((callback, args))
                return super().call_later(delay_ms, callback, *args)

        timers = CapturingTimers()
        throttled = throttle(recorder, 100, timers=timers)
        throttled(1)
        throttled(2)
        timers.stall(100)
        throttled(3)  # window reopens at t=100, first trailing call superseded
        timers.stall(10)
        throttled(4)  # schedules a fresh trailing call for t=200

        stale_callback, stale_args = timers.scheduled[0]
        stale_callback(*stale_args)
        assert recorder.args == [(1,), (3,)]
        assert throttled.pending is True

        timers.advance(89)
        assert recorder.count == 2
        timers.advance(1)
        assert recorder.args == [(1,), (3,), (4,)]
        assert timers.now() == 200


class TestThrottleWrapper:
    """Wrapper behaviour and validation."""

    def test_type_and_metadata(self, timers):
        def save():
            """Persist."""

        throttled = throttle(save, 10, timers=timers)
        assert isinstance(throttled, Throttled)
        assert throttled.__name__ == "save"
        assert throttled.__doc__ == "Persist."

    def test_as_method(self, timers):
        class Saver:
            saved: list = []

            def save(self, doc):
                self.saved.append(doc)
                return doc

            save = throttle(save, 100, timers=timers)

        saver = Saver()
        assert saver.save("v1") == "v1"
        saver.save("v2")
        timers.advance(100)
        assert Saver.saved == ["v1", "v2"]

    def test_exception_from_leading_call_propagates(self, timers):
        def failing():
            raise ValueError("boom")

        throttled = throttle(failing, 100, timers=timers)
        with pytest.raises(ValueError):
            throttled()

    def test_uses_default_facility(self, timers, recorder):
        set_default_timers(timers)
        throttled = throttle(recorder, 100)
        throttled(1)
        throttled(2)
        timers.advance(100)
        assert recorder.count == 2

    def test_logs_state_transitions(self, timers):
        throttled = throttle(lambda: None, 100, timers=timers)
        with capture_logs() as logs:
            throttled()
            throttled()
            timers.advance(100)
        assert [log["event"] for log in logs] == [
            "throttle.leading",
            "throttle.trailing_scheduled",
            "throttle.trailing_fired",
        ]

    @pytest.mark.parametrize("wait", [-5, "100", None])
    def test_rejects_bad_wait(self, timers, wait):
        with pytest.raises(InvalidArgument):
            throttle(print, wait, timers=timers)

    def test_rejects_non_callable(self, timers):
        with pytest.raises(InvalidArgument):
            throttle(None, 10, timers=timers)


class TestThrottleRealTimers:
    """End-to-end on the thread-backed facility."""

    @pytest.mark.slow
    def test_burst_then_trailing(self):
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            if len(calls) == 2:
                done.set()
            return value

        throttled = throttle(record, 50)
        for i in range(10):
            throttled(i)
        assert calls == [0]
        assert done.wait(2.0)
        time.sleep(0.1)
        assert calls == [0, 9]
