"""Tests for debouncer.py - cancel-and-reschedule timer."""

import threading
import time

from debouncer import Debouncer


class TestDebouncer:
    """Tests for Debouncer."""

    def test_default_delay(self):
        assert Debouncer().delay == 0.12

    def test_runs_after_delay(self):
        done = threading.Event()
        debouncer = Debouncer(delay_ms=10)

        debouncer.call(done.set)

        assert done.wait(timeout=2)
        assert debouncer.pending is False

    def test_only_latest_call_runs(self):
        calls = []
        done = threading.Event()

        def record(value):
            calls.append(value)
            done.set()

        debouncer = Debouncer(delay_ms=50)
        for value in ("1", "12", "123"):
            debouncer.call(record, value)

        assert done.wait(timeout=2)
        time.sleep(0.1)
        assert calls == ["123"]

    def test_cancel_drops_pending_call(self):
        calls = []
        debouncer = Debouncer(delay_ms=50)

        debouncer.call(calls.append, "x")
        assert debouncer.pending is True
        debouncer.cancel()

        time.sleep(0.15)
        assert calls == []
        assert debouncer.pending is False

    def test_cancel_without_pending_call(self):
        Debouncer().cancel()
