"""
Debouncer for CalDB
Runs the latest scheduled call once input has been quiet for a short delay
"""
import threading

import config


class Debouncer:
    """Each call() cancels the pending timer and schedules a new one"""

    def __init__(self, delay_ms=config.FORMAT_DELAY_MS):
        self.delay = delay_ms / 1000.0
        self._lock = threading.Lock()
        self._timer = None
        self._generation = 0

    def call(self, fn, *args, **kwargs):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = threading.Timer(
                self.delay, self._fire, (self._generation, fn, args, kwargs)
            )
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation, fn, args, kwargs):
        with self._lock:
            # Superseded by a later call() after this timer had already expired
            if generation != self._generation:
                return
            self._timer = None
        fn(*args, **kwargs)

    def cancel(self):
        """Drop the pending call, if any"""
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    @property
    def pending(self):
        with self._lock:
            return self._timer is not None
