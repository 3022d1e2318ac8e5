#!/usr/bin/env python3
"""
Periodic loop running a body on its own thread until a stop event is set
"""

import logging
import threading
import time
from typing import Callable, Optional

from . import metrics as gauges
from .metrics import MetricsSink, NullMetricsSink

logger = logging.getLogger(__name__)


class PeriodicLoop:
    """Runs body() every interval seconds; a raising body never ends the loop"""

    def __init__(
        self,
        name: str,
        body: Callable[[], object],
        interval: float,
        stop_event: Optional[threading.Event] = None,
        sink: MetricsSink = None,
        run_immediately: bool = True
    ):
        """
        Args:
            name: Loop name used for the thread and in logs
            body: Work done once per tick
            interval: Seconds between the starts of consecutive ticks
            stop_event: Shared cancellation signal; a private one is created if omitted
            sink: Receives a loop-error event whenever body raises
            run_immediately: Run the first tick at start instead of after one interval
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.name = name
        self.body = body
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.sink = sink or NullMetricsSink()
        self.run_immediately = run_immediately
        self.iterations = 0
        self.errors = 0
        self._thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            logger.warning(f"Loop '{self.name}' already running")
            return self._thread
        self._thread = threading.Thread(target=self.run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Started loop '{self.name}' with {self.interval}s interval")
        return self._thread

    def run(self):
        """Loop body; returns once the stop event is set"""
        if not self.run_immediately and self.stop_event.wait(self.interval):
            return

        while not self.stop_event.is_set():
            started = time.monotonic()
            self.run_once()
            finished = time.monotonic()
            logger.debug(f"Loop '{self.name}' tick took {finished - started:.3f}s")

            # Fixed rate: a slow tick shortens the wait, an overrun skips it
            if self.stop_event.wait(max(0.0, started + self.interval - finished)):
                break

        logger.info(f"Loop '{self.name}' stopped after {self.iterations} iterations")

    def run_once(self):
        self.iterations += 1
        try:
            self.body()
        except Exception as e:
            self.errors += 1
            logger.error(f"Unexpected error in loop '{self.name}': {e}", exc_info=True)
            try:
                self.sink.record_event(gauges.LOOP_ERRORS, self.name)
            except Exception as sink_error:
                logger.warning(f"Failed to record loop error: {sink_error}")

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Signal the loop to stop and wait for its thread; True if it exited"""
        self.stop_event.set()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
