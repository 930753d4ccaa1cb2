"""Visibility ports — hide/show signals for the staleness watchdog.

A port turns host-specific suspend/resume signals into VisibilityHidden /
VisibilityShown mailbox events. The reducer decides staleness with
``is_stale``; ports only report timestamps.

- ManualVisibilityPort: driven by the host (UI toolkit callbacks, tests)
- HeartbeatVisibilityPort: detects process suspension from tick gaps
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable

from crashclient.core.events import Event, VisibilityHidden, VisibilityShown

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MS = 10_000

EventSink = Callable[[Event], None]


def now_ms() -> int:
    return int(time.time() * 1000)


def is_stale(last_visibility_ms: int, current_ms: int, threshold_ms: int) -> bool:
    return current_ms - last_visibility_ms >= threshold_ms


class VisibilityPort(ABC):
    """Started on entry to the connected states, stopped on exit."""

    @abstractmethod
    def start(self, sink: EventSink) -> None:
        """Begin reporting hide/show signals to ``sink``."""

    @abstractmethod
    def stop(self) -> None:
        """Stop reporting. Safe to call when not started."""


class ManualVisibilityPort(VisibilityPort):
    """Host-driven port. Signals outside start/stop are dropped."""

    def __init__(self, clock: Callable[[], int] = now_ms):
        self._clock = clock
        self._sink: EventSink | None = None

    @property
    def running(self) -> bool:
        return self._sink is not None

    def start(self, sink: EventSink) -> None:
        self._sink = sink

    def stop(self) -> None:
        self._sink = None

    def hide(self, timestamp_ms: int | None = None) -> None:
        if self._sink is not None:
            self._sink(VisibilityHidden(self._stamp(timestamp_ms)))

    def show(self, timestamp_ms: int | None = None) -> None:
        if self._sink is not None:
            self._sink(VisibilityShown(self._stamp(timestamp_ms)))

    def _stamp(self, timestamp_ms: int | None) -> int:
        return self._clock() if timestamp_ms is None else timestamp_ms


class HeartbeatVisibilityPort(VisibilityPort):
    """Treats a late tick as the process having been suspended.

    A daemon thread wakes every ``interval_s``. When the wall-clock gap
    since the previous tick exceeds ``interval_s + tolerance_s`` it reports
    a hide at the previous tick and a show now, letting the reducer judge
    whether the gap was long enough to distrust the connection.
    """

    def __init__(
        self,
        interval_s: float = 1.0,
        tolerance_s: float = 2.0,
        clock: Callable[[], int] = now_ms,
    ):
        self._interval_s = interval_s
        self._tolerance_ms = int((interval_s + tolerance_s) * 1000)
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._sink: EventSink | None = None
        self._last_tick_ms = 0

    def start(self, sink: EventSink) -> None:
        if self._thread is not None and self._thread.is_alive():
            self._sink = sink
            return
        self._sink = sink
        self._stop.clear()
        self._last_tick_ms = self._clock()
        self._thread = threading.Thread(
            target=self._run, daemon=True, name="visibility-heartbeat",
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._sink = None
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval_s * 2)

    def tick(self) -> None:
        """One heartbeat. Called by the thread; exposed for deterministic tests."""
        current = self._clock()
        sink = self._sink
        if sink is not None and current - self._last_tick_ms > self._tolerance_ms:
            logger.info(
                "Heartbeat gap of %d ms, reporting suspension",
                current - self._last_tick_ms,
            )
            sink(VisibilityHidden(self._last_tick_ms))
            sink(VisibilityShown(current))
        self._last_tick_ms = current

    def _run(self) -> None:
        while not self._stop.wait(self._interval_s):
            self.tick()
