"""Per-frame scheduling for the orbit view.

Each frame is a single-shot request re-armed after the previous step has
completed, so steps never overlap and nothing is queued while the loop is
paused or stopped.
"""

from __future__ import annotations

import enum
import time
from typing import Callable, Optional

from PyQt5 import QtCore

from .config import DEFAULT_FRAME_INTERVAL_MS, MAX_FRAME_DT_MS

__all__ = ["FrameScheduler", "SchedulerState", "clamp_frame_delta"]

StepCallback = Callable[[float, float], None]


def clamp_frame_delta(raw_ms: float, max_ms: float = MAX_FRAME_DT_MS) -> float:
    """Return the elapsed time in seconds, clamped to ``[0, max_ms]`` milliseconds."""

    return max(0.0, min(float(max_ms), float(raw_ms))) / 1000.0


def _elapsed_clock() -> Callable[[], float]:
    origin = time.perf_counter()

    def _now_ms() -> float:
        return (time.perf_counter() - origin) * 1000.0

    return _now_ms


class SchedulerState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"


class FrameScheduler(QtCore.QObject):
    """Drive ``step(now_ms, dt_seconds)`` once per display refresh.

    ``clock`` returns milliseconds (elapsed since construction by default) and
    ``request_frame`` arms the next tick (a single-shot ``QTimer`` by default);
    both may be replaced in tests.
    """

    frameStepped = QtCore.pyqtSignal(int)
    stateChanged = QtCore.pyqtSignal(str)

    def __init__(
        self,
        step: StepCallback,
        *,
        interval_ms: int = DEFAULT_FRAME_INTERVAL_MS,
        max_dt_ms: float = MAX_FRAME_DT_MS,
        clock: Optional[Callable[[], float]] = None,
        request_frame: Optional[Callable[[], None]] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._step = step
        self._clock = clock or _elapsed_clock()
        self._max_dt_ms = float(max_dt_ms)
        self._interval_ms = max(0, int(interval_ms))
        self._state = SchedulerState.STOPPED
        self._last_ms = 0.0
        self.frame_count = 0
        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.tick)
        self._request = request_frame or self._arm_timer

    # ------------------------------------------------------------------ state
    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SchedulerState.RUNNING

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def set_interval(self, interval_ms: int) -> None:
        self._interval_ms = max(0, int(interval_ms))

    def _set_state(self, state: SchedulerState) -> None:
        if state is self._state:
            return
        self._state = state
        self.stateChanged.emit(state.value)

    def _arm_timer(self) -> None:
        self._timer.start(self._interval_ms)

    # ------------------------------------------------------------------ API
    def start(self) -> None:
        if self._state is SchedulerState.RUNNING:
            return
        self._last_ms = self._clock()
        self._set_state(SchedulerState.RUNNING)
        self._request()

    def pause(self) -> None:
        if self._state is not SchedulerState.RUNNING:
            return
        self._timer.stop()
        self._set_state(SchedulerState.PAUSED)

    def resume(self) -> None:
        if self._state is not SchedulerState.PAUSED:
            return
        self._last_ms = self._clock()
        self._set_state(SchedulerState.RUNNING)
        self._request()

    def stop(self) -> None:
        self._timer.stop()
        self._set_state(SchedulerState.STOPPED)

    def tick(self) -> None:
        """Run one step and, if still running, request the next one."""

        if self._state is not SchedulerState.RUNNING:
            return
        now = self._clock()
        dt = clamp_frame_delta(now - self._last_ms, self._max_dt_ms)
        self._last_ms = now
        self._step(now, dt)
        self.frame_count += 1
        self.frameStepped.emit(self.frame_count)
        if self._state is SchedulerState.RUNNING:
            self._request()
