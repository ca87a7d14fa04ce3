# core/performance.py
"""
Frame budget monitor.

Counts frames delivered by the event loop, turns them into an fps sample once
per second and tells subscribers when the app falls below its frame budget so
they can drop expensive animation. One instance is created at startup, held by
AppState, and stopped at teardown.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List

from PySide6.QtCore import QObject, QTimer, Qt

from core.models import PerformanceSample

logger = logging.getLogger(__name__)

DEGRADE_BELOW_FPS = 45
RECOVER_ABOVE_FPS = 55
SAMPLE_INTERVAL_MS = 1000
FRAME_INTERVAL_MS = 16  # one frame at 60 Hz

SampleCallback = Callable[[PerformanceSample], None]


class RecoveryPolicy(str, Enum):
    STAY_DEGRADED = "stay_degraded"  # once degraded, stay degraded for the session
    RECOVER = "recover"              # restore when fps climbs back above RECOVER_ABOVE_FPS


class FrameBudgetMonitor(QObject):
    def __init__(
        self,
        recovery_policy: RecoveryPolicy = RecoveryPolicy.STAY_DEGRADED,
        frame_pulse: bool = True,
        parent=None,
    ):
        super().__init__(parent)
        self.recovery_policy = RecoveryPolicy(recovery_policy)

        self._frames = 0
        self._sample = PerformanceSample(fps=60, is_degraded=False)
        self._running = False
        self._stopped = False

        self._sample_listeners: List[SampleCallback] = []
        self._state_listeners: List[SampleCallback] = []

        # Without a real paint loop to hook, a precise 16 ms timer stands in for
        # frames: it only fires as often as the event loop is free to run it.
        self._frame_timer = QTimer(self)
        self._frame_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self.frame)
        self._frame_pulse = frame_pulse

        self._sample_timer = QTimer(self)
        self._sample_timer.setInterval(SAMPLE_INTERVAL_MS)
        self._sample_timer.timeout.connect(self._on_sample_tick)

    # --- lifecycle ---
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._stopped = False
        self._frames = 0
        if self._frame_pulse:
            self._frame_timer.start()
        self._sample_timer.start()

    def stop(self) -> None:
        self._frame_timer.stop()
        self._sample_timer.stop()
        self._running = False
        self._stopped = True

    @property
    def is_running(self) -> bool:
        return self._running

    # --- observers ---
    def subscribe(self, callback: SampleCallback) -> Callable[[], None]:
        """Every sample (at most once per second). Returns an unsubscribe function."""
        return self._add_listener(self._sample_listeners, callback)

    def subscribe_state(self, callback: SampleCallback) -> Callable[[], None]:
        """Only degrade/restore transitions. Returns an unsubscribe function."""
        return self._add_listener(self._state_listeners, callback)

    @staticmethod
    def _add_listener(listeners: List[SampleCallback], callback: SampleCallback) -> Callable[[], None]:
        listeners.append(callback)

        def unsubscribe() -> None:
            if callback in listeners:
                listeners.remove(callback)

        return unsubscribe

    # --- sampling ---
    def frame(self) -> None:
        """Count one completed frame. Hosts with a real paint hook call this directly."""
        self._frames += 1

    def _on_sample_tick(self) -> None:
        fps = self._frames
        self._frames = 0
        self.record_sample(fps)

    def record_sample(self, fps: int) -> PerformanceSample:
        fps = max(0, int(fps))
        was_degraded = self._sample.is_degraded
        degraded = was_degraded

        if fps < DEGRADE_BELOW_FPS:
            degraded = True
        elif (
            was_degraded
            and fps > RECOVER_ABOVE_FPS
            and self.recovery_policy is RecoveryPolicy.RECOVER
        ):
            degraded = False

        self._sample = PerformanceSample(fps=fps, is_degraded=degraded)

        if degraded != was_degraded:
            if degraded:
                logger.warning("FPS drop detected (%d fps). Engaging low power optimizations.", fps)
            else:
                logger.info("Frame rate recovered (%d fps). Restoring full visuals.", fps)
            self._notify(self._state_listeners)

        self._notify(self._sample_listeners)
        return self._sample

    def _notify(self, listeners: List[SampleCallback]) -> None:
        if self._stopped:
            return
        sample = self._sample
        for cb in list(listeners):
            cb(sample)

    # --- getters ---
    @property
    def sample(self) -> PerformanceSample:
        return self._sample

    @property
    def fps(self) -> int:
        return self._sample.fps

    @property
    def is_degraded(self) -> bool:
        return self._sample.is_degraded
