from __future__ import annotations
from dataclasses import dataclass
from PySide6.QtCore import QObject, Signal, Slot

from core.models import PerformanceSample
from db.database import set_config
from db.models import Config


@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warning/error


class AppState(QObject):
    notification = Signal(object)       # emits Notify
    low_power_changed = Signal(bool)    # reduce_motion setting or monitor degrade/restore
    fps_sampled = Signal(object)        # PerformanceSample

    def __init__(self):
        super().__init__()
        self.db = None
        self.config = None
        self.player = None
        self.monitor = None
        self.queued_notifications: list[Notify] = []
        self._unsubscribe_monitor = []

    @property
    def low_power(self) -> bool:
        cfg_reduce = bool(self.config and self.config.reduce_motion)
        return cfg_reduce or bool(self.monitor and self.monitor.is_degraded)

    def update_config(self, **changes) -> None:
        """Apply config changes in memory and persist them when a database is attached."""
        before = self.low_power
        self.config = (self.config or Config()).with_changes(**changes)
        if self.db is not None:
            set_config(self.db, self.config)
        if self.low_power != before:
            self.low_power_changed.emit(self.low_power)

    def attach_monitor(self, monitor) -> None:
        self.detach_monitor()
        self.monitor = monitor
        self._unsubscribe_monitor = [
            monitor.subscribe(self._on_perf_sample),
            monitor.subscribe_state(self._on_perf_state),
        ]

    def detach_monitor(self) -> None:
        for unsubscribe in self._unsubscribe_monitor:
            unsubscribe()
        self._unsubscribe_monitor = []

    def _on_perf_sample(self, sample: PerformanceSample):
        self.fps_sampled.emit(sample)

    def _on_perf_state(self, sample: PerformanceSample):
        self.low_power_changed.emit(self.low_power)
        if sample.is_degraded:
            self.notify("Low frame rate detected, reducing animations.", "warning")
        else:
            self.notify("Frame rate recovered.", "info")

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
