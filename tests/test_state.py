import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from PySide6.QtCore import QCoreApplication

from core.performance import FrameBudgetMonitor
from core.state import AppState
from db.models import Config


def setUpModule():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


class TestAppState(unittest.TestCase):
    def setUp(self):
        self.state = AppState()
        self.state.config = Config()
        self.monitor = FrameBudgetMonitor(frame_pulse=False)
        self.state.attach_monitor(self.monitor)

        self.low_power = []
        self.notes = []
        self.samples = []
        self.state.low_power_changed.connect(self.low_power.append)
        self.state.notification.connect(self.notes.append)
        self.state.fps_sampled.connect(self.samples.append)

    def tearDown(self):
        self.state.detach_monitor()
        self.monitor.stop()

    def test_degrade_turns_on_low_power_and_warns_once(self):
        for fps in (60, 30, 30):
            self.monitor.record_sample(fps)
        self.assertTrue(self.state.low_power)
        self.assertEqual(self.low_power, [True])
        self.assertEqual([n.notify_type for n in self.notes], ["warning"])
        self.assertEqual([s.fps for s in self.samples], [60, 30, 30])

    def test_reduce_motion_setting_is_low_power(self):
        self.state.update_config(reduce_motion=True)
        self.assertTrue(self.state.low_power)
        self.assertEqual(self.low_power, [True])
        # unchanged low-power state: no signal
        self.state.update_config(list_overscan=3)
        self.assertEqual(self.low_power, [True])

    def test_detach_stops_forwarding(self):
        self.state.detach_monitor()
        self.monitor.record_sample(10)
        self.assertEqual(self.samples, [])
        self.assertEqual(self.notes, [])

    def test_notify(self):
        self.state.notify("hello", "success")
        self.assertEqual(self.notes[0].message, "hello")
        self.assertEqual(self.notes[0].notify_type, "success")

    def test_signals_are_the_ones_the_ui_listens_to(self):
        for name in ("notification", "low_power_changed", "fps_sampled"):
            self.assertTrue(hasattr(AppState, name), name)
        self.assertFalse(hasattr(AppState, "status_changed"))


if __name__ == "__main__":
    unittest.main()
