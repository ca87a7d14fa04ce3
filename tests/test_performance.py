import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from PySide6.QtCore import QCoreApplication

from core.performance import FrameBudgetMonitor, RecoveryPolicy


def setUpModule():
    global _app
    _app = QCoreApplication.instance() or QCoreApplication([])


class TestFrameBudgetMonitor(unittest.TestCase):
    def setUp(self):
        self.monitor = FrameBudgetMonitor(frame_pulse=False)
        self.samples = []
        self.transitions = []
        self.monitor.subscribe(self.samples.append)
        self.monitor.subscribe_state(self.transitions.append)

    def tearDown(self):
        self.monitor.stop()

    def test_starts_healthy(self):
        self.assertEqual(self.monitor.fps, 60)
        self.assertFalse(self.monitor.is_degraded)

    def test_degrade_is_edge_triggered(self):
        for fps in (60, 60, 40, 40, 40):
            self.monitor.record_sample(fps)
        self.assertEqual(len(self.samples), 5)
        self.assertEqual(len(self.transitions), 1)
        self.assertEqual(self.transitions[0].fps, 40)
        self.assertTrue(self.transitions[0].is_degraded)
        self.assertTrue(self.monitor.is_degraded)

    def test_threshold_is_strict(self):
        self.monitor.record_sample(45)
        self.assertFalse(self.monitor.is_degraded)
        self.monitor.record_sample(44)
        self.assertTrue(self.monitor.is_degraded)

    def test_stays_degraded_by_default(self):
        self.monitor.record_sample(30)
        self.monitor.record_sample(60)
        self.assertTrue(self.monitor.is_degraded)
        self.assertEqual(len(self.transitions), 1)

    def test_recover_policy_restores_above_threshold(self):
        monitor = FrameBudgetMonitor(recovery_policy=RecoveryPolicy.RECOVER, frame_pulse=False)
        transitions = []
        monitor.subscribe_state(transitions.append)

        monitor.record_sample(30)
        monitor.record_sample(50)   # between thresholds: no change
        self.assertTrue(monitor.is_degraded)
        monitor.record_sample(58)
        self.assertFalse(monitor.is_degraded)
        self.assertEqual([t.is_degraded for t in transitions], [True, False])

    def test_policy_accepts_config_value(self):
        monitor = FrameBudgetMonitor(recovery_policy="recover", frame_pulse=False)
        self.assertIs(monitor.recovery_policy, RecoveryPolicy.RECOVER)

    def test_frames_become_fps_sample(self):
        for _ in range(30):
            self.monitor.frame()
        self.monitor._on_sample_tick()
        self.assertEqual(self.monitor.fps, 30)
        self.assertTrue(self.monitor.is_degraded)
        # the window resets after each sample
        self.monitor._on_sample_tick()
        self.assertEqual(self.monitor.fps, 0)

    def test_no_callbacks_after_stop(self):
        self.monitor.start()
        self.assertTrue(self.monitor.is_running)
        self.monitor.stop()
        self.assertFalse(self.monitor.is_running)

        self.monitor.record_sample(10)
        self.assertEqual(self.samples, [])
        self.assertEqual(self.transitions, [])

    def test_unsubscribe(self):
        extra = []
        unsubscribe = self.monitor.subscribe(extra.append)
        self.monitor.record_sample(60)
        unsubscribe()
        unsubscribe()
        self.monitor.record_sample(60)
        self.assertEqual(len(extra), 1)
        self.assertEqual(len(self.samples), 2)


if __name__ == "__main__":
    unittest.main()
