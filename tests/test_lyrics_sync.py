import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from core.lyrics_sync import DEFAULT_LINE_EXTENT, LyricsSyncEngine, compute_follow_offset
from core.models import FollowState

LRC = "[00:00.00] one\n[00:10.00] two\n[00:20.00] three\n[00:30.00] four"


class SyncHarness:
    def __init__(self, **kwargs):
        self.engine = LyricsSyncEngine(viewport_extent=400, **kwargs)
        self.directives = []
        self.indices = []
        self.states = []
        self.engine.on_follow = self.directives.append
        self.engine.on_active_index_changed = self.indices.append
        self.engine.on_follow_state_changed = self.states.append


class TestFollowOffset(unittest.TestCase):
    def test_line_centre_at_anchor(self):
        # 35% of 400 = 140; line middle at 500 + 24
        self.assertAlmostEqual(compute_follow_offset(500, 48, 400), 524 - 140)

    def test_clamped_to_scroll_range(self):
        self.assertEqual(compute_follow_offset(0, 48, 400), 0.0)
        self.assertEqual(compute_follow_offset(5000, 48, 400, max_offset=1000), 1000)


class TestLyricsSyncEngine(unittest.TestCase):
    def setUp(self):
        self.h = SyncHarness()
        self.engine = self.h.engine
        self.engine.load_track(LRC)

    def test_load_starts_following_first_line(self):
        self.assertEqual(len(self.engine.lines), 4)
        self.assertEqual(self.engine.active_index, 0)
        self.assertIs(self.engine.follow_state, FollowState.AUTO_FOLLOWING)
        self.assertEqual(self.h.directives[-1].line_index, 0)

    def test_clock_moves_active_line_and_follows(self):
        self.h.directives.clear()
        self.assertEqual(self.engine.update_clock(15.0), 1)
        self.assertEqual(self.h.indices[-1], 1)
        d = self.h.directives[-1]
        self.assertEqual(d.line_index, 1)
        self.assertTrue(d.smooth)
        expected = compute_follow_offset(DEFAULT_LINE_EXTENT, DEFAULT_LINE_EXTENT, 400)
        self.assertAlmostEqual(d.target_offset, expected)
        self.assertTrue(self.engine.is_current(d))

    def test_same_line_issues_no_new_directive(self):
        self.engine.update_clock(11.0)
        count = len(self.h.directives)
        self.engine.update_clock(12.0)
        self.assertEqual(len(self.h.directives), count)

    def test_user_scroll_suppresses_directives(self):
        self.engine.update_clock(11.0)
        pending = self.h.directives[-1]
        self.engine.user_scrolled()
        self.assertIs(self.engine.follow_state, FollowState.USER_OVERRIDDEN)
        self.assertFalse(self.engine.is_current(pending))

        count = len(self.h.directives)
        self.engine.update_clock(21.0)
        # highlight still tracks the clock, the view is not scrolled
        self.assertEqual(self.engine.active_index, 2)
        self.assertEqual(self.h.indices[-1], 2)
        self.assertEqual(len(self.h.directives), count)

    def test_resume_sync_follows_current_line(self):
        self.engine.user_scrolled()
        self.engine.update_clock(21.0)
        self.engine.resume_sync()
        self.assertIs(self.engine.follow_state, FollowState.AUTO_FOLLOWING)
        self.assertEqual(self.h.directives[-1].line_index, 2)
        self.assertEqual(
            self.h.states,
            [FollowState.USER_OVERRIDDEN, FollowState.AUTO_FOLLOWING],
        )

    def test_newer_directive_supersedes_older(self):
        self.engine.update_clock(11.0)
        first = self.h.directives[-1]
        self.engine.update_clock(21.0)
        second = self.h.directives[-1]
        self.assertGreater(second.generation, first.generation)
        self.assertFalse(self.engine.is_current(first))
        self.assertTrue(self.engine.is_current(second))

    def test_cancel_follow_invalidates_directive(self):
        self.engine.update_clock(11.0)
        d = self.h.directives[-1]
        self.engine.cancel_follow()
        self.assertFalse(self.engine.is_current(d))

    def test_offset_steps(self):
        self.engine.update_clock(9.85)
        self.assertEqual(self.engine.active_index, 0)
        self.engine.adjust_offset(1)
        self.engine.adjust_offset(1)
        self.assertEqual(self.engine.offset, 0.2)
        self.assertEqual(self.engine.active_index, 1)
        self.engine.adjust_offset(-3)
        self.assertEqual(self.engine.offset, -0.1)
        self.assertEqual(self.engine.active_index, 0)

    def test_reparse_resets_cursor_and_follow(self):
        self.engine.update_clock(25.0)
        self.engine.adjust_offset(5)
        self.engine.user_scrolled()

        self.engine.reparse("[00:00.00] a\n[00:05.00] b")
        self.assertEqual(self.engine.offset, 0.0)
        self.assertIs(self.engine.follow_state, FollowState.AUTO_FOLLOWING)
        self.assertEqual(len(self.engine.lines), 2)
        # cursor re-resolved against the current clock
        self.assertEqual(self.engine.active_index, 1)

    def test_new_track_starts_from_its_first_line(self):
        self.engine.update_clock(200.0, seq=9)
        self.assertEqual(self.engine.active_index, 3)
        self.h.directives.clear()

        self.engine.load_track(LRC)
        self.assertEqual(self.engine.active_index, 0)
        self.assertEqual([d.line_index for d in self.h.directives], [0])
        # tick numbering restarts with the new track
        self.assertEqual(self.engine.update_clock(12.0, seq=1), 1)

    def test_stale_clock_tick_is_ignored(self):
        self.engine.update_clock(21.0, seq=5)
        self.assertEqual(self.engine.update_clock(1.0, seq=4), 2)
        self.assertEqual(self.engine.active_index, 2)
        self.assertEqual(self.engine.update_clock(11.0, seq=6), 1)

    def test_seek_to_line_resumes(self):
        self.engine.user_scrolled()
        self.assertEqual(self.engine.seek_to_line(3), 30.0)
        self.assertIs(self.engine.follow_state, FollowState.AUTO_FOLLOWING)
        self.assertIsNone(self.engine.seek_to_line(42))

    def test_reduce_motion_jumps(self):
        self.engine.reduce_motion = True
        self.engine.update_clock(11.0)
        self.assertFalse(self.h.directives[-1].smooth)

    def test_empty_track_has_no_active_line(self):
        self.h.directives.clear()
        self.engine.load_track("just text, no tags")
        self.assertEqual(self.engine.lines, ())
        self.assertEqual(self.engine.update_clock(50.0), -1)
        self.assertEqual(self.h.directives, [])


class TestCustomGeometry(unittest.TestCase):
    def test_follow_uses_measured_line_geometry(self):
        h = SyncHarness(line_geometry=lambda i: (100.0 * i, 60.0))
        h.engine.set_viewport(200, max_offset=10000)
        h.engine.load_track(LRC)
        h.engine.update_clock(31.0)
        # 300 + 30 - 70
        self.assertAlmostEqual(h.directives[-1].target_offset, 260.0)


if __name__ == "__main__":
    unittest.main()
