import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from core.windowing import (
    VisibleRange,
    Viewport,
    compute_visible_range,
    content_extent,
    item_offset,
    layout_window,
    max_scroll_offset,
)


class TestVisibleRange(unittest.TestCase):
    def test_long_list_mid_scroll(self):
        # first visible row is 4000 / 40 = 100, 15 rows fit, 5 rows overscan each side
        rng = compute_visible_range(10000, 40, 600, 4000, 5)
        self.assertEqual(rng.start, 95)
        self.assertEqual(rng.end, 120)
        self.assertLessEqual(rng.count, 15 + 2 * 5)

    def test_top_of_list_clamps_start(self):
        rng = compute_visible_range(10000, 40, 600, 0, 5)
        self.assertEqual(rng, VisibleRange(0, 20))

    def test_empty_list(self):
        rng = compute_visible_range(0, 40, 600, 0, 5)
        self.assertTrue(rng.is_empty)
        self.assertEqual(list(rng.indices()), [])

    def test_short_list_is_fully_materialized(self):
        rng = compute_visible_range(3, 40, 600, 0, 5)
        self.assertEqual(rng, VisibleRange(0, 3))

    def test_offset_past_end_never_overflows(self):
        rng = compute_visible_range(50, 40, 600, 100000, 5)
        self.assertEqual(rng.end, 50)
        self.assertLessEqual(rng.start, rng.end)
        self.assertTrue(rng.is_empty)

    def test_negative_offset_treated_as_top(self):
        self.assertEqual(
            compute_visible_range(100, 40, 600, -300, 2),
            compute_visible_range(100, 40, 600, 0, 2),
        )

    def test_zero_item_extent_yields_empty_range(self):
        self.assertTrue(compute_visible_range(100, 0, 600, 0, 5).is_empty)

    def test_partial_rows_are_included(self):
        # row 2 starts at 80 and is half visible at offset 100 with no overscan
        rng = compute_visible_range(100, 40, 100, 100, 0)
        self.assertEqual(rng.start, 2)
        self.assertIn(4, rng.indices())

    def test_bounds_hold_across_offsets(self):
        total, ext, vp, overscan = 500, 32, 480, 4
        visible = -(-vp // ext)
        for offset in range(0, 20000, 97):
            rng = compute_visible_range(total, ext, vp, offset, overscan)
            self.assertGreaterEqual(rng.start, 0)
            self.assertLessEqual(rng.end, total)
            self.assertLessEqual(rng.start, rng.end)
            self.assertLessEqual(rng.count, visible + 2 * overscan)
            # every row touching the viewport is covered
            first = offset // ext
            last = min(total, (offset + vp - 1) // ext + 1)
            for i in range(min(first, total), last):
                self.assertIn(i, rng.indices())


class TestViewport(unittest.TestCase):
    def test_viewport_tracks_resize_without_scroll(self):
        vp = Viewport(scroll_offset=0, viewport_extent=400, item_extent=40, overscan=0)
        self.assertEqual(vp.visible_range(1000), VisibleRange(0, 10))
        vp.viewport_extent = 800
        self.assertEqual(vp.visible_range(1000), VisibleRange(0, 20))


class TestLayout(unittest.TestCase):
    def test_rows_sit_at_absolute_offsets(self):
        placements = layout_window(10000, 40, 600, 4000, 5)
        self.assertEqual(placements[0], (95, 3800))
        for index, offset in placements:
            self.assertEqual(offset, item_offset(index, 40))

    def test_extents(self):
        self.assertEqual(content_extent(100, 40), 4000)
        self.assertEqual(content_extent(-3, 40), 0)
        self.assertEqual(max_scroll_offset(100, 40, 600), 3400)
        self.assertEqual(max_scroll_offset(5, 40, 600), 0)


if __name__ == "__main__":
    unittest.main()
