import os
import sys
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from core.lrc import parse_lrc, resolve_active_index, serialize_lrc
from core.models import LyricLine


class TestParseLrc(unittest.TestCase):
    def test_centiseconds_and_milliseconds(self):
        lines = parse_lrc("[00:12.50] Hello\n[01:02.345] World")
        self.assertEqual(lines, (LyricLine(12.5, "Hello"), LyricLine(62.345, "World")))

    def test_skips_untagged_and_empty_lines(self):
        raw = "\n".join([
            "[ar:Someone]",
            "no tag here",
            "[00:05.00]",
            "[00:06.00]   ",
            "",
            "[00:07.10] kept",
        ])
        self.assertEqual(parse_lrc(raw), (LyricLine(7.1, "kept"),))

    def test_output_is_sorted(self):
        lines = parse_lrc("[00:20.00] c\n[00:00.00] a\n[00:10.00] b")
        self.assertEqual([l.text for l in lines], ["a", "b", "c"])
        self.assertEqual([l.time for l in lines], [0.0, 10.0, 20.0])

    def test_empty_source(self):
        self.assertEqual(parse_lrc(""), ())
        self.assertEqual(parse_lrc(None), ())

    def test_serialize_round_trip(self):
        lines = (
            LyricLine(0.0, "intro"),
            LyricLine(12.5, "two digits"),
            LyricLine(62.345, "three digits"),
            LyricLine(3600.01, "long track"),
        )
        self.assertEqual(parse_lrc(serialize_lrc(lines)), lines)

    def test_serialize_format(self):
        self.assertEqual(serialize_lrc([LyricLine(12.5, "Hi")]), "[00:12.50] Hi")
        self.assertEqual(serialize_lrc([LyricLine(1.005, "Hi")]), "[00:01.005] Hi")



class TestResolveActiveIndex(unittest.TestCase):
    def setUp(self):
        self.lines = parse_lrc("[00:00.00] a\n[00:10.00] b\n[00:20.00] c")

    def test_between_cues(self):
        self.assertEqual(resolve_active_index(self.lines, 15), 1)

    def test_after_last_cue(self):
        self.assertEqual(resolve_active_index(self.lines, 25), 2)

    def test_exact_cue_time(self):
        self.assertEqual(resolve_active_index(self.lines, 10), 1)

    def test_before_first_cue(self):
        self.assertEqual(resolve_active_index(self.lines, -1), -1)

    def test_empty_track(self):
        self.assertEqual(resolve_active_index((), 5), -1)

    def test_offset_shifts_the_clock(self):
        self.assertEqual(resolve_active_index(self.lines, 9.5, offset=0.5), 1)
        self.assertEqual(resolve_active_index(self.lines, 10.0, offset=-0.1), 0)


if __name__ == "__main__":
    unittest.main()
