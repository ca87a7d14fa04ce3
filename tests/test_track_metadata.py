import os
import sys
import tempfile
import unittest

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from library.track_metadata import read_embedded_lyrics, read_sidecar_lyrics, read_track

LRC = "[00:01.00] first\n[00:02.00] second\n"


class TestTrackMetadata(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.audio = os.path.join(self._tmp.name, "Some Song.mp3")
        with open(self.audio, "wb") as f:
            f.write(b"definitely not an mpeg stream")

    def tearDown(self):
        self._tmp.cleanup()

    def write_sidecar(self, ext, text):
        path = os.path.splitext(self.audio)[0] + ext
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)

    def test_untagged_file_uses_file_name(self):
        track = read_track(self.audio)
        self.assertEqual(track.title, "Some Song")
        self.assertEqual(track.artist, "Unknown Artist")
        self.assertEqual(track.album, "Unknown Album")
        self.assertEqual(track.file_name, "Some Song.mp3")
        self.assertGreaterEqual(track.duration, 0.0)
        self.assertIsNone(track.lrc_lyrics)

    def test_sidecar_lyrics(self):
        self.write_sidecar(".lrc", LRC)
        self.write_sidecar(".txt", "first\nsecond\n")
        self.assertEqual(read_sidecar_lyrics(self.audio), ("first\nsecond", LRC.strip()))

        track = read_track(self.audio)
        self.assertEqual(track.lrc_lyrics, LRC.strip())
        self.assertEqual(track.txt_lyrics, "first\nsecond")

    def test_blank_sidecar_is_ignored(self):
        self.write_sidecar(".lrc", "   \n")
        self.assertEqual(read_sidecar_lyrics(self.audio), (None, None))

    def test_no_embedded_lyrics_in_untagged_file(self):
        self.assertEqual(read_embedded_lyrics(self.audio), (None, None))

    def test_missing_file_still_produces_track(self):
        track = read_track(os.path.join(self._tmp.name, "gone.flac"))
        self.assertEqual(track.title, "gone")


if __name__ == "__main__":
    unittest.main()
