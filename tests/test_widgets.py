import os
import sys
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

TEST_DIR = os.path.dirname(os.path.abspath(__file__))
SRC_DIR = os.path.join(os.path.dirname(TEST_DIR), "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from PySide6.QtWidgets import QApplication

from core.models import FollowState, Track
from ui.lyrics_view import LyricsView
from ui.widgets.queue_widget import QueueWidget
from ui.widgets.virtual_list_widget import VirtualListWidget

LRC = "[00:00.00] one\n[00:10.00] two\n[00:20.00] three"


def setUpModule():
    global _app
    _app = QApplication.instance() or QApplication([])


class TestVirtualListWidget(unittest.TestCase):
    def setUp(self):
        self.view = VirtualListWidget(item_extent=40, overscan=5)
        self.view.resize(300, 400)
        self.view.show()
        QApplication.processEvents()

    def tearDown(self):
        self.view.close()
        self.view.deleteLater()

    def test_only_window_is_materialized(self):
        self.view.set_items([f"row {i}" for i in range(10000)])
        height = self.view.viewport().height()
        budget = -(-height // 40) + 2 * 5
        self.assertGreater(self.view.materialized_count(), 0)
        self.assertLessEqual(self.view.materialized_count(), budget)
        self.assertEqual(self.view.visible_range().start, 0)

    def test_scroll_moves_window(self):
        self.view.set_items([f"row {i}" for i in range(10000)])
        self.view.verticalScrollBar().setValue(4000)
        rng = self.view.visible_range()
        self.assertEqual(rng.start, 95)
        self.assertEqual(self.view.index_at(0), 100)
        # row 100 sits at the top edge of the viewport
        row = self.view._pool[100 - rng.start]
        self.assertEqual(row.geometry().y(), 0)
        self.assertEqual(row.text(), "row 100")

    def test_empty_state(self):
        self.view.set_items([])
        self.assertFalse(self.view.empty_label.isHidden())
        self.assertEqual(self.view.materialized_count(), 0)
        self.view.set_items(["a"])
        self.assertTrue(self.view.empty_label.isHidden())

    def test_scroll_to_index(self):
        self.view.set_items(list(range(1000)))
        self.view.scroll_to_index(500)
        self.assertIn(500, self.view.visible_range().indices())

    def test_resize_recomputes_window_without_scroll(self):
        self.view.set_items([f"row {i}" for i in range(10000)])
        before = self.view.visible_range()

        self.view.resize(300, 900)
        QApplication.processEvents()

        height = self.view.viewport().height()
        self.assertEqual(self.view.verticalScrollBar().value(), 0)
        after = self.view.visible_range()
        self.assertEqual(after.start, 0)
        self.assertEqual(after.end, -(-height // 40) + 5)
        self.assertGreater(after.end, before.end)
        self.assertEqual(self.view.materialized_count(), after.count)


class TestLyricsView(unittest.TestCase):
    def setUp(self):
        self.view = LyricsView()
        self.view.set_track_lyrics("Artist — Song", LRC)

    def tearDown(self):
        self.view.deleteLater()

    def test_clock_highlights_active_line(self):
        self.view.on_player_position(15000)
        self.assertEqual(self.view.engine.active_index, 1)
        self.assertEqual(self.view._labels[1].property("state"), "active")
        self.assertEqual(self.view._labels[0].property("state"), "near")

    def test_user_scroll_shows_resume(self):
        self.view.scroll.userScrolled.emit()
        self.assertIs(self.view.engine.follow_state, FollowState.USER_OVERRIDDEN)
        self.assertFalse(self.view.btn_resume.isHidden())
        self.view.btn_resume.click()
        self.assertIs(self.view.engine.follow_state, FollowState.AUTO_FOLLOWING)
        self.assertTrue(self.view.btn_resume.isHidden())

    def test_clicking_line_requests_seek(self):
        seeks = []
        self.view.seekRequested.connect(seeks.append)
        self.view._labels[2].clicked.emit(2)
        self.assertEqual(seeks, [20000])

    def test_offset_buttons(self):
        self.view.btn_offset_plus.click()
        self.assertEqual(self.view.engine.offset, 0.1)
        self.assertEqual(self.view.lbl_offset.text(), "100ms")

    def test_edit_and_save_reparses(self):
        saved = []
        self.view.saveRequested.connect(saved.append)
        self.view.adjust_offset(3)
        self.view.btn_edit.click()
        self.assertIs(self.view.stack.currentWidget(), self.view.editor)

        self.view.editor.setPlainText("[00:01.00] edited")
        self.view.btn_edit.click()
        self.assertEqual(saved, ["[00:01.00] edited"])
        self.assertEqual([l.text for l in self.view.engine.lines], ["edited"])
        self.assertEqual(self.view.engine.offset, 0.0)
        self.assertIs(self.view.stack.currentWidget(), self.view.scroll)

    def test_no_synced_lyrics(self):
        self.view.set_track_lyrics("Song", None)
        self.assertIs(self.view.stack.currentWidget(), self.view.msg)
        self.assertEqual(self.view.engine.lines, ())


class _State:
    config = None

    def notify(self, message, notify_type="info"):
        pass


def _track(name: str) -> Track:
    return Track(
        file_path=f"/music/{name}.mp3", file_name=f"{name}.mp3",
        title=name, artist="Artist", album="", duration=60.0,
    )


class TestQueueWidget(unittest.TestCase):
    def setUp(self):
        self.view = QueueWidget(_State())

    def tearDown(self):
        self.view.deleteLater()

    def test_starts_with_one_queue_that_cannot_be_deleted(self):
        self.assertEqual([q.name for q in self.view.queues()], ["Main"])
        self.assertFalse(self.view.btn_delete_queue.isEnabled())
        self.assertFalse(self.view.delete_queue(self.view.active_queue().id))

    def test_create_and_switch_keep_tracks_apart(self):
        main = self.view.active_queue()
        self.view.set_tracks([_track("a"), _track("b")])

        changed = []
        self.view.activeQueueChanged.connect(changed.append)
        party = self.view.create_queue("Party")
        self.assertIs(self.view.active_queue(), party)
        self.assertEqual(changed, [party])
        self.assertEqual(self.view.tracks(), [])
        self.assertEqual(self.view.cmb_queues.count(), 2)
        self.assertEqual(self.view.cmb_queues.currentText(), "Party")
        self.assertTrue(self.view.btn_delete_queue.isEnabled())

        self.view.append_tracks([_track("c")])
        self.view.switch_queue(main.id)
        self.assertEqual([t.title for t in self.view.tracks()], ["a", "b"])
        self.assertEqual(self.view.list.items(), main.tracks)
        self.assertEqual([t.title for t in party.tracks], ["c"])

    def test_picking_from_combo_switches_queue(self):
        self.view.create_queue("Second")
        self.view.cmb_queues.setCurrentIndex(0)
        self.assertEqual(self.view.active_queue().name, "Main")

    def test_delete_active_queue_moves_to_neighbour(self):
        main = self.view.active_queue()
        second = self.view.create_queue()
        self.assertEqual(second.name, "Queue 2")
        self.assertTrue(self.view.delete_queue(second.id))
        self.assertIs(self.view.active_queue(), main)
        self.assertEqual(self.view.cmb_queues.count(), 1)
        self.assertFalse(self.view.btn_delete_queue.isEnabled())

    def test_now_playing_belongs_to_its_queue(self):
        main = self.view.active_queue()
        self.view.set_tracks([_track("a"), _track("b")])
        self.view.set_now_playing(1)

        other = self.view.create_queue()
        self.assertIs(self.view.playing_queue(), main)
        self.assertEqual(self.view.playing_index(), 1)
        self.assertEqual(self.view._playing_in_active(), -1)

        self.view.delete_queue(main.id)
        self.assertIs(self.view.active_queue(), other)
        self.assertIsNone(self.view.playing_queue())
        self.assertEqual(self.view.playing_index(), -1)


if __name__ == "__main__":
    unittest.main()
