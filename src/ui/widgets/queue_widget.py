# ui/widgets/queue_widget.py
from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QComboBox, QToolButton,
)

from core.models import PlayQueue, Track
from core.utils import fmt_duration
from ui.widgets.virtual_list_widget import VirtualListWidget

ROW_HEIGHT = 40


class TrackRow(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("TrackRow")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 0, 10, 0)
        layout.setSpacing(10)

        self.num = QLabel()
        self.num.setObjectName("TrackNum")
        self.num.setFixedWidth(44)
        self.title = QLabel()
        self.duration = QLabel()
        self.duration.setObjectName("TrackDuration")
        self.duration.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        layout.addWidget(self.num)
        layout.addWidget(self.title, 1)
        layout.addWidget(self.duration)

    def bind(self, track: Track, index: int, playing: bool):
        self.num.setText(str(index + 1))
        self.title.setText(f"{track.artist} — {track.title}" if track.artist else track.title)
        self.duration.setText(fmt_duration(track.duration) if track.duration else "")
        if self.property("playing") != playing:
            self.setProperty("playing", playing)
            self.style().unpolish(self)
            self.style().polish(self)


class QueueWidget(QWidget):
    """
    Named play queues; one is shown (active) at a time and the player may be
    working through another one.
    """
    playTrack = Signal(int)               # index in the active queue
    activeQueueChanged = Signal(object)   # PlayQueue

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.app_state = app_state
        self._queues: list[PlayQueue] = [PlayQueue(id="q1", name="Main")]
        self._active_id = "q1"
        self._next_id = 2
        self._playing: tuple[str, int] | None = None    # (queue id, index)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(6)

        # --- queue picker ---
        picker = QHBoxLayout()
        picker.setContentsMargins(8, 6, 8, 0)
        self.cmb_queues = QComboBox()
        self.cmb_queues.setToolTip("Play queues")
        self.cmb_queues.currentIndexChanged.connect(self._on_queue_picked)
        self.btn_new_queue = QToolButton()
        self.btn_new_queue.setText("+")
        self.btn_new_queue.setToolTip("New queue")
        self.btn_new_queue.clicked.connect(lambda: self.create_queue())
        self.btn_delete_queue = QToolButton()
        self.btn_delete_queue.setText("−")
        self.btn_delete_queue.setToolTip("Delete this queue")
        self.btn_delete_queue.clicked.connect(lambda: self.delete_queue(self._active_id))
        picker.addWidget(self.cmb_queues, 1)
        picker.addWidget(self.btn_new_queue)
        picker.addWidget(self.btn_delete_queue)
        root.addLayout(picker)

        header = QHBoxLayout()
        header.setContentsMargins(8, 0, 8, 0)
        self.lbl_count = QLabel("Queue is empty")
        self.lbl_count.setObjectName("QueueCount")
        self.btn_clear = QPushButton("Clear")
        self.btn_clear.clicked.connect(self.clear)
        header.addWidget(self.lbl_count, 1)
        header.addWidget(self.btn_clear)
        root.addLayout(header)

        overscan = app_state.config.list_overscan if app_state.config else 5
        self.list = VirtualListWidget(
            item_extent=ROW_HEIGHT,
            overscan=overscan,
            row_factory=TrackRow,
            bind_row=lambda row, track, i: row.bind(track, i, i == self._playing_in_active()),
            empty_text="Queue is empty",
        )
        self.list.setObjectName("QueueList")
        self.list.rowActivated.connect(self.playTrack.emit)
        root.addWidget(self.list, 1)

        self._reload_picker()
        self._apply_styles()

    # -------------------------
    # Queues
    # -------------------------
    def queues(self) -> list[PlayQueue]:
        return list(self._queues)

    def find_queue(self, queue_id: str) -> PlayQueue | None:
        return next((q for q in self._queues if q.id == queue_id), None)

    def active_queue(self) -> PlayQueue:
        return self.find_queue(self._active_id) or self._queues[0]

    def create_queue(self, name: str | None = None) -> PlayQueue:
        queue = PlayQueue(id=f"q{self._next_id}", name=name or f"Queue {self._next_id}")
        self._next_id += 1
        self._queues.append(queue)
        self.switch_queue(queue.id)
        return queue

    def switch_queue(self, queue_id: str) -> bool:
        queue = self.find_queue(queue_id)
        if queue is None:
            return False
        changed = queue_id != self._active_id
        self._active_id = queue_id
        self._reload_picker()
        self._refresh()
        if changed:
            self.activeQueueChanged.emit(queue)
        return True

    def delete_queue(self, queue_id: str) -> bool:
        """Remove a queue; the last remaining queue cannot be deleted."""
        queue = self.find_queue(queue_id)
        if queue is None or len(self._queues) <= 1:
            return False
        pos = self._queues.index(queue)
        self._queues.remove(queue)
        if self._playing and self._playing[0] == queue_id:
            self._playing = None
        if queue_id == self._active_id:
            self.switch_queue(self._queues[min(pos, len(self._queues) - 1)].id)
        else:
            self._reload_picker()
        return True

    # -------------------------
    # Active queue contents
    # -------------------------
    def tracks(self) -> list[Track]:
        return self.active_queue().tracks

    def set_tracks(self, tracks: list[Track]):
        queue = self.active_queue()
        queue.tracks = list(tracks)
        if self._playing and self._playing[0] == queue.id:
            self._playing = None
        self._refresh()

    def append_tracks(self, tracks: list[Track]):
        self.active_queue().tracks.extend(tracks)
        self.list.set_items(self.active_queue().tracks, keep_scroll=True)
        self._update_count()

    def clear(self):
        self.set_tracks([])

    # -------------------------
    # Now playing
    # -------------------------
    def set_now_playing(self, index: int, queue_id: str | None = None):
        self._playing = (queue_id or self._active_id, index) if index >= 0 else None
        self.list.refresh()
        if 0 <= self._playing_in_active():
            self.list.scroll_to_index(index)

    def playing_queue(self) -> PlayQueue | None:
        return self.find_queue(self._playing[0]) if self._playing else None

    def playing_index(self) -> int:
        return self._playing[1] if self._playing else -1

    def _playing_in_active(self) -> int:
        if self._playing and self._playing[0] == self._active_id:
            return self._playing[1]
        return -1

    # -------------------------
    # Helpers
    # -------------------------
    def _reload_picker(self):
        self.cmb_queues.blockSignals(True)
        self.cmb_queues.clear()
        for q in self._queues:
            self.cmb_queues.addItem(q.name, q.id)
        self.cmb_queues.setCurrentIndex(self.cmb_queues.findData(self._active_id))
        self.cmb_queues.blockSignals(False)
        self.btn_delete_queue.setEnabled(len(self._queues) > 1)

    def _on_queue_picked(self, index: int):
        queue_id = self.cmb_queues.itemData(index)
        if queue_id:
            self.switch_queue(queue_id)

    def _refresh(self):
        self.list.set_items(self.active_queue().tracks)
        self._update_count()

    def _update_count(self):
        tracks = self.active_queue().tracks
        n = len(tracks)
        total = sum(t.duration for t in tracks)
        self.lbl_count.setText(f"{n} tracks · {fmt_duration(total)}" if n else "Queue is empty")

    def _apply_styles(self):
        self.setStyleSheet("""
        QAbstractScrollArea#QueueList {
            background-color: #020617;
            border: none;
        }
        QWidget#TrackRow {
            background: transparent;
            border-bottom: 1px solid #0b1222;
        }
        QWidget#TrackRow[playing="true"] {
            background: rgba(56, 189, 248, 0.2);
        }
        QWidget#TrackRow QLabel {
            color: #e5e7eb;
            font-size: 12px;
        }
        QLabel#TrackNum, QLabel#TrackDuration, QLabel#QueueCount {
            color: #9ca3af;
            font-size: 11px;
        }
        """)
