# ui/lyrics_view.py
from __future__ import annotations

from typing import List, Optional, Tuple

from PySide6.QtCore import Qt, Signal, QEasingCurve, QPropertyAnimation, QEvent
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QStackedWidget,
    QTextEdit, QPushButton, QToolButton, QScrollArea,
)

from core.lrc import serialize_lrc
from core.lyrics_sync import FollowDirective, LyricsSyncEngine
from core.models import FollowState

FOLLOW_ANIMATION_MS = 500


class _LyricLineLabel(QLabel):
    clicked = Signal(int)

    def __init__(self, index: int, text: str, parent=None):
        super().__init__(text, parent)
        self.index = index
        self.setWordWrap(True)
        self.setAlignment(Qt.AlignCenter)
        self.setCursor(Qt.CursorShape.PointingHandCursor)
        self.setObjectName("LyricLine")

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            self.clicked.emit(self.index)
        super().mouseReleaseEvent(event)


class _LyricsScrollArea(QScrollArea):
    """Scroll area that reports scrolling done by the user, not by the follow animation."""
    userScrolled = Signal()
    resized = Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_AcceptTouchEvents, True)
        # actionTriggered only fires for user interaction, never for setValue()
        self.verticalScrollBar().actionTriggered.connect(lambda _action: self.userScrolled.emit())

    def wheelEvent(self, event):
        self.userScrolled.emit()
        super().wheelEvent(event)

    def viewportEvent(self, event):
        if event.type() in (QEvent.Type.TouchBegin, QEvent.Type.TouchUpdate):
            self.userScrolled.emit()
        return super().viewportEvent(event)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.resized.emit()


class LyricsView(QWidget):
    """
    Lyrics panel:
      - synced view: active line highlighted, auto-follow keeps it at ~35% height
      - wheel/touch scrolling pauses following until "Resume sync"
      - +/- buttons shift the sync offset by 0.1 s
      - editor: raw LRC text, Done re-parses and restarts following

    Features:
      - click line -> seek
      - save -> emits the re-serialized LRC text
    """
    seekRequested = Signal(int)          # ms
    saveRequested = Signal(str)          # lrc text

    def __init__(self, offset_step: float = 0.1, parent=None):
        super().__init__(parent)

        self._raw_lrc = ""
        self._plain = ""
        self._labels: List[_LyricLineLabel] = []
        self._anim: Optional[QPropertyAnimation] = None

        self.engine = LyricsSyncEngine(line_geometry=self._line_geometry, offset_step=offset_step)
        self.engine.on_active_index_changed = self._highlight
        self.engine.on_follow = self._on_follow_directive
        self.engine.on_follow_state_changed = self._on_follow_state_changed

        root = QVBoxLayout(self)
        root.setContentsMargins(10, 10, 10, 10)
        root.setSpacing(8)

        # --- header ---
        header = QHBoxLayout()
        header.setSpacing(8)

        self.title = QLabel("Lyrics")
        self.title.setAlignment(Qt.AlignLeft | Qt.AlignVCenter)
        self.title.setStyleSheet("font-weight: 650; font-size: 14px;")
        header.addWidget(self.title, 1)

        self.btn_offset_minus = QToolButton()
        self.btn_offset_minus.setText("−")
        self.btn_offset_minus.setToolTip("Lyrics earlier")
        self.lbl_offset = QLabel("0ms")
        self.lbl_offset.setObjectName("SyncOffset")
        self.lbl_offset.setMinimumWidth(48)
        self.lbl_offset.setAlignment(Qt.AlignCenter)
        self.btn_offset_plus = QToolButton()
        self.btn_offset_plus.setText("+")
        self.btn_offset_plus.setToolTip("Lyrics later")

        self.btn_offset_minus.clicked.connect(lambda: self.adjust_offset(-1))
        self.btn_offset_plus.clicked.connect(lambda: self.adjust_offset(1))

        header.addWidget(self.btn_offset_minus)
        header.addWidget(self.lbl_offset)
        header.addWidget(self.btn_offset_plus)

        self.btn_edit = QPushButton("Edit")
        self.btn_edit.clicked.connect(self._toggle_edit)
        header.addWidget(self.btn_edit)

        root.addLayout(header)

        # --- stack: msg / synced / editor ---
        self.stack = QStackedWidget()
        root.addWidget(self.stack, 1)

        self.msg = QLabel("No lyrics")
        self.msg.setAlignment(Qt.AlignCenter)
        self.msg.setWordWrap(True)
        self.stack.addWidget(self.msg)

        self.scroll = _LyricsScrollArea()
        self.scroll.setWidgetResizable(True)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll.userScrolled.connect(self.engine.user_scrolled)
        self.scroll.resized.connect(self._sync_viewport)
        self.stack.addWidget(self.scroll)

        self.editor = QTextEdit()
        self.editor.setAcceptRichText(False)
        self.editor.setPlaceholderText("[00:12.50] Paste your lyrics here...")
        self.stack.addWidget(self.editor)

        self.btn_resume = QPushButton("Resume sync")
        self.btn_resume.setObjectName("ResumeSync")
        self.btn_resume.setVisible(False)
        self.btn_resume.clicked.connect(self.resume_sync)
        root.addWidget(self.btn_resume, 0, Qt.AlignHCenter)

        self._apply_styles()
        self.show_none("No track selected")

    # --- public API ---
    def on_player_position(self, ms: int):
        self._sync_viewport()
        self.engine.update_clock(int(ms) / 1000)

    def show_none(self, message: str):
        self._stop_follow()
        self.engine.load_track("")
        self._raw_lrc = ""
        self._rebuild_lines()
        self.msg.setText(message)
        self.stack.setCurrentWidget(self.msg)
        self.btn_edit.setText("Edit")
        self._update_offset_controls()

    def set_track_lyrics(self, title: str, lrc_lyrics: Optional[str], plain_lyrics: Optional[str] = None):
        """New track: parse its lyrics and follow from the start."""
        self.title.setText(title or "Lyrics")
        self._plain = (plain_lyrics or "").strip()
        self._stop_follow()
        self._raw_lrc = (lrc_lyrics or "").strip()
        self.engine.load_track(self._raw_lrc)
        self._show_lines()

    def set_reduce_motion(self, reduce: bool):
        self.engine.reduce_motion = bool(reduce)
        if reduce and self._anim is not None:
            self._anim.stop()

    def adjust_offset(self, steps: int):
        self.engine.adjust_offset(steps)
        self._update_offset_controls()

    def resume_sync(self):
        self.engine.resume_sync()

    # --- internal helpers ---
    def _show_lines(self):
        self._rebuild_lines()
        self.btn_edit.setText("Edit")
        if self.engine.lines:
            self.stack.setCurrentWidget(self.scroll)
            self._sync_viewport()
            self._highlight(self.engine.active_index)
            self.engine.resume_sync()
        else:
            self.msg.setText(self._plain or "No time-synced lyrics available")
            self.stack.setCurrentWidget(self.msg)
        self._update_offset_controls()

    def _rebuild_lines(self):
        container = QWidget()
        container.setObjectName("LyricsContainer")
        layout = QVBoxLayout(container)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(18)

        self._labels = []
        for i, line in enumerate(self.engine.lines):
            label = _LyricLineLabel(i, line.text)
            label.clicked.connect(self._on_line_clicked)
            layout.addWidget(label)
            self._labels.append(label)
        layout.addStretch(1)

        self.scroll.setWidget(container)   # deletes the previous container

    def _line_geometry(self, index: int) -> Tuple[float, float]:
        if not 0 <= index < len(self._labels):
            return 0.0, 0.0
        g = self._labels[index].geometry()
        return float(g.y()), float(g.height())

    def _sync_viewport(self):
        bar = self.scroll.verticalScrollBar()
        self.engine.set_viewport(self.scroll.viewport().height(), max_offset=float(bar.maximum()))

    def _highlight(self, active: int):
        for i, label in enumerate(self._labels):
            if i == active:
                state = "active"
            elif active >= 0 and abs(i - active) <= 1:
                state = "near"
            else:
                state = "idle"
            if label.property("state") != state:
                label.setProperty("state", state)
                label.style().unpolish(label)
                label.style().polish(label)

    def _on_follow_directive(self, directive: FollowDirective):
        if not self.engine.is_current(directive):
            return
        bar = self.scroll.verticalScrollBar()
        target = int(round(directive.target_offset))

        if self._anim is not None:
            self._anim.stop()

        if not directive.smooth or not self.isVisible():
            bar.setValue(target)
            return

        anim = QPropertyAnimation(bar, b"value", self)
        anim.setDuration(FOLLOW_ANIMATION_MS)
        anim.setStartValue(bar.value())
        anim.setEndValue(target)
        anim.setEasingCurve(QEasingCurve.Type.OutCubic)
        generation = directive.generation
        # a newer directive or a user scroll invalidates this one mid-flight
        anim.valueChanged.connect(
            lambda _v, a=anim: a.stop() if self.engine.generation != generation else None
        )
        self._anim = anim
        anim.start()

    def _stop_follow(self):
        self.engine.cancel_follow()
        if self._anim is not None:
            self._anim.stop()
            self._anim = None

    def _on_follow_state_changed(self, state: FollowState):
        overridden = state is FollowState.USER_OVERRIDDEN
        if overridden and self._anim is not None:
            self._anim.stop()
        self.btn_resume.setVisible(overridden and self.stack.currentWidget() is self.scroll)

    def _on_line_clicked(self, index: int):
        t = self.engine.seek_to_line(index)
        if t is not None:
            self.seekRequested.emit(int(round(t * 1000)))

    def _update_offset_controls(self):
        has_lines = bool(self.engine.lines) and self.stack.currentWidget() is self.scroll
        for w in (self.btn_offset_minus, self.lbl_offset, self.btn_offset_plus):
            w.setVisible(has_lines)
        ms = int(round(self.engine.offset * 1000))
        self.lbl_offset.setText(f"{ms}ms")
        self.lbl_offset.setProperty("shifted", ms != 0)
        self.lbl_offset.style().unpolish(self.lbl_offset)
        self.lbl_offset.style().polish(self.lbl_offset)

    def _toggle_edit(self):
        if self.stack.currentWidget() is self.editor:
            self._emit_save()
            return
        self._stop_follow()
        self.editor.setPlainText(self._raw_lrc)
        self.stack.setCurrentWidget(self.editor)
        self.btn_edit.setText("Done")
        self.btn_resume.setVisible(False)
        self._update_offset_controls()

    def _emit_save(self):
        raw = (self.editor.toPlainText() or "").strip()
        self._stop_follow()
        # re-parse resets the active line, the offset and follow mode
        lines = self.engine.reparse(raw)
        self._raw_lrc = serialize_lrc(lines) if lines else raw
        self.saveRequested.emit(self._raw_lrc)
        self._show_lines()

    def _apply_styles(self):
        self.setStyleSheet("""
        QWidget#LyricsContainer {
            background: #020617;
        }
        QLabel#LyricLine {
            color: rgba(229, 231, 235, 0.35);
            font-size: 20px;
        }
        QLabel#LyricLine[state="near"] {
            color: rgba(229, 231, 235, 0.75);
        }
        QLabel#LyricLine[state="active"] {
            color: #ffffff;
            font-size: 24px;
            font-weight: 700;
        }
        QLabel#SyncOffset {
            color: #9ca3af;
            font-family: monospace;
            font-size: 11px;
        }
        QLabel#SyncOffset[shifted="true"] {
            color: #38bdf8;
        }
        QPushButton#ResumeSync {
            background: #38bdf8;
            color: #020617;
            font-weight: 700;
            border-radius: 14px;
            padding: 6px 18px;
        }
        """)
