import logging
import os
from dataclasses import replace

from PySide6.QtCore import Qt
from PySide6.QtGui import QShortcut, QKeySequence
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QTabWidget,
    QProgressBar, QCheckBox, QComboBox, QToolButton, QStyle,
)

from core.models import SortMethod
from db.database import get_directories, set_directories
from player.player import NowPlaying
from ui.lyrics_view import LyricsView
from ui.player_bar import PlayerBar
from ui.widgets.browse_widget import BrowseWidget
from ui.widgets.queue_widget import QueueWidget
from ui.widgets.toast import ToastManager
from ui.workers.directory_scanner import LibraryScanner

logger = logging.getLogger(__name__)

SORT_LABELS = [("Name", SortMethod.NAME), ("Date", SortMethod.DATE), ("Type", SortMethod.TYPE)]


class MainWindow(QMainWindow):
    def __init__(self, app_state):
        super().__init__()
        self.setWindowTitle("Vinyl OS")
        self.resize(980, 640)
        self.app_state = app_state

        self._track_scanner: LibraryScanner | None = None
        self._live_scanners: set = set()
        self._pending_tracks: list = []

        # --- Shortcuts ---
        QShortcut(QKeySequence("Space"), self, activated=self._toggle_play_pause)
        QShortcut(QKeySequence("Ctrl+Right"), self, activated=self.play_next)
        QShortcut(QKeySequence("Ctrl+Left"), self, activated=self.play_prev)
        QShortcut(QKeySequence("Backspace"), self, activated=lambda: self.browse.go_back())
        QShortcut(QKeySequence("Escape"), self, activated=lambda: self.browse.cancel_scan())

        self.central_widget = QWidget()
        self.setCentralWidget(self.central_widget)
        self.layout = QVBoxLayout(self.central_widget)

        self.toasts = ToastManager(self, animations_enabled=lambda: not self.app_state.low_power)
        self.app_state.notification.connect(self._on_notify)

        # --- Top controls ---
        top_bar = QHBoxLayout()

        self.cmb_bookmarks = QComboBox()
        self.cmb_bookmarks.setMinimumWidth(220)
        self.cmb_bookmarks.setToolTip("Bookmarked folders")
        self.cmb_bookmarks.activated.connect(self._on_bookmark_activated)
        top_bar.addWidget(self.cmb_bookmarks, stretch=1)

        self.btn_bookmark = QToolButton()
        self.btn_bookmark.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DialogSaveButton))
        self.btn_bookmark.setToolTip("Bookmark current folder")
        self.btn_bookmark.clicked.connect(self._bookmark_current)
        top_bar.addWidget(self.btn_bookmark)

        self.btn_queue_library = QToolButton()
        self.btn_queue_library.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_BrowserReload))
        self.btn_queue_library.setToolTip("Queue every track in the bookmarked folders")
        self.btn_queue_library.clicked.connect(self.queue_library)
        top_bar.addWidget(self.btn_queue_library)

        top_bar.addStretch(1)

        self.cmb_sort = QComboBox()
        self.cmb_sort.setToolTip("Sort folder entries")
        for label, method in SORT_LABELS:
            self.cmb_sort.addItem(label, method)
        top_bar.addWidget(self.cmb_sort)

        self.chk_hidden = QCheckBox("Hidden")
        top_bar.addWidget(self.chk_hidden)

        self.chk_reduce_motion = QCheckBox("Reduce motion")
        top_bar.addWidget(self.chk_reduce_motion)

        self.layout.addLayout(top_bar)

        # --- Tabs ---
        self.tabs = QTabWidget()

        self.browse = BrowseWidget(self.app_state)
        self.browse.playFiles.connect(self._on_play_files)
        self.browse.queueFiles.connect(self._on_queue_files)

        self.queue = QueueWidget(self.app_state)
        self.queue.playTrack.connect(self.play_index)

        offset_step = self.app_state.config.sync_offset_step if self.app_state.config else 0.1
        self.lyrics_view = LyricsView(offset_step=offset_step)
        self.lyrics_view.set_reduce_motion(self.app_state.low_power)
        self.lyrics_view.saveRequested.connect(self._on_lyrics_save_requested)
        self.lyrics_view.seekRequested.connect(self._on_seek_requested)

        self.tabs.addTab(self.browse, "Browse")
        self.tabs.addTab(self.queue, "Queue")
        self.tabs.addTab(self.lyrics_view, "Lyrics")
        self.layout.addWidget(self.tabs)

        # --- PlayerBar ---
        self.player_bar = PlayerBar(self.app_state.player, self)
        self.layout.addWidget(self.player_bar)
        self.player_bar.set_prev_next_handlers(self.play_prev, self.play_next)

        # --- Scan progress (hidden when idle) ---
        self.scan_row = QWidget()
        self.scan_row.setObjectName("ScanRow")
        scan_layout = QHBoxLayout(self.scan_row)
        scan_layout.setContentsMargins(8, 6, 8, 6)
        scan_layout.setSpacing(10)

        self.scan_label = QLabel("Reading tags…")
        self.scan_label.setObjectName("ScanLabel")

        self.progress_bar = QProgressBar()
        self.progress_bar.setObjectName("ScanProgress")
        self.progress_bar.setTextVisible(False)
        self.progress_bar.setRange(0, 100)

        scan_layout.addWidget(self.scan_label)
        scan_layout.addWidget(self.progress_bar, 1)
        self.layout.addWidget(self.scan_row)
        self.scan_row.setVisible(False)

        # --- App/player wiring ---
        player = self.app_state.player
        if player:
            player.positionChanged.connect(self.lyrics_view.on_player_position)
            player.ended.connect(self.play_next)
            player.errorOccurred.connect(lambda msg: self.app_state.notify(msg, "error"))

        self.app_state.low_power_changed.connect(self._on_low_power_changed)
        self.app_state.fps_sampled.connect(self.player_bar.show_sample)

        self._load_preferences()
        self.cmb_sort.currentIndexChanged.connect(self._on_sort_changed)
        self.chk_hidden.toggled.connect(self._on_hidden_toggled)
        self.chk_reduce_motion.toggled.connect(self._on_reduce_motion_toggled)

        self._reload_bookmarks()
        self._mount_initial_folder()
        self.show_queued_notifications()

        self.setStyleSheet(self.styleSheet() + """
            QWidget#ScanRow {
                background: #020617;
                border-top: 1px solid #111827;
            }
            QLabel#ScanLabel {
                color: #9ca3af;
                font-size: 11px;
            }
            QProgressBar#ScanProgress {
                background: #0b1222;
                border: 1px solid #1f2937;
                border-radius: 999px;
                height: 10px;
            }
            QProgressBar#ScanProgress::chunk {
                border-radius: 999px;
                background: qlineargradient(
                    x1:0, y1:0, x2:1, y2:0,
                    stop:0 #38bdf8, stop:1 #22c55e
                );
            }
            QToolButton {
                border: 1px solid transparent;
                background: transparent;
                padding: 6px;
                border-radius: 10px;
            }
            QToolButton:hover {
                background: #0b1222;
                border-color: #1f2937;
            }
            """)

    # ------------------ preferences ------------------
    def _load_preferences(self):
        cfg = self.app_state.config
        if not cfg:
            return
        idx = next((i for i, (_l, m) in enumerate(SORT_LABELS) if m is cfg.sort_method), 0)
        self.cmb_sort.setCurrentIndex(idx)
        self.chk_hidden.setChecked(cfg.show_hidden_files)
        self.chk_reduce_motion.setChecked(cfg.reduce_motion)

    def _on_sort_changed(self, _index: int):
        self.app_state.update_config(sort_method=self.cmb_sort.currentData())
        self.browse.reload()

    def _on_hidden_toggled(self, checked: bool):
        self.app_state.update_config(show_hidden_files=bool(checked))
        self.browse.reload()

    def _on_reduce_motion_toggled(self, checked: bool):
        self.app_state.update_config(reduce_motion=bool(checked))

    def _on_low_power_changed(self, low_power: bool):
        self.lyrics_view.set_reduce_motion(low_power)

    # ------------------ bookmarks ------------------
    def _reload_bookmarks(self):
        self.cmb_bookmarks.clear()
        directories = get_directories(self.app_state.db) if self.app_state.db else []
        for d in directories:
            self.cmb_bookmarks.addItem(os.path.basename(d.rstrip(os.sep)) or d, d)
            self.cmb_bookmarks.setItemData(self.cmb_bookmarks.count() - 1, d, Qt.ItemDataRole.ToolTipRole)
        self.cmb_bookmarks.setPlaceholderText("No bookmarks" if not directories else "Bookmarks")
        self.cmb_bookmarks.setCurrentIndex(-1)

    def _on_bookmark_activated(self, index: int):
        path = self.cmb_bookmarks.itemData(index)
        if not path:
            return
        if not os.path.isdir(path):
            self.app_state.notify(f"Bookmarked folder is missing: {path}", "warning")
            return
        self.browse.mount(path)
        self.tabs.setCurrentWidget(self.browse)

    def _bookmark_current(self):
        path = self.browse.current_path()
        if not path or not self.app_state.db:
            return
        directories = get_directories(self.app_state.db)
        if path in directories:
            self.app_state.notify("Folder is already bookmarked.", "info")
            return
        set_directories(self.app_state.db, directories + [path])
        self._reload_bookmarks()
        self.app_state.notify(f"Bookmarked {path}", "success")

    def _mount_initial_folder(self):
        cfg = self.app_state.config
        candidates = [cfg.default_dir] if cfg and cfg.default_dir else []
        if self.app_state.db:
            candidates += get_directories(self.app_state.db)
        for path in candidates:
            if os.path.isdir(path):
                self.browse.mount(path)
                return

    # ------------------ reading tags ------------------
    def _start_track_scan(self, scanner: LibraryScanner, on_done):
        if self._track_scanner is not None:
            self._track_scanner.requestInterruption()
        self._track_scanner = scanner
        self._pending_tracks = []

        self.scan_row.setVisible(True)
        self.progress_bar.setRange(0, 0)
        self.scan_label.setText("Reading tags…")

        scanner.tracks_signal.connect(lambda batch, s=scanner: self._on_tracks_batch(s, batch))
        scanner.progress_signal.connect(lambda n, total, s=scanner: self._update_scan_progress(s, n, total))
        scanner.finished_signal.connect(lambda ok, msg, s=scanner: self._on_track_scan_finished(s, ok, msg, on_done))
        scanner.finished.connect(lambda s=scanner: self._on_scanner_thread_done(s))
        self._live_scanners.add(scanner)
        scanner.start()

    def _on_scanner_thread_done(self, scanner):
        self._live_scanners.discard(scanner)
        scanner.deleteLater()

    def _on_tracks_batch(self, scanner, batch):
        if scanner is self._track_scanner:
            self._pending_tracks.extend(batch)

    def _update_scan_progress(self, scanner, scanned: int, total: int):
        if scanner is not self._track_scanner:
            return
        if total <= 0:
            self.progress_bar.setRange(0, 0)
            return
        if self.progress_bar.maximum() == 0:
            self.progress_bar.setRange(0, 100)
        percent = max(0, min(100, int((scanned / total) * 100)))
        self.progress_bar.setValue(percent)
        self.scan_label.setText(f"Reading tags… {scanned}/{total} ({percent}%)")

    def _on_track_scan_finished(self, scanner, ok: bool, msg: str, on_done):
        if scanner is not self._track_scanner:
            return
        self._track_scanner = None

        self.progress_bar.setRange(0, 100)
        self.progress_bar.setValue(0)
        self.scan_row.setVisible(False)

        tracks, self._pending_tracks = self._pending_tracks, []
        if not ok:
            self.app_state.notify(msg, "error")
            return
        on_done(tracks)

    def _on_play_files(self, nodes, start: int):
        paths = [n.path for n in nodes]

        def done(tracks):
            self.queue.set_tracks(tracks)
            self.play_index(start)

        self._start_track_scan(LibraryScanner(paths=paths), done)

    def _on_queue_files(self, nodes):
        def done(tracks):
            self.queue.append_tracks(tracks)
            self.app_state.notify(f"Queued {len(tracks)} tracks.", "success")

        self._start_track_scan(LibraryScanner(paths=[n.path for n in nodes]), done)

    def queue_library(self):
        directories = get_directories(self.app_state.db) if self.app_state.db else []
        if not directories:
            self.app_state.notify("No bookmarked folders.", "warning")
            return
        cfg = self.app_state.config
        scanner = LibraryScanner(
            directories,
            max_depth=cfg.recursive_depth if cfg else 3,
            show_hidden=cfg.show_hidden_files if cfg else False,
        )

        def done(tracks):
            self.queue.append_tracks(tracks)
            self.app_state.notify(f"Queued {len(tracks)} tracks.", "success")

        self._start_track_scan(scanner, done)

    # ------------------ playback ------------------
    def play_index(self, index: int):
        """Play a track of the queue on screen."""
        self._play_from(self.queue.active_queue(), index)

    def _play_from(self, queue, index: int):
        tracks = queue.tracks
        if not 0 <= index < len(tracks):
            return
        player = self.app_state.player
        if not player:
            self.app_state.notify("Audio player is unavailable.", "error")
            return

        track = tracks[index]
        logger.debug("Queue %s position %d: %s", queue.name, index, track.file_path)
        meta = NowPlaying(queue_index=index, title=track.title, artist=track.artist, path=track.file_path)
        player.play_file(track.file_path, meta)
        self.queue.set_now_playing(index, queue.id)
        self.lyrics_view.set_track_lyrics(
            f"{track.artist} — {track.title}", track.lrc_lyrics, track.txt_lyrics
        )

    def play_next(self):
        # next/prev stay in the queue that is playing, whichever one is on screen
        queue = self.queue.playing_queue()
        if queue is not None:
            self._play_from(queue, self.queue.playing_index() + 1)

    def play_prev(self):
        queue = self.queue.playing_queue()
        if queue is not None and self.queue.playing_index() > 0:
            self._play_from(queue, self.queue.playing_index() - 1)

    def _toggle_play_pause(self):
        if self.app_state.player:
            self.app_state.player.toggle_play_pause()

    def _on_seek_requested(self, ms: int):
        if self.app_state.player:
            self.app_state.player.seek_ms(ms)

    def _on_lyrics_save_requested(self, raw: str):
        queue = self.queue.playing_queue()
        index = self.queue.playing_index()
        if queue is None or not 0 <= index < len(queue.tracks):
            return
        # edits live in the queue for this session; files on disk are left untouched
        queue.tracks[index] = replace(queue.tracks[index], lrc_lyrics=raw or None)
        self.app_state.notify("Lyrics updated.", "success")

    # ------------------ notifications ------------------
    def _on_notify(self, n):
        kind = (getattr(n, "notify_type", "info") or "info").lower()
        msg = getattr(n, "message", "") or ""
        if msg:
            self.toasts.show_toast(msg, notify_type=kind, timeout_ms=3000)

    def show_queued_notifications(self):
        for n in self.app_state.queued_notifications:
            self._on_notify(n)
        self.app_state.queued_notifications.clear()

    def closeEvent(self, event):
        self.browse.shutdown()
        for scanner in list(self._live_scanners):
            scanner.requestInterruption()
            scanner.wait(2000)
        if self.app_state.player:
            self.app_state.player.stop()
        super().closeEvent(event)
