# ui/widgets/browse_widget.py
from __future__ import annotations

import logging
import os
from datetime import datetime

from PySide6.QtCore import Qt, QThread, Signal
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QToolButton,
    QPushButton, QCheckBox, QFileDialog, QStyle,
)

from core.media_filter import get_file_type
from core.models import HierarchicalNode, ScanOptions, SortMethod
from core.utils import format_bytes
from library.enumerator import LocalHandle, RemotePath
from ui.widgets.virtual_list_widget import VirtualListWidget
from ui.workers.directory_scanner import create_directory_scan

logger = logging.getLogger(__name__)

ROW_HEIGHT = 36


class NodeRow(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("NodeRow")
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(10, 0, 10, 0)
        layout.setSpacing(10)

        self.icon = QLabel()
        self.icon.setFixedWidth(18)
        self.name = QLabel()
        self.meta = QLabel()
        self.meta.setObjectName("NodeMeta")
        self.meta.setAlignment(Qt.AlignRight | Qt.AlignVCenter)

        layout.addWidget(self.icon)
        layout.addWidget(self.name, 1)
        layout.addWidget(self.meta)

    def bind(self, node: HierarchicalNode, selected: bool):
        if node.is_directory:
            self.icon.setText("▸")
        else:
            self.icon.setText("▶" if get_file_type(node.name) == "VIDEO" else "♪")
        self.name.setText(node.name)

        meta = []
        if node.size is not None:
            meta.append(format_bytes(node.size))
        if node.modified_time is not None:
            meta.append(datetime.fromtimestamp(node.modified_time).strftime("%Y-%m-%d"))
        self.meta.setText("  ".join(meta))

        if self.property("selected") != selected:
            self.setProperty("selected", selected)
            self.style().unpolish(self)
            self.style().polish(self)


class BrowseWidget(QWidget):
    playFiles = Signal(object, int)   # list[HierarchicalNode], start index
    queueFiles = Signal(object)       # list[HierarchicalNode]

    def __init__(self, app_state, parent=None):
        super().__init__(parent)
        self.app_state = app_state

        self._history: list[LocalHandle | RemotePath] = []
        self._pending_history: list[LocalHandle | RemotePath] = []
        self._live_scans: set = set()
        self._items: list[HierarchicalNode] = []
        self._selected: set[str] = set()
        self._scan = None

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(6)

        # --- toolbar ---
        bar = QHBoxLayout()
        bar.setContentsMargins(8, 6, 8, 0)

        self.btn_mount = QToolButton()
        self.btn_mount.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_DirOpenIcon))
        self.btn_mount.setToolTip("Open folder")
        self.btn_mount.clicked.connect(self._on_mount_clicked)

        self.btn_back = QToolButton()
        self.btn_back.setIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ArrowBack))
        self.btn_back.setToolTip("Back")
        self.btn_back.setEnabled(False)
        self.btn_back.clicked.connect(self.go_back)

        self.lbl_path = QLabel("No folder mounted")
        self.lbl_path.setObjectName("BrowsePath")
        self.lbl_path.setTextInteractionFlags(Qt.TextSelectableByMouse)

        self.chk_details = QCheckBox("Details")
        self.chk_details.setToolTip("Read size and date for every entry (scans off the UI thread)")
        self.chk_details.toggled.connect(lambda _: self.reload())

        self.btn_play = QPushButton("Play selection")
        self.btn_play.setEnabled(False)
        self.btn_play.clicked.connect(self.play_selection)

        self.btn_queue = QPushButton("Queue")
        self.btn_queue.setEnabled(False)
        self.btn_queue.clicked.connect(self._queue_selection)

        bar.addWidget(self.btn_mount)
        bar.addWidget(self.btn_back)
        bar.addWidget(self.lbl_path, 1)
        bar.addWidget(self.chk_details)
        bar.addWidget(self.btn_queue)
        bar.addWidget(self.btn_play)
        root.addLayout(bar)

        # --- windowed listing ---
        overscan = app_state.config.list_overscan if app_state.config else 5
        self.list = VirtualListWidget(
            item_extent=ROW_HEIGHT,
            overscan=overscan,
            row_factory=NodeRow,
            bind_row=self._bind_row,
            empty_text="Open a folder to browse",
        )
        self.list.setObjectName("BrowseList")
        self.list.rowClicked.connect(self._on_row_clicked)
        self.list.rowActivated.connect(self._on_row_activated)
        root.addWidget(self.list, 1)

        self._apply_styles()

    # -------------------------
    # External API
    # -------------------------
    def mount(self, path: str):
        self._navigate_to([self._source_for(path)])

    def current_path(self) -> str | None:
        return self._history[-1].path if self._history else None

    def reload(self):
        if self._history:
            self._navigate_to(self._history[:-1] + [self._source_for(self._history[-1].path)])

    def go_back(self):
        if len(self._history) <= 1:
            return
        self._navigate_to(self._history[:-1])

    def open_node(self, node: HierarchicalNode):
        if not node.is_directory:
            return
        self._navigate_to(self._history + [self._source_for(node.path)])

    def cancel_scan(self):
        if self._scan is not None:
            self._scan.cancel()
            self._scan = None
            self._show_listing()

    def shutdown(self, wait_ms: int = 2000):
        """Cancel scanning and wait for worker threads that are still reading a folder."""
        self._scan = None
        for scan in list(self._live_scans):
            scan.cancel()
            if isinstance(scan, QThread):
                scan.wait(wait_ms)

    def play_selection(self):
        nodes = [n for n in self._items if n.path in self._selected and not n.is_directory]
        if nodes:
            self.playFiles.emit(nodes, 0)

    # -------------------------
    # Scanning
    # -------------------------
    def _options(self) -> ScanOptions:
        cfg = self.app_state.config
        return cfg.scan_options() if cfg else ScanOptions()

    def _source_for(self, path: str):
        # DATE sort is only meaningful with modified times, which the
        # cooperative scan does not collect.
        enriched = self.chk_details.isChecked() or self._options().sort_method is SortMethod.DATE
        return RemotePath(path) if enriched else LocalHandle(path)

    def _navigate_to(self, history: list):
        """Scan the last level of `history`; it only becomes current once the scan succeeds."""
        if self._scan is not None:
            self._scan.cancel()
        self._selected.clear()
        self._pending_history = history
        source = history[-1]

        self.list.set_items([])
        self.list.set_empty_text("Scanning…")
        self.lbl_path.setText(source.path)
        self.btn_back.setEnabled(len(history) > 1)
        self._update_buttons()

        scan = create_directory_scan(source, source.path, self._options(), self)
        scan.finished_signal.connect(self._on_scan_finished)
        scan.failed_signal.connect(self._on_scan_failed)
        scan.finished.connect(lambda s=scan: self._live_scans.discard(s))
        self._live_scans.add(scan)
        self._scan = scan
        scan.start()

    def _on_scan_finished(self, scan, nodes):
        if scan is not self._scan:
            return  # stale scan from a folder we already left
        self._scan = None
        self._history = self._pending_history
        self._items = list(nodes)
        self._show_listing()
        logger.debug("Listed %d entries in %s", len(self._items), self.current_path())

    def _on_scan_failed(self, scan, message: str):
        if scan is not self._scan:
            return
        self._scan = None
        # the level that failed is dropped; the last good listing comes back
        self._show_listing()
        self.app_state.notify(message, "error")

    def _show_listing(self):
        self.lbl_path.setText(self.current_path() or "No folder mounted")
        self.btn_back.setEnabled(len(self._history) > 1)
        self.list.set_empty_text(
            "No playable media in this folder" if self._history else "Open a folder to browse"
        )
        self.list.set_items(self._items)
        self._update_buttons()

    # -------------------------
    # UI Events
    # -------------------------
    def _bind_row(self, row: NodeRow, node: HierarchicalNode, index: int):
        row.bind(node, node.path in self._selected)

    def _on_mount_clicked(self):
        start = self.current_path() or (self.app_state.config.default_dir if self.app_state.config else "")
        path = QFileDialog.getExistingDirectory(self, "Select Folder", start or os.path.expanduser("~"))
        if path:
            self.mount(path)

    def _on_row_clicked(self, index: int, modifiers):
        node = self._items[index]
        multi = bool(modifiers & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier))
        self._toggle_selection(node.path, multi)

    def _on_row_activated(self, index: int):
        node = self._items[index]
        if node.is_directory:
            self.open_node(node)
            return
        playable = [n for n in self._items if not n.is_directory]
        start = next((i for i, n in enumerate(playable) if n.path == node.path), -1)
        if start >= 0:
            self.playFiles.emit(playable, start)

    def _toggle_selection(self, path: str, multi: bool):
        selected = set(self._selected) if multi else set()
        if path in selected:
            selected.discard(path)
        else:
            selected.add(path)
        self._selected = selected
        self._update_buttons()
        self.list.refresh()

    def _queue_selection(self):
        nodes = [n for n in self._items if n.path in self._selected and not n.is_directory]
        if nodes:
            self.queueFiles.emit(nodes)

    def _update_buttons(self):
        has_files = any(
            n.path in self._selected and not n.is_directory for n in self._items
        )
        self.btn_play.setEnabled(has_files)
        self.btn_queue.setEnabled(has_files)

    def _apply_styles(self):
        self.setStyleSheet("""
        QAbstractScrollArea#BrowseList {
            background-color: #020617;
            border: none;
        }
        QWidget#NodeRow {
            background: transparent;
            border-bottom: 1px solid #0b1222;
        }
        QWidget#NodeRow[selected="true"] {
            background: rgba(56, 189, 248, 0.2);
        }
        QWidget#NodeRow QLabel {
            color: #e5e7eb;
            font-size: 12px;
        }
        QLabel#NodeMeta {
            color: #9ca3af;
            font-size: 11px;
        }
        QLabel#BrowsePath {
            color: #9ca3af;
            font-size: 11px;
        }
        QLabel#VirtualListEmpty {
            color: #6b7280;
        }
        """)
