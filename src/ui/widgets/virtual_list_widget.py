# ui/widgets/virtual_list_widget.py
from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QAbstractScrollArea, QLabel, QWidget

from core.windowing import (
    DEFAULT_OVERSCAN,
    VisibleRange,
    Viewport,
    item_offset,
    max_scroll_offset,
)

RowFactory = Callable[[QWidget], QWidget]
RowBinder = Callable[[QWidget, Any, int], None]


def _default_row(parent: QWidget) -> QWidget:
    label = QLabel(parent)
    label.setContentsMargins(10, 0, 10, 0)
    return label


def _default_bind(row: QWidget, item: Any, index: int) -> None:
    row.setText(str(item))  # type: ignore[attr-defined]


class VirtualListWidget(QAbstractScrollArea):
    """
    Scrollable list that only creates widgets for the rows in view.

    Rows have a fixed height. Row widgets come from a small pool and are
    rebound whenever the window moves; each sits at index * item_extent minus
    the scroll offset, so skipped rows never shift their neighbours.
    """
    rowClicked = Signal(int, object)      # index, Qt.KeyboardModifiers
    rowActivated = Signal(int)            # double click

    def __init__(
        self,
        item_extent: int = 40,
        overscan: int = DEFAULT_OVERSCAN,
        row_factory: Optional[RowFactory] = None,
        bind_row: Optional[RowBinder] = None,
        empty_text: str = "Nothing here",
        parent=None,
    ):
        super().__init__(parent)
        self._items: List[Any] = []
        self._state = Viewport(item_extent=float(item_extent), overscan=overscan)
        self._row_factory = row_factory or _default_row
        self._bind_row = bind_row or _default_bind
        self._pool: List[QWidget] = []
        self._range = VisibleRange(0, 0)

        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.verticalScrollBar().setSingleStep(int(item_extent))

        self.empty_label = QLabel(empty_text, self.viewport())
        self.empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_label.setObjectName("VirtualListEmpty")

        self._update_scrollbar()
        self._relayout()

    # --- public API ---
    def set_items(self, items: Sequence[Any], keep_scroll: bool = False):
        self._items = list(items)
        if not keep_scroll:
            self.verticalScrollBar().setValue(0)
        self._update_scrollbar()
        self._relayout()

    def items(self) -> List[Any]:
        return self._items

    def set_empty_text(self, text: str):
        self.empty_label.setText(text)

    def refresh(self):
        """Rebind the materialized rows (e.g. after a selection change)."""
        self._relayout()

    def item_extent(self) -> float:
        return self._state.item_extent

    def visible_range(self) -> VisibleRange:
        return self._range

    def materialized_count(self) -> int:
        return sum(1 for w in self._pool if not w.isHidden())

    def index_at(self, y: int) -> int:
        idx = int((y + self.verticalScrollBar().value()) // self._state.item_extent)
        return idx if 0 <= idx < len(self._items) else -1

    def scroll_to_index(self, index: int):
        if not 0 <= index < len(self._items):
            return
        top = item_offset(index, self._state.item_extent)
        bar = self.verticalScrollBar()
        if top < bar.value():
            bar.setValue(int(top))
        elif top + self._state.item_extent > bar.value() + self.viewport().height():
            bar.setValue(int(top + self._state.item_extent - self.viewport().height()))

    # --- Qt overrides ---
    def scrollContentsBy(self, dx: int, dy: int):
        self._relayout()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._update_scrollbar()
        self._relayout()

    def mousePressEvent(self, event):
        idx = self.index_at(int(event.position().y()))
        if idx >= 0:
            self.rowClicked.emit(idx, event.modifiers())
        super().mousePressEvent(event)

    def mouseDoubleClickEvent(self, event):
        idx = self.index_at(int(event.position().y()))
        if idx >= 0:
            self.rowActivated.emit(idx)
        super().mouseDoubleClickEvent(event)

    # --- internal helpers ---
    def _update_scrollbar(self):
        height = self.viewport().height()
        bar = self.verticalScrollBar()
        bar.setPageStep(max(1, height))
        bar.setRange(0, int(max_scroll_offset(len(self._items), self._state.item_extent, height)))

    def _relayout(self):
        vp = self.viewport()
        self._state.scroll_offset = float(self.verticalScrollBar().value())
        self._state.viewport_extent = float(vp.height())
        rng = self._state.visible_range(len(self._items))
        self._range = rng

        self.empty_label.setVisible(not self._items)
        if not self._items:
            self.empty_label.setGeometry(vp.rect())

        while len(self._pool) < rng.count:
            row = self._row_factory(vp)
            row.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
            self._pool.append(row)

        extent = int(self._state.item_extent)
        width = vp.width()
        for slot, row in enumerate(self._pool):
            index = rng.start + slot
            if index >= rng.end:
                row.hide()
                continue
            self._bind_row(row, self._items[index], index)
            y = int(item_offset(index, self._state.item_extent) - self._state.scroll_offset)
            row.setGeometry(0, y, width, extent)
            row.show()
