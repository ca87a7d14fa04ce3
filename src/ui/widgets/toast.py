from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtCore import Qt, QTimer, QEasingCurve, QPoint, QPropertyAnimation
from PySide6.QtWidgets import (
    QWidget,
    QFrame,
    QLabel,
    QHBoxLayout,
    QToolButton,
    QGraphicsOpacityEffect,
)

ANIM_MS = 180


@dataclass(frozen=True)
class ToastData:
    message: str
    notify_type: str = "info"  # "info" | "success" | "warning" | "error"
    timeout_ms: int = 3000


def _colors(kind: str) -> tuple[str, str, str]:
    """
    Returns (bg, border, text).
    """
    kind = (kind or "info").lower()
    if kind == "success":
        return "#052e1a", "#16a34a", "#e5e7eb"
    if kind == "warning":
        return "#2a1a05", "#f59e0b", "#e5e7eb"
    if kind == "error":
        return "#2a0a0a", "#ef4444", "#e5e7eb"
    return "#0b1222", "#38bdf8", "#e5e7eb"


class ToastWidget(QFrame):
    def __init__(self, data: ToastData, manager: "ToastManager"):
        super().__init__(manager)
        self.data = data
        self._manager = manager

        bg, border, text = _colors(data.notify_type)

        self.setObjectName("Toast")
        self.setStyleSheet(f"""
        QFrame#Toast {{
            background: {bg};
            border: 1px solid {border};
            border-radius: 14px;
        }}
        QLabel {{
            color: {text};
            font-size: 12px;
        }}
        QToolButton {{
            border: none;
            background: transparent;
            color: {text};
            padding: 2px 6px;
        }}
        """)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

        root = QHBoxLayout(self)
        root.setContentsMargins(12, 10, 10, 10)
        root.setSpacing(10)

        self.lbl = QLabel(data.message)
        self.lbl.setWordWrap(True)

        self.btn_close = QToolButton()
        self.btn_close.setText("✕")
        self.btn_close.setCursor(Qt.CursorShape.PointingHandCursor)
        self.btn_close.clicked.connect(lambda: self._manager.dismiss(self))

        root.addWidget(self.lbl, 1)
        root.addWidget(self.btn_close, 0, Qt.AlignmentFlag.AlignTop)

        self._opacity = QGraphicsOpacityEffect(self)
        self._opacity.setOpacity(0.0)
        self.setGraphicsEffect(self._opacity)

        self._anims: list[QPropertyAnimation] = []

    def _animate(self, target, prop: bytes, start, end, curve) -> QPropertyAnimation:
        anim = QPropertyAnimation(target, prop, self)
        anim.setDuration(ANIM_MS)
        anim.setStartValue(start)
        anim.setEndValue(end)
        anim.setEasingCurve(curve)
        self._anims.append(anim)
        anim.finished.connect(lambda a=anim: self._anims.remove(a) if a in self._anims else None)
        anim.start()
        return anim

    def play_in(self, start_pos: QPoint, end_pos: QPoint, animate: bool = True):
        if not animate:
            self.move(end_pos)
            self._opacity.setOpacity(1.0)
            self.show()
            return

        self.move(start_pos)
        self.show()
        self._animate(self, b"pos", start_pos, end_pos, QEasingCurve.Type.OutCubic)
        self._animate(self._opacity, b"opacity", 0.0, 1.0, QEasingCurve.Type.OutCubic)

    def play_out(self, on_done: Callable[[], None], animate: bool = True):
        if not animate:
            on_done()
            return

        # slide slightly up while fading out
        self._animate(self, b"pos", self.pos(), self.pos() + QPoint(0, -6), QEasingCurve.Type.InCubic)
        fade = self._animate(self._opacity, b"opacity", self._opacity.opacity(), 0.0, QEasingCurve.Type.InCubic)
        fade.finished.connect(on_done)


class ToastManager(QWidget):
    """
    Overlay widget that stacks toasts top -> bottom in the host's top-right corner.

    `animations_enabled` is polled per toast; while it returns False toasts
    appear and disappear without easing.
    """
    def __init__(self, host: QWidget, animations_enabled: Optional[Callable[[], bool]] = None):
        super().__init__(host)
        self.host = host
        self.animations_enabled = animations_enabled or (lambda: True)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)

        self._toasts: list[ToastWidget] = []
        self._margin = 14
        self._spacing = 10
        self._max_visible = 5

        self._reposition_timer = QTimer(self)
        self._reposition_timer.setSingleShot(True)
        self._reposition_timer.timeout.connect(self._layout_toasts)

        self.raise_()
        self.show()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self._reposition_timer.start(0)

    def toasts(self) -> list[ToastWidget]:
        return list(self._toasts)

    def show_toast(self, message: str, notify_type: str = "info", timeout_ms: int = 3000):
        self.setGeometry(self.host.rect())
        self.raise_()

        data = ToastData(message=message, notify_type=notify_type, timeout_ms=timeout_ms)
        toast = ToastWidget(data, manager=self)
        toast.setFixedWidth(min(420, max(260, self.width() // 2)))

        # newest on top
        self._toasts.insert(0, toast)

        while len(self._toasts) > self._max_visible:
            old = self._toasts.pop()
            old.hide()
            old.deleteLater()

        self._layout_toasts(animate_new=toast)

        QTimer.singleShot(max(500, int(timeout_ms)), lambda: self.dismiss(toast))

    def dismiss(self, toast: ToastWidget):
        if toast not in self._toasts:
            return

        def remove():
            if toast in self._toasts:
                self._toasts.remove(toast)
            toast.hide()
            toast.deleteLater()
            self._layout_toasts()

        toast.play_out(remove, animate=self.animations_enabled())

    def _layout_toasts(self, animate_new: ToastWidget | None = None):
        self.setGeometry(self.host.rect())
        animate = self.animations_enabled()

        x_right = self.width() - self._margin
        y = self._margin

        for t in self._toasts:
            t.adjustSize()
            h = t.sizeHint().height()
            t.setFixedHeight(h)

            end_pos = QPoint(x_right - t.width(), y)
            y += h + self._spacing

            if t is animate_new:
                t.play_in(start_pos=end_pos + QPoint(0, -12), end_pos=end_pos, animate=animate)
            elif animate and t.isVisible():
                t._animate(t, b"pos", t.pos(), end_pos, QEasingCurve.Type.OutCubic)
            else:
                t.move(end_pos)
                t.show()

        self.raise_()
