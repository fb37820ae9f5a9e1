"""PyQt6 host for a running practice session."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Set, Tuple

from PyQt6.QtCore import QRectF, Qt, QTimer
from PyQt6.QtGui import QColor, QFont, QKeyEvent, QMouseEvent, QPainter, QPixmap
from PyQt6.QtWidgets import QWidget

from practice_client.qt_painter import QtOverlayPainter
from practice_client.session_controller import SessionController
from practice_engine.models import ImageRef, PlaybackPhase
from practice_input.events import KeyEvent
from practice_overlay.render import render_overlay

_LOGGER_NAME = "DrawStack.Client"
_CLIENT_LOGGER = logging.getLogger(_LOGGER_NAME)

MESSAGE_TTL_MS = 5000

_SPECIAL_KEYS: Dict[int, str] = {
    Qt.Key.Key_Left.value: "ArrowLeft",
    Qt.Key.Key_Right.value: "ArrowRight",
    Qt.Key.Key_Up.value: "ArrowUp",
    Qt.Key.Key_Down.value: "ArrowDown",
    Qt.Key.Key_Escape.value: "Escape",
    Qt.Key.Key_Delete.value: "Delete",
    Qt.Key.Key_Backspace.value: "Backspace",
    Qt.Key.Key_Space.value: " ",
    Qt.Key.Key_Plus.value: "+",
    Qt.Key.Key_Minus.value: "-",
    Qt.Key.Key_Equal.value: "=",
    Qt.Key.Key_Underscore.value: "_",
}


def translate_key_event(event: QKeyEvent) -> Optional[KeyEvent]:
    """Map a Qt key event onto the DOM-style names the dispatcher understands."""
    key = _SPECIAL_KEYS.get(int(event.key()))
    if key is None:
        code = int(event.key())
        if Qt.Key.Key_A.value <= code <= Qt.Key.Key_Z.value:
            key = chr(code).lower()
        else:
            text = event.text()
            key = text if len(text) == 1 and text.isprintable() else None
    if key is None:
        return None
    modifiers = event.modifiers()
    return KeyEvent(
        key=key,
        alt=bool(modifiers & Qt.KeyboardModifier.AltModifier),
        ctrl=bool(modifiers & Qt.KeyboardModifier.ControlModifier),
        meta=bool(modifiers & Qt.KeyboardModifier.MetaModifier),
        shift=bool(modifiers & Qt.KeyboardModifier.ShiftModifier),
    )


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    if minutes >= 60:
        hours, minutes = divmod(minutes, 60)
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class QtTimerBridge:
    """``after``/``after_cancel`` on top of single-shot QTimers."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        self._parent = parent
        self._live: Set[QTimer] = set()

    def after(self, delay_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)

        def _fire() -> None:
            self._live.discard(timer)
            callback()

        timer.timeout.connect(_fire)
        self._live.add(timer)
        timer.start(max(0, int(delay_ms)))
        return timer

    def after_cancel(self, handle: object) -> None:
        if isinstance(handle, QTimer):
            handle.stop()
            self._live.discard(handle)


class WindowNotifier:
    """Logs and shows a transient banner in the session window."""

    def __init__(self, window: Optional["SessionWindow"] = None) -> None:
        self.window = window

    def warning(self, message: str) -> None:
        _CLIENT_LOGGER.warning(message)
        if self.window is not None:
            self.window.show_message(message)

    def error(self, message: str) -> None:
        _CLIENT_LOGGER.error(message)
        if self.window is not None:
            self.window.show_message(message)


class SessionWindow(QWidget):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("Draw Stack Practice")
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.resize(1280, 800)
        self._controller: Optional[SessionController] = None
        self._pixmap: Optional[QPixmap] = None
        self._pixmap_id: Optional[str] = None
        self._message: Optional[str] = None
        self._message_timer = QTimer(self)
        self._message_timer.setSingleShot(True)
        self._message_timer.timeout.connect(self._clear_message)
        self._session_started = False

    def attach(self, controller: SessionController) -> None:
        self._controller = controller
        controller.overlay.geometry.recompute("container_resized", container_size=(self.width(), self.height()))

    # Host hooks used by the controller

    def enter_fullscreen(self) -> None:
        self.showFullScreen()

    def exit_fullscreen(self) -> None:
        self.showNormal()

    def image_size(self, image: ImageRef) -> Optional[Tuple[float, float]]:
        if self._pixmap_id != image.id:
            pixmap = QPixmap(image.path)
            if pixmap.isNull():
                _CLIENT_LOGGER.warning("Unable to load image %s from %s", image.id, image.path)
                self._pixmap = None
                self._pixmap_id = None
                return None
            self._pixmap = pixmap
            self._pixmap_id = image.id
        return float(self._pixmap.width()), float(self._pixmap.height())

    def show_message(self, text: str) -> None:
        self._message = text
        self._message_timer.start(MESSAGE_TTL_MS)
        self.update()

    def controller_changed(self) -> None:
        controller = self._controller
        if controller is not None:
            phase = controller.playback.phase
            if phase is PlaybackPhase.ACTIVE:
                self._session_started = True
            elif phase is PlaybackPhase.SETUP and self._session_started:
                _CLIENT_LOGGER.info("Session exited; closing window")
                self._session_started = False
                QTimer.singleShot(0, self.close)
        self.update()

    def _clear_message(self) -> None:
        self._message = None
        self.update()

    # Qt events

    def keyPressEvent(self, event) -> None:  # type: ignore[override]
        translated = translate_key_event(event)
        if self._controller is None or translated is None:
            super().keyPressEvent(event)
            return
        self._controller.key_down(translated)

    def keyReleaseEvent(self, event) -> None:  # type: ignore[override]
        if event.isAutoRepeat():
            return
        translated = translate_key_event(event)
        if self._controller is None or translated is None:
            super().keyReleaseEvent(event)
            return
        self._controller.key_up(translated)

    def focusOutEvent(self, event) -> None:  # type: ignore[override]
        if self._controller is not None:
            self._controller.focus_lost()
        super().focusOutEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if self._controller is None or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        pos = event.position()
        self._controller.pointer_down(pos.x(), pos.y())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if self._controller is not None:
            pos = event.position()
            self._controller.pointer_move(pos.x(), pos.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # type: ignore[override]
        if self._controller is not None:
            self._controller.pointer_up()
        super().mouseReleaseEvent(event)

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        if self._controller is not None:
            self._controller.container_resized(self.width(), self.height())

    def closeEvent(self, event) -> None:  # type: ignore[override]
        if self._controller is not None:
            self._controller.teardown()
        super().closeEvent(event)

    def paintEvent(self, event) -> None:  # type: ignore[override]
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.fillRect(self.rect(), QColor(18, 18, 18))
            controller = self._controller
            if controller is None:
                return
            bounds = controller.overlay.geometry.bounds
            if self._pixmap is not None and not bounds.is_empty:
                target = QRectF(bounds.left, bounds.top, bounds.width, bounds.height)
                painter.drawPixmap(target, self._pixmap, QRectF(self._pixmap.rect()))
            render_overlay(QtOverlayPainter(painter), controller.overlay)
            self._paint_hud(painter, controller)
        finally:
            painter.end()

    def _paint_hud(self, painter: QPainter, controller: SessionController) -> None:
        snapshot = controller.snapshot()
        font = QFont()
        font.setPointSizeF(14.0)
        painter.setFont(font)
        painter.setPen(QColor("white"))
        if snapshot.phase is PlaybackPhase.COMPLETED:
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Session complete  (Shift+R restart, Esc exit)")
        elif controller.chrome.visible and snapshot.total:
            status = f"{format_clock(snapshot.time_remaining)}   {snapshot.current_index + 1}/{snapshot.total}"
            if snapshot.is_paused:
                status += "   paused"
            if not snapshot.auto_advance:
                status += "   manual"
            if controller.cues.muted:
                status += "   muted"
            if controller.ui_locked:
                status += "   locked"
            painter.drawText(16, self.height() - 20, status)
        if self._message:
            painter.drawText(16, 28, self._message)
