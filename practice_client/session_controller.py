"""Single aggregate that owns the live session state.

The controller is handed by reference to the key dispatcher (it satisfies every
handler-group context) and to the window, which only translates host events into
controller calls and paints what the controller exposes.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence, Set, Tuple

from practice_client.chrome import ChromeAutoHide
from practice_engine.audio import AudioCues
from practice_engine.library import ImageStore
from practice_engine.models import ImageRef, PlaybackPhase, PlaybackSnapshot, TimerEntry
from practice_engine.playback import PlaybackStateMachine
from practice_engine.storage import KeyValueStore, load_muted, save_muted
from practice_engine.timers import TickTimers
from practice_input.bindings import KeyBindings
from practice_input.dispatch import build_dispatcher
from practice_input.events import HandlerResult, KeyEvent
from practice_overlay.overlay import AnnotationOverlay

_LOGGER_NAME = "DrawStack.Client"
_CLIENT_LOGGER = logging.getLogger(_LOGGER_NAME)

DRAG_FLASH_KEY = "drag-target-flash"

ImageSizeProvider = Callable[[ImageRef], Optional[Tuple[float, float]]]


class FullscreenHost(Protocol):
    def enter_fullscreen(self) -> None: ...

    def exit_fullscreen(self) -> None: ...


class SessionController:
    def __init__(
        self,
        image_store: ImageStore,
        timers: TickTimers,
        *,
        cues: Optional[AudioCues] = None,
        store: Optional[KeyValueStore] = None,
        bindings: Optional[KeyBindings] = None,
        host: Optional[FullscreenHost] = None,
        image_size_provider: Optional[ImageSizeProvider] = None,
        chrome_hide_delay_ms: int = 3000,
        auto_advance: bool = True,
        on_changed: Optional[Callable[[], None]] = None,
    ) -> None:
        self._store = store
        self.timers = timers
        self.cues = cues or AudioCues(muted=load_muted(store) if store is not None else False)
        self.host = host
        self._image_size_provider = image_size_provider
        self._on_changed = on_changed

        self.overlay = AnnotationOverlay()
        self.chrome = ChromeAutoHide(
            timers,
            delay_ms=chrome_hide_delay_ms,
            on_visibility_changed=lambda _visible: self._changed(),
        )
        self.playback = PlaybackStateMachine(
            image_store,
            timers,
            cues=self.cues,
            on_image_changed=self._handle_image_changed,
            on_state_changed=self._handle_state_changed,
            on_exit=self._release_fullscreen,
            on_completed=self._release_fullscreen,
        )
        self.playback.auto_advance = bool(auto_advance)

        self.ui_locked = False
        self.is_fullscreen = False
        self._held_keys: Set[str] = set()
        self._arrow_used = False
        self.dispatcher = build_dispatcher(self, bindings)

    # ------------------------------------------------------------------
    # Session lifecycle

    async def start_session(self, entries: Sequence[TimerEntry]) -> None:
        await self.playback.start(entries)
        self.chrome.activity()

    def extend(self, seconds: int) -> None:
        self.playback.extend(seconds)

    def restart(self) -> None:
        self.playback.restart()

    def finish(self) -> None:
        """Leave a completed (or abandoned) session."""
        self.exit_session()

    def teardown(self) -> None:
        """Window is closing: every timer and the fullscreen grab must go."""
        self.playback.exit()
        self.chrome.stop()
        self.timers.cancel_all()
        self._held_keys.clear()

    def snapshot(self) -> PlaybackSnapshot:
        return self.playback.snapshot()

    # ------------------------------------------------------------------
    # Host event entry points

    def key_down(self, event: KeyEvent) -> HandlerResult:
        if not self.in_setup:
            self.chrome.activity()
        result = self.dispatcher.key_down(event)
        if result is HandlerResult.CLAIMED:
            self._changed()
        return result

    def key_up(self, event: KeyEvent) -> HandlerResult:
        result = self.dispatcher.key_up(event)
        if result is HandlerResult.CLAIMED:
            self._changed()
        return result

    def focus_lost(self) -> None:
        self.dispatcher.release_all()
        self._arrow_used = False

    def pointer_down(self, px: float, py: float) -> Optional[str]:
        if self.in_setup:
            return None
        self.chrome.activity()
        target = self.overlay.pointer_down(px, py)
        self._changed()
        return target

    def pointer_move(self, px: float, py: float) -> bool:
        if self.in_setup:
            return False
        self.chrome.activity()
        moved = self.overlay.pointer_move(px, py)
        if moved:
            self._changed()
        return moved

    def pointer_up(self) -> None:
        self.overlay.pointer_up()

    def container_resized(self, width: float, height: float) -> None:
        self.overlay.geometry.recompute("container_resized", container_size=(width, height))
        self._changed()

    # ------------------------------------------------------------------
    # Shared context

    @property
    def in_setup(self) -> bool:
        return self.playback.phase in (PlaybackPhase.SETUP, PlaybackPhase.LOADING)

    @property
    def held_keys(self) -> Set[str]:
        return self._held_keys

    # Angle mode

    @property
    def angle_mode_active(self) -> bool:
        return self.overlay.angle_tool.active

    def set_angle_mode(self, active: bool) -> None:
        tool = self.overlay.angle_tool
        if active and not tool.active:
            tool.toggle()
        elif not active:
            tool.exit()

    def discard_in_progress_angle(self) -> bool:
        tool = self.overlay.angle_tool
        if tool.current is None:
            return False
        tool.current = None
        return True

    def remove_last_angle_line(self) -> bool:
        return self.overlay.angle_tool.remove_last()

    def clear_angle_lines(self) -> None:
        self.overlay.angle_tool.clear()

    def show_plumb_tool(self) -> None:
        self.overlay.plumb.show_plumb_tool = True

    def toggle_ui_lock(self) -> bool:
        """Locking freezes the chrome, the grid density and the plumb lines."""
        self.ui_locked = not self.ui_locked
        self.chrome.set_locked(self.ui_locked)
        self.overlay.grid.locked = self.ui_locked
        self.overlay.plumb.locked = self.ui_locked
        return self.ui_locked

    # Grid tool

    @property
    def grid_mode(self) -> int:
        return self.overlay.grid.mode

    @property
    def grid_locked(self) -> bool:
        return self.overlay.grid.locked

    def cycle_grid_mode(self) -> int:
        return self.overlay.grid.cycle_mode()

    def toggle_diagonals(self) -> bool:
        grid = self.overlay.grid
        grid.show_diagonals = not grid.show_diagonals
        return grid.show_diagonals

    def cycle_color(self) -> int:
        index = self.overlay.grid.cycle_color()
        self.overlay.plumb.color = self.overlay.grid.color
        return index

    def adjust_grid_width(self, delta: int) -> int:
        return self.overlay.grid.adjust_width(delta)

    # Line nudging

    def nudge_vertical_line(self, delta: float) -> float:
        return self.overlay.nudge_vertical(delta)

    def nudge_horizontal_line(self, delta: float) -> float:
        return self.overlay.nudge_horizontal(delta)

    def mark_arrow_used(self) -> None:
        self._arrow_used = True

    def flash_drag_target(self, target: str, clear_after_ms: int) -> None:
        self.overlay.drag_target = target

        def _clear() -> None:
            if self.overlay.drag_target == target:
                self.overlay.drag_target = None
                self._changed()

        self.timers.schedule_debounce(DRAG_FLASH_KEY, _clear, delay_ms=clear_after_ms)

    # Line release

    @property
    def arrow_used(self) -> bool:
        return self._arrow_used

    def clear_arrow_used(self) -> None:
        self._arrow_used = False

    def toggle_vertical_lines(self) -> bool:
        plumb = self.overlay.plumb
        plumb.show_vertical = not plumb.show_vertical
        return plumb.show_vertical

    def toggle_horizontal_lines(self) -> bool:
        plumb = self.overlay.plumb
        plumb.show_horizontal = not plumb.show_horizontal
        return plumb.show_horizontal

    # Playback

    @property
    def is_paused(self) -> bool:
        return self.playback.is_paused

    def pause(self) -> None:
        self.playback.pause()

    def resume(self) -> None:
        self.playback.resume()

    def reset_timer(self) -> None:
        self.playback.reset()

    def toggle_fullscreen(self) -> None:
        if self.is_fullscreen:
            self._release_fullscreen()
        else:
            self._enter_fullscreen()
        self.overlay.geometry.recompute("fullscreen_toggled")
        self._changed()

    def toggle_mute(self) -> bool:
        muted = self.cues.toggle_mute()
        if self._store is not None:
            try:
                save_muted(self._store, muted)
            except OSError as exc:
                _CLIENT_LOGGER.warning("Failed to persist mute flag: %s", exc)
        return muted

    def toggle_auto_advance(self) -> bool:
        return self.playback.toggle_auto_advance()

    def exit_session(self) -> None:
        self.playback.exit()
        self.overlay.clear_annotations()
        self._held_keys.clear()
        self._arrow_used = False
        self._changed()

    def next_pose(self) -> None:
        self.playback.next()

    def prev_pose(self) -> None:
        self.playback.prev()

    def reveal_ui(self) -> None:
        self.chrome.activity()

    # ------------------------------------------------------------------
    # Internals

    def _enter_fullscreen(self) -> None:
        if self.host is None:
            return
        try:
            self.host.enter_fullscreen()
        except Exception as exc:
            _CLIENT_LOGGER.warning("Failed to enter fullscreen: %s", exc)
            return
        self.is_fullscreen = True

    def _release_fullscreen(self) -> None:
        if not self.is_fullscreen:
            return
        self.is_fullscreen = False
        if self.host is None:
            return
        try:
            self.host.exit_fullscreen()
        except Exception as exc:
            _CLIENT_LOGGER.warning("Failed to exit fullscreen: %s", exc)

    def _handle_image_changed(self, index: int, entry: TimerEntry, image: Optional[ImageRef]) -> None:
        self.overlay.clear_annotations()
        size = None
        if image is not None and self._image_size_provider is not None:
            try:
                size = self._image_size_provider(image)
            except Exception as exc:
                _CLIENT_LOGGER.warning("Could not read size of image %s: %s", image.id, exc)
        self.overlay.geometry.recompute("image_changed", image_size=size or (0.0, 0.0))
        _CLIENT_LOGGER.debug("Showing pose %d (%s)", entry.pose_number, entry.image_id)
        self._changed()

    def _handle_state_changed(self, snapshot: PlaybackSnapshot) -> None:
        self._changed()

    def _changed(self) -> None:
        if self._on_changed is not None:
            self._on_changed()
