"""Playback state machine: countdown, navigation, auto-advance and completion."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from practice_engine.audio import AudioCues
from practice_engine.errors import ImageLoadError, ValidationError
from practice_engine.library import ImageStore
from practice_engine.models import ImageRef, PlaybackPhase, PlaybackSnapshot, TimerEntry
from practice_engine.timers import TICK_INTERVAL_MS, TickTimers

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)

ImageChangedFn = Callable[[int, TimerEntry, Optional[ImageRef]], None]
StateChangedFn = Callable[[PlaybackSnapshot], None]


class PlaybackStateMachine:
    """Drives a generated session from Setup through Completed.

    Phases move ``SETUP -> LOADING -> ACTIVE -> COMPLETED``; ``COMPLETED`` only goes back
    to ``ACTIVE`` through :meth:`restart`. ``exit`` returns to ``SETUP`` from anywhere.
    The tick source is owned by :class:`TickTimers`, so starting a new tick always
    cancels the previous one.
    """

    def __init__(
        self,
        image_store: ImageStore,
        timers: TickTimers,
        *,
        cues: Optional[AudioCues] = None,
        on_image_changed: Optional[ImageChangedFn] = None,
        on_state_changed: Optional[StateChangedFn] = None,
        on_exit: Optional[Callable[[], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
        tick_interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        self._store = image_store
        self._timers = timers
        self._cues = cues
        self._on_image_changed = on_image_changed
        self._on_state_changed = on_state_changed
        self._on_exit = on_exit
        self._on_completed = on_completed
        self._tick_interval_ms = tick_interval_ms

        self.phase = PlaybackPhase.SETUP
        self.current_index = 0
        self.time_remaining = 0
        self.is_paused = False
        self.auto_advance = True
        self._entries: List[TimerEntry] = []
        self._images: List[ImageRef] = []

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def entries(self) -> Sequence[TimerEntry]:
        return tuple(self._entries)

    @property
    def current_entry(self) -> Optional[TimerEntry]:
        if 0 <= self.current_index < len(self._entries):
            return self._entries[self.current_index]
        return None

    @property
    def current_image(self) -> Optional[ImageRef]:
        if 0 <= self.current_index < len(self._images):
            return self._images[self.current_index]
        return None

    @property
    def is_active(self) -> bool:
        return self.phase is PlaybackPhase.ACTIVE

    def snapshot(self) -> PlaybackSnapshot:
        return PlaybackSnapshot(
            current_index=self.current_index,
            time_remaining=self.time_remaining,
            is_paused=self.is_paused,
            phase=self.phase,
            total=len(self._entries),
            auto_advance=self.auto_advance,
        )

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self, entries: Sequence[TimerEntry]) -> None:
        """Hydrate every entry's image and begin playing the first survivor.

        Entries whose image cannot be resolved are logged and dropped. Raises
        ``ValidationError`` (and returns to ``SETUP``) when nothing survives.
        """
        self._timers.stop_tick()
        self.phase = PlaybackPhase.LOADING
        self._notify_state()

        kept_entries: List[TimerEntry] = []
        kept_images: List[ImageRef] = []
        for entry in entries:
            try:
                image = await self._store.get_image(entry.image_id)
                if image is None:
                    raise ImageLoadError(entry.image_id)
            except Exception as exc:
                _ENGINE_LOGGER.warning(
                    "Dropping pose %d: image %s could not be loaded (%s)", entry.pose_number, entry.image_id, exc
                )
                continue
            kept_entries.append(entry)
            kept_images.append(image)

        if not kept_entries:
            self.phase = PlaybackPhase.SETUP
            self._entries = []
            self._images = []
            self._notify_state()
            raise ValidationError("None of the session images could be loaded", field="entries")

        dropped = len(entries) - len(kept_entries)
        if dropped:
            _ENGINE_LOGGER.info("Session starting with %d poses (%d dropped)", len(kept_entries), dropped)
        self._entries = kept_entries
        self._images = kept_images
        self._enter_index(0)
        self.is_paused = False
        self.phase = PlaybackPhase.ACTIVE
        self._start_tick()
        self._notify_image_changed()
        self._notify_state()

    def exit(self) -> None:
        """Cancel the tick, release the host (fullscreen) and go back to Setup. Idempotent."""
        self._timers.stop_tick()
        self._run_hook(self._on_exit, "Exit")
        if self.phase is PlaybackPhase.SETUP:
            return
        self.phase = PlaybackPhase.SETUP
        self.is_paused = False
        self._notify_state()

    def restart(self) -> None:
        if self.phase not in (PlaybackPhase.ACTIVE, PlaybackPhase.COMPLETED) or not self._entries:
            return
        self._enter_index(0)
        self.is_paused = False
        self.phase = PlaybackPhase.ACTIVE
        self._start_tick()
        self._notify_image_changed()
        self._notify_state()

    # ------------------------------------------------------------------
    # Countdown

    def tick(self) -> None:
        if self.phase is not PlaybackPhase.ACTIVE or self.is_paused:
            return
        entry = self.current_entry
        if entry is None:
            return
        self.time_remaining = max(0, self.time_remaining - 1)
        if self.time_remaining > 0:
            self._notify_state()
            return

        if self.current_index >= len(self._entries) - 1:
            self._complete()
            return
        if not self.auto_advance:
            self.is_paused = True
            self._notify_state()
            return
        self._play_cue("advance")
        self._enter_index(self.current_index + 1)
        self._notify_image_changed()
        self._notify_state()

    def _complete(self) -> None:
        self._play_cue("completion")
        self.phase = PlaybackPhase.COMPLETED
        self.is_paused = True
        self._timers.stop_tick()
        _ENGINE_LOGGER.info("Session completed after %d poses", len(self._entries))
        self._run_hook(self._on_completed, "Completion")
        self._notify_state()

    def pause(self) -> None:
        if self.phase is not PlaybackPhase.ACTIVE or self.is_paused:
            return
        self.is_paused = True
        self._notify_state()

    def resume(self) -> None:
        if self.phase is not PlaybackPhase.ACTIVE or not self.is_paused:
            return
        self.is_paused = False
        # A finished entry paused by manual advance mode moves on when resumed.
        if self.time_remaining <= 0 and self.current_index < len(self._entries) - 1:
            self._enter_index(self.current_index + 1)
            self._notify_image_changed()
        self._notify_state()

    def toggle_pause(self) -> None:
        if self.is_paused:
            self.resume()
        else:
            self.pause()

    def reset(self) -> None:
        entry = self.current_entry
        if entry is None:
            return
        self.time_remaining = entry.duration_seconds
        self._notify_state()

    def extend(self, seconds: int) -> None:
        """Add time to the current pose.

        The entry's stored duration grows too, so later ``reset``/``restart`` calls use
        the extended length for the rest of the session.
        """
        entry = self.current_entry
        if entry is None or seconds <= 0:
            return
        entry.duration_seconds += int(seconds)
        self.time_remaining += int(seconds)
        self._notify_state()

    def toggle_auto_advance(self) -> bool:
        self.auto_advance = not self.auto_advance
        self._notify_state()
        return self.auto_advance

    # ------------------------------------------------------------------
    # Navigation

    def go_to(self, index: int) -> None:
        if self.phase is not PlaybackPhase.ACTIVE or not self._entries:
            return
        target = max(0, min(int(index), len(self._entries) - 1))
        self._enter_index(target)
        self._start_tick()
        self._notify_image_changed()
        self._notify_state()

    def next(self) -> None:
        self.go_to(self.current_index + 1)

    def prev(self) -> None:
        self.go_to(self.current_index - 1)

    # ------------------------------------------------------------------
    # Internals

    def _enter_index(self, index: int) -> None:
        self.current_index = index
        entry = self.current_entry
        self.time_remaining = entry.duration_seconds if entry is not None else 0

    def _start_tick(self) -> None:
        self._timers.start_tick(self.tick, self._tick_interval_ms)

    def _play_cue(self, name: str) -> None:
        if self._cues is None:
            return
        if name == "advance":
            self._cues.play_advance()
        else:
            self._cues.play_completion()

    def _notify_image_changed(self) -> None:
        entry = self.current_entry
        if self._on_image_changed is None or entry is None:
            return
        self._on_image_changed(self.current_index, entry, self.current_image)

    def _run_hook(self, hook: Optional[Callable[[], None]], label: str) -> None:
        if hook is None:
            return
        try:
            hook()
        except Exception as exc:
            _ENGINE_LOGGER.warning("%s hook failed: %s", label, exc)

    def _notify_state(self) -> None:
        if self._on_state_changed is None:
            return
        self._on_state_changed(self.snapshot())
