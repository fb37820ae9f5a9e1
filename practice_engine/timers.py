from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

AfterFn = Callable[[int, Callable[[], None]], object]
AfterCancelFn = Callable[[object], None]

_LOGGER_NAME = "DrawStack.Engine"
_ENGINE_LOGGER = logging.getLogger(_LOGGER_NAME)

TICK_INTERVAL_MS = 1000


class TickTimers:
    """Owns the single repeating session tick plus keyed debounce handles.

    ``after``/``after_cancel`` follow the Tk/Qt single-shot shape: ``after(ms, cb)``
    returns a handle that ``after_cancel(handle)`` revokes.
    """

    def __init__(
        self,
        after: AfterFn,
        after_cancel: AfterCancelFn,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._after = after
        self._after_cancel = after_cancel
        self._logger = logger or _ENGINE_LOGGER

        self._tick_handle: object | None = None
        self._tick_callback: Callable[[], None] | None = None
        self._tick_interval_ms = TICK_INTERVAL_MS
        self._tick_generation = 0
        self._debounce_handles: Dict[str, object] = {}

    @property
    def tick_active(self) -> bool:
        return self._tick_callback is not None

    def start_tick(self, callback: Callable[[], None], interval_ms: int = TICK_INTERVAL_MS) -> object:
        self.stop_tick()
        self._tick_generation += 1
        self._tick_callback = callback
        self._tick_interval_ms = max(1, int(interval_ms))
        generation = self._tick_generation
        self._tick_handle = self._after(self._tick_interval_ms, lambda: self._run_tick(generation))
        return self._tick_handle

    def stop_tick(self) -> None:
        handle = self._tick_handle
        self._tick_handle = None
        self._tick_callback = None
        self._tick_generation += 1
        if handle is not None:
            self._cancel(handle)

    def _run_tick(self, generation: int) -> None:
        if generation != self._tick_generation:
            return
        self._tick_handle = None
        callback = self._tick_callback
        try:
            if callback is not None:
                callback()
        finally:
            # The callback may have stopped or restarted the tick; only the owner reschedules.
            if generation == self._tick_generation and self._tick_callback is not None:
                self._tick_handle = self._after(self._tick_interval_ms, lambda: self._run_tick(generation))

    def schedule_debounce(self, key: str, callback: Callable[[], None], *, delay_ms: int) -> object:
        existing = self._debounce_handles.pop(key, None)
        if existing is not None:
            self._cancel(existing)

        def _fire() -> None:
            self._debounce_handles.pop(key, None)
            callback()

        handle = self._after(max(0, int(delay_ms)), _fire)
        self._debounce_handles[key] = handle
        return handle

    def cancel_debounce(self, key: str) -> None:
        handle = self._debounce_handles.pop(key, None)
        if handle is None:
            return
        self._cancel(handle)

    def debounce_pending(self, key: str) -> bool:
        return key in self._debounce_handles

    def cancel_all(self) -> None:
        self.stop_tick()
        for key in list(self._debounce_handles):
            self.cancel_debounce(key)

    def _cancel(self, handle: object) -> None:
        try:
            self._after_cancel(handle)
        except Exception as exc:
            self._logger.debug("Timer cancel failed for %r: %s", handle, exc)
