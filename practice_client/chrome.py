from __future__ import annotations

from typing import Callable, Optional

from practice_engine.timers import TickTimers

HIDE_DEBOUNCE_KEY = "chrome-hide"


class ChromeAutoHide:
    """Shows the session chrome on activity and hides it after a quiet period.

    Every activity resets the pending hide. While ``locked`` the chrome stays as it
    is and no hide is ever scheduled.
    """

    def __init__(
        self,
        timers: TickTimers,
        *,
        delay_ms: int = 3000,
        on_visibility_changed: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._timers = timers
        self.delay_ms = delay_ms
        self._on_visibility_changed = on_visibility_changed
        self.visible = True
        self.locked = False

    def activity(self) -> None:
        if self.locked:
            return
        self._set_visible(True)
        self._timers.schedule_debounce(HIDE_DEBOUNCE_KEY, self._hide, delay_ms=self.delay_ms)

    def set_locked(self, locked: bool) -> None:
        self.locked = bool(locked)
        if self.locked:
            self._timers.cancel_debounce(HIDE_DEBOUNCE_KEY)
        else:
            self.activity()

    def stop(self) -> None:
        self._timers.cancel_debounce(HIDE_DEBOUNCE_KEY)
        self._set_visible(True)

    def _hide(self) -> None:
        if self.locked:
            return
        self._set_visible(False)

    def _set_visible(self, visible: bool) -> None:
        if visible == self.visible:
            return
        self.visible = visible
        if self._on_visibility_changed is not None:
            self._on_visibility_changed(visible)
