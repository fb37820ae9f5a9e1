from __future__ import annotations

from typing import List

from practice_client.chrome import HIDE_DEBOUNCE_KEY, ChromeAutoHide
from practice_engine.timers import TickTimers


class AfterHarness:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, int, object]] = []
        self.cancelled: list[object] = []

    def after(self, ms: int, cb) -> str:
        handle = f"h{len(self.scheduled) + 1}"
        self.scheduled.append((handle, ms, cb))
        return handle

    def cancel(self, handle: object) -> None:
        self.cancelled.append(handle)


def _chrome(delay_ms: int = 500):
    harness = AfterHarness()
    timers = TickTimers(harness.after, harness.cancel)
    changes: List[bool] = []
    chrome = ChromeAutoHide(timers, delay_ms=delay_ms, on_visibility_changed=changes.append)
    return chrome, timers, harness, changes


def test_hides_after_quiet_period() -> None:
    chrome, timers, harness, changes = _chrome()

    chrome.activity()
    assert timers.debounce_pending(HIDE_DEBOUNCE_KEY)
    _handle, delay, callback = harness.scheduled[-1]
    assert delay == 500
    callback()

    assert chrome.visible is False
    assert changes == [False]
    assert not timers.debounce_pending(HIDE_DEBOUNCE_KEY)


def test_activity_resets_pending_hide_and_reveals() -> None:
    chrome, _timers, harness, changes = _chrome()
    chrome.activity()
    harness.scheduled[-1][2]()

    chrome.activity()
    chrome.activity()

    assert chrome.visible is True
    assert changes == [False, True]
    assert harness.cancelled == ["h2"]


def test_locked_chrome_never_hides() -> None:
    chrome, timers, harness, changes = _chrome()
    chrome.activity()

    chrome.set_locked(True)
    assert not timers.debounce_pending(HIDE_DEBOUNCE_KEY)
    chrome.activity()
    assert not timers.debounce_pending(HIDE_DEBOUNCE_KEY)

    chrome.set_locked(False)
    assert timers.debounce_pending(HIDE_DEBOUNCE_KEY)
    assert chrome.visible is True
    assert changes == []


def test_stop_cancels_and_restores_visibility() -> None:
    chrome, timers, harness, changes = _chrome()
    chrome.activity()
    harness.scheduled[-1][2]()
    chrome.activity()

    chrome.stop()

    assert chrome.visible is True
    assert not timers.debounce_pending(HIDE_DEBOUNCE_KEY)
