from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, Sequence

from practice_input.bindings import KeyBindings, load_bindings
from practice_input.contexts import DispatchContext
from practice_input.events import HandlerResult, KeyEvent
from practice_input.handlers import (
    AngleModeHandler,
    GridToolHandler,
    LineNudgeHandler,
    LineToggleReleaseHandler,
    PlaybackHandler,
)

_LOGGER_NAME = "DrawStack.Input"
_INPUT_LOGGER = logging.getLogger(_LOGGER_NAME)


class KeyHandler(Protocol):
    name: str

    def handle(self, event: KeyEvent, ctx: Any) -> HandlerResult: ...


class KeyDispatcher:
    """Routes key presses through an ordered handler chain; the first claimant wins.

    The context is shared by reference with the overlay and the window, and must
    satisfy every handler group's context protocol.
    """

    def __init__(
        self,
        ctx: DispatchContext,
        handlers: Sequence[KeyHandler],
        release_handlers: Sequence[KeyHandler] = (),
    ) -> None:
        self.ctx = ctx
        self.handlers = list(handlers)
        self.release_handlers = list(release_handlers)

    def key_down(self, event: KeyEvent) -> HandlerResult:
        if self.ctx.in_setup:
            return HandlerResult.NOT_CLAIMED
        self.ctx.held_keys.add(event.normalized_key)
        return self._walk(self.handlers, event, "down")

    def key_up(self, event: KeyEvent) -> HandlerResult:
        self.ctx.held_keys.discard(event.normalized_key)
        if self.ctx.in_setup:
            return HandlerResult.NOT_CLAIMED
        return self._walk(self.release_handlers, event, "up")

    def release_all(self) -> None:
        """Forget held keys, e.g. when the window loses focus mid-gesture."""
        self.ctx.held_keys.clear()

    def _walk(self, handlers: Sequence[KeyHandler], event: KeyEvent, phase: str) -> HandlerResult:
        for handler in handlers:
            result = handler.handle(event, self.ctx)
            if result is HandlerResult.CLAIMED:
                _INPUT_LOGGER.debug("Key %s %r claimed by %s", phase, event.key, handler.name)
                return result
        return HandlerResult.NOT_CLAIMED


def build_dispatcher(ctx: DispatchContext, bindings: Optional[KeyBindings] = None) -> KeyDispatcher:
    """Standard chain: angle mode, grid tool, line nudge, playback; V/H release on key-up."""
    bindings = bindings or load_bindings()
    return KeyDispatcher(
        ctx,
        handlers=[
            AngleModeHandler(bindings),
            GridToolHandler(bindings),
            LineNudgeHandler(bindings),
            PlaybackHandler(bindings),
        ],
        release_handlers=[LineToggleReleaseHandler(bindings)],
    )
