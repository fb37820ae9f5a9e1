"""Handler groups for the session keyboard shortcuts.

Each group gets only the context it needs and reports whether it claimed the event.
The dispatcher walks them in a fixed order, so a group earlier in the chain shadows
the same key in later groups (angle mode's Escape beats playback's Escape).
"""
from __future__ import annotations

import logging
from typing import Iterable

from practice_input.bindings import KeyBindings
from practice_input.contexts import (
    AngleModeContext,
    GridToolContext,
    LineNudgeContext,
    LineReleaseContext,
    PlaybackContext,
)
from practice_input.events import HandlerResult, KeyEvent

_LOGGER_NAME = "DrawStack.Input"
_INPUT_LOGGER = logging.getLogger(_LOGGER_NAME)

NUDGE_STEP = 0.01
NUDGE_HIGHLIGHT_MS = 100
EXTEND_STEP_SECONDS = 60
VERTICAL_LINE_TARGET = "vertical-line"
HORIZONTAL_LINE_TARGET = "horizontal-line"

CLAIMED = HandlerResult.CLAIMED
NOT_CLAIMED = HandlerResult.NOT_CLAIMED


def _any_held(bindings: KeyBindings, action: str, held_keys: Iterable[str]) -> bool:
    return any(bindings.matches_key(action, key) for key in held_keys)


class AngleModeHandler:
    name = "angle_mode"

    def __init__(self, bindings: KeyBindings) -> None:
        self.bindings = bindings

    def handle(self, event: KeyEvent, ctx: AngleModeContext) -> HandlerResult:
        if ctx.in_setup:
            return NOT_CLAIMED
        matches = self.bindings.matches

        # Line toggles happen on key-up; the press is only swallowed here.
        if matches("vertical_line", event) or matches("horizontal_line", event):
            return CLAIMED

        if matches("clear_angles", event):
            ctx.clear_angle_lines()
            return CLAIMED
        if matches("angle_mode", event):
            turning_on = not ctx.angle_mode_active
            ctx.set_angle_mode(turning_on)
            if turning_on:
                ctx.show_plumb_tool()
            return CLAIMED

        if matches("remove_angle", event):
            if ctx.discard_in_progress_angle():
                return CLAIMED
            if ctx.remove_last_angle_line():
                return CLAIMED
            return NOT_CLAIMED

        if matches("toggle_lock", event):
            locked = ctx.toggle_ui_lock()
            _INPUT_LOGGER.debug("UI lock %s", "on" if locked else "off")
            return CLAIMED

        if matches("exit_mode", event) and ctx.angle_mode_active:
            ctx.set_angle_mode(False)
            return CLAIMED

        return NOT_CLAIMED


class GridToolHandler:
    name = "grid_tool"

    def __init__(self, bindings: KeyBindings) -> None:
        self.bindings = bindings

    def handle(self, event: KeyEvent, ctx: GridToolContext) -> HandlerResult:
        if ctx.in_setup:
            return NOT_CLAIMED
        matches = self.bindings.matches
        grid_active = ctx.grid_mode > 0

        if matches("grid_cycle", event) and not ctx.grid_locked:
            ctx.cycle_grid_mode()
            return CLAIMED
        if matches("grid_diagonals", event) and grid_active:
            ctx.toggle_diagonals()
            return CLAIMED
        if matches("color_cycle", event):
            ctx.cycle_color()
            return CLAIMED
        if matches("width_increase", event) and grid_active:
            ctx.adjust_grid_width(+1)
            return CLAIMED
        if matches("width_decrease", event) and grid_active:
            ctx.adjust_grid_width(-1)
            return CLAIMED
        return NOT_CLAIMED


class LineNudgeHandler:
    """Arrow keys move a plumb line while its toggle key is held."""

    name = "line_nudge"

    def __init__(self, bindings: KeyBindings, *, step: float = NUDGE_STEP) -> None:
        self.bindings = bindings
        self.step = step

    def handle(self, event: KeyEvent, ctx: LineNudgeContext) -> HandlerResult:
        if ctx.in_setup:
            return NOT_CLAIMED
        matches = self.bindings.matches
        held = ctx.held_keys

        if _any_held(self.bindings, "vertical_line", held):
            if matches("nudge_left", event):
                return self._nudge(ctx, VERTICAL_LINE_TARGET, -self.step)
            if matches("nudge_right", event):
                return self._nudge(ctx, VERTICAL_LINE_TARGET, self.step)
        if _any_held(self.bindings, "horizontal_line", held):
            if matches("nudge_up", event):
                return self._nudge(ctx, HORIZONTAL_LINE_TARGET, -self.step)
            if matches("nudge_down", event):
                return self._nudge(ctx, HORIZONTAL_LINE_TARGET, self.step)
        return NOT_CLAIMED

    def _nudge(self, ctx: LineNudgeContext, target: str, delta: float) -> HandlerResult:
        ctx.mark_arrow_used()
        ctx.flash_drag_target(target, NUDGE_HIGHLIGHT_MS)
        if target == VERTICAL_LINE_TARGET:
            ctx.nudge_vertical_line(delta)
        else:
            ctx.nudge_horizontal_line(delta)
        return CLAIMED


class PlaybackHandler:
    name = "playback"

    def __init__(self, bindings: KeyBindings) -> None:
        self.bindings = bindings

    def handle(self, event: KeyEvent, ctx: PlaybackContext) -> HandlerResult:
        if ctx.in_setup:
            return NOT_CLAIMED
        matches = self.bindings.matches

        if matches("pause_toggle", event):
            ctx.reveal_ui()
            if ctx.is_paused:
                ctx.resume()
            else:
                ctx.pause()
            return CLAIMED
        # Shift+R must be tested ahead of the plain R chord.
        if matches("restart", event):
            ctx.reveal_ui()
            ctx.restart()
            return CLAIMED
        if matches("reset_timer", event):
            ctx.reveal_ui()
            ctx.reset_timer()
            return CLAIMED
        if matches("extend", event):
            ctx.reveal_ui()
            ctx.extend(EXTEND_STEP_SECONDS)
            return CLAIMED
        if matches("fullscreen", event):
            ctx.reveal_ui()
            ctx.toggle_fullscreen()
            return CLAIMED
        if matches("mute", event):
            ctx.reveal_ui()
            ctx.toggle_mute()
            return CLAIMED
        if matches("auto_advance", event):
            ctx.reveal_ui()
            ctx.toggle_auto_advance()
            return CLAIMED
        if matches("exit", event):
            if ctx.is_fullscreen:
                ctx.toggle_fullscreen()
            else:
                ctx.exit_session()
            return CLAIMED

        line_key_held = _any_held(self.bindings, "vertical_line", ctx.held_keys) or _any_held(
            self.bindings, "horizontal_line", ctx.held_keys
        )
        if line_key_held or event.alt or event.has_command_modifier or event.shift:
            return NOT_CLAIMED
        if matches("prev_pose", event):
            ctx.reveal_ui()
            ctx.prev_pose()
            return CLAIMED
        if matches("next_pose", event):
            ctx.reveal_ui()
            ctx.next_pose()
            return CLAIMED
        return NOT_CLAIMED


class LineToggleReleaseHandler:
    """Key-up half of the V/H gesture: a tap toggles the line, hold+arrow does not."""

    name = "line_release"

    def __init__(self, bindings: KeyBindings) -> None:
        self.bindings = bindings

    def handle(self, event: KeyEvent, ctx: LineReleaseContext) -> HandlerResult:
        if ctx.in_setup:
            return NOT_CLAIMED
        if self.bindings.matches("vertical_line", event):
            toggle = ctx.toggle_vertical_lines
        elif self.bindings.matches("horizontal_line", event):
            toggle = ctx.toggle_horizontal_lines
        else:
            return NOT_CLAIMED

        if ctx.arrow_used:
            ctx.clear_arrow_used()
            return CLAIMED
        if toggle():
            ctx.show_plumb_tool()
        return CLAIMED
