"""Narrow views of the session state, one per handler group."""
from __future__ import annotations

from typing import Protocol, Set


class DispatchContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def held_keys(self) -> Set[str]: ...


class AngleModeContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def angle_mode_active(self) -> bool: ...

    def set_angle_mode(self, active: bool) -> None: ...

    def discard_in_progress_angle(self) -> bool: ...

    def remove_last_angle_line(self) -> bool: ...

    def clear_angle_lines(self) -> None: ...

    def show_plumb_tool(self) -> None: ...

    def toggle_ui_lock(self) -> bool: ...


class GridToolContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def grid_mode(self) -> int: ...

    @property
    def grid_locked(self) -> bool: ...

    def cycle_grid_mode(self) -> int: ...

    def toggle_diagonals(self) -> bool: ...

    def cycle_color(self) -> int: ...

    def adjust_grid_width(self, delta: int) -> int: ...


class LineNudgeContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def held_keys(self) -> Set[str]: ...

    def nudge_vertical_line(self, delta: float) -> float: ...

    def nudge_horizontal_line(self, delta: float) -> float: ...

    def mark_arrow_used(self) -> None: ...

    def flash_drag_target(self, target: str, clear_after_ms: int) -> None: ...


class PlaybackContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def held_keys(self) -> Set[str]: ...

    @property
    def is_paused(self) -> bool: ...

    @property
    def is_fullscreen(self) -> bool: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...

    def reset_timer(self) -> None: ...

    def restart(self) -> None: ...

    def extend(self, seconds: int) -> None: ...

    def toggle_fullscreen(self) -> None: ...

    def toggle_mute(self) -> bool: ...

    def toggle_auto_advance(self) -> bool: ...

    def exit_session(self) -> None: ...

    def next_pose(self) -> None: ...

    def prev_pose(self) -> None: ...

    def reveal_ui(self) -> None: ...


class LineReleaseContext(Protocol):
    @property
    def in_setup(self) -> bool: ...

    @property
    def arrow_used(self) -> bool: ...

    def clear_arrow_used(self) -> None: ...

    def toggle_vertical_lines(self) -> bool: ...

    def toggle_horizontal_lines(self) -> bool: ...

    def show_plumb_tool(self) -> None: ...
