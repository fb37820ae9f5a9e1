"""Configurable key binding schemes for the session shortcuts."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

from practice_input.events import KeyEvent

_LOGGER_NAME = "DrawStack.Input"
_INPUT_LOGGER = logging.getLogger(_LOGGER_NAME)

DEFAULT_CONFIG_PATH = Path(__file__).with_name("keybindings.json")

MODIFIERS = ("alt", "ctrl", "meta", "shift")
KEY_ALIASES = {"space": " ", "spacebar": " ", "esc": "Escape", "del": "Delete", "plus": "+", "minus": "-"}

# Default layout that can be extended by the user later on.
DEFAULT_CONFIG = {
    "active_scheme": "keyboard_default",
    "schemes": {
        "keyboard_default": {
            "device_type": "keyboard",
            "display_name": "Keyboard (default)",
            "bindings": {
                "vertical_line": ["v"],
                "horizontal_line": ["h"],
                "angle_mode": ["a"],
                "clear_angles": ["Alt+a"],
                "remove_angle": ["Delete", "Backspace"],
                "toggle_lock": ["l"],
                "exit_mode": ["Escape"],
                "grid_cycle": ["g"],
                "grid_diagonals": ["d"],
                "color_cycle": ["c"],
                "width_increase": ["+", "="],
                "width_decrease": ["-", "_"],
                "nudge_left": ["ArrowLeft"],
                "nudge_right": ["ArrowRight"],
                "nudge_up": ["ArrowUp"],
                "nudge_down": ["ArrowDown"],
                "pause_toggle": ["Space"],
                "restart": ["Shift+r"],
                "reset_timer": ["r"],
                "extend": ["e"],
                "fullscreen": ["f"],
                "mute": ["m"],
                "auto_advance": ["n"],
                "exit": ["Escape"],
                "prev_pose": ["ArrowLeft"],
                "next_pose": ["ArrowRight"],
            },
        }
    },
}


@dataclass
class ControlScheme:
    """Container for a set of bindings and some metadata."""

    name: str
    device_type: str
    display_name: str
    bindings: Dict[str, List[str]]


@dataclass
class BindingConfig:
    """Representation of the configuration file contents."""

    schemes: Dict[str, ControlScheme]
    active_scheme: str
    source_path: Path

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "BindingConfig":
        """Load config from disk, creating the default file if missing."""

        path = path or DEFAULT_CONFIG_PATH
        if not path.exists():
            path.write_text(json.dumps(DEFAULT_CONFIG, indent=2))

        return cls.from_payload(json.loads(path.read_text()), path)

    @classmethod
    def from_payload(cls, payload: dict, path: Path) -> "BindingConfig":
        schemes = {
            name: ControlScheme(
                name=name,
                device_type=spec.get("device_type", "keyboard"),
                display_name=spec.get("display_name", name),
                bindings={
                    action: list(inputs or [])
                    for action, inputs in (spec.get("bindings") or {}).items()
                },
            )
            for name, spec in payload.get("schemes", {}).items()
        }

        active = payload.get("active_scheme")
        if active not in schemes:
            raise ValueError(
                f"Active scheme '{active}' is not defined in keybindings file {path}"
            )

        return cls(schemes=schemes, active_scheme=active, source_path=path)

    @classmethod
    def default(cls) -> "BindingConfig":
        return cls.from_payload(DEFAULT_CONFIG, Path("<default>"))

    def get_scheme(self, name: Optional[str] = None) -> ControlScheme:
        """Return the requested scheme or the currently active one."""

        scheme_name = name or self.active_scheme
        try:
            return self.schemes[scheme_name]
        except KeyError as exc:
            raise ValueError(f"Unknown control scheme '{scheme_name}'") from exc


@dataclass(frozen=True)
class KeyChord:
    key: str
    modifiers: FrozenSet[str] = frozenset()

    def matches(self, event: KeyEvent) -> bool:
        if event.normalized_key != self.key:
            return False
        pressed = {name for name in MODIFIERS if getattr(event, name)}
        if not self.modifiers.issubset(pressed):
            return False
        # Ctrl/Meta chords belong to the host unless a binding asks for them.
        return not ({"ctrl", "meta"} & pressed) - self.modifiers


def parse_sequence(sequence: str) -> KeyChord:
    """Parse ``"Alt+a"``, ``"ArrowLeft"`` or ``"+"`` into a chord."""
    seq = sequence.strip()
    if not seq:
        raise ValueError("Binding sequence cannot be empty")
    if len(seq) == 1:
        return KeyChord(key=seq.lower())
    parts = seq.split("+")
    if parts[-1] == "":
        # Trailing "+" is the plus key itself, e.g. "Shift++".
        parts = parts[:-2] + ["+"]
    *modifier_parts, key = parts
    modifiers = set()
    for part in modifier_parts:
        name = part.strip().lower()
        if name not in MODIFIERS:
            raise ValueError(f"Unknown modifier '{part}' in binding '{sequence}'")
        modifiers.add(name)
    key = key.strip()
    key = KEY_ALIASES.get(key.lower(), key)
    if len(key) == 1:
        key = key.lower()
    if not key:
        raise ValueError(f"Binding '{sequence}' has no key")
    return KeyChord(key=key, modifiers=frozenset(modifiers))


class KeyBindings:
    """Resolved chords for the active scheme."""

    def __init__(self, config: BindingConfig, scheme_name: Optional[str] = None) -> None:
        self.config = config
        self._chords: Dict[str, List[KeyChord]] = {}
        self.activate(scheme_name)

    def activate(self, scheme_name: Optional[str] = None) -> None:
        scheme = self.config.get_scheme(scheme_name)
        chords: Dict[str, List[KeyChord]] = {}
        for action, sequences in scheme.bindings.items():
            parsed: List[KeyChord] = []
            for sequence in sequences:
                try:
                    parsed.append(parse_sequence(str(sequence)))
                except ValueError as exc:
                    _INPUT_LOGGER.warning("Skipping binding for '%s' (%r): %s", action, sequence, exc)
            chords[action] = parsed
        self._chords = chords
        _INPUT_LOGGER.debug("Activated key scheme %s with %d actions", scheme.name, len(chords))

    def chords(self, action: str) -> List[KeyChord]:
        return list(self._chords.get(action, ()))

    def matches(self, action: str, event: KeyEvent) -> bool:
        return any(chord.matches(event) for chord in self._chords.get(action, ()))

    def matches_key(self, action: str, key: str) -> bool:
        """Key-only comparison, used for held-key lookups."""
        normalized = key.lower() if len(key) == 1 else key
        return any(chord.key == normalized for chord in self._chords.get(action, ()))


def load_bindings(path: Optional[Path] = None) -> KeyBindings:
    try:
        config = BindingConfig.load(path)
    except (OSError, ValueError) as exc:
        _INPUT_LOGGER.warning("Key bindings unavailable (%s); using built-in defaults", exc)
        config = BindingConfig.default()
    return KeyBindings(config)
