from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from practice_input.bindings import DEFAULT_CONFIG, BindingConfig, KeyBindings, load_bindings, parse_sequence
from practice_input.events import KeyEvent


def _config(bindings: dict[str, list[str]]) -> BindingConfig:
    payload = {
        "active_scheme": "test",
        "schemes": {"test": {"display_name": "Test", "bindings": bindings}},
    }
    return BindingConfig.from_payload(payload, Path("dummy"))


def test_load_writes_default_when_missing(tmp_path: Path) -> None:
    path = tmp_path / "keybindings.json"

    config = BindingConfig.load(path)

    assert json.loads(path.read_text()) == DEFAULT_CONFIG
    assert config.get_scheme().display_name == "Keyboard (default)"


def test_load_rejects_unknown_active_scheme(tmp_path: Path) -> None:
    path = tmp_path / "keybindings.json"
    path.write_text(json.dumps({"active_scheme": "missing", "schemes": {}}))

    with pytest.raises(ValueError):
        BindingConfig.load(path)


def test_load_bindings_falls_back_to_defaults(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "keybindings.json"
    path.write_text("{broken")

    with caplog.at_level(logging.WARNING, logger="DrawStack.Input"):
        bindings = load_bindings(path)

    assert bindings.matches("angle_mode", KeyEvent("a"))
    assert any("built-in defaults" in record.getMessage() for record in caplog.records)


def test_invalid_and_empty_sequences_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="DrawStack.Input"):
        bindings = KeyBindings(_config({"grid_cycle": ["", "   ", "Hyper+g", "g"]}))

    assert [chord.key for chord in bindings.chords("grid_cycle")] == ["g"]
    assert sum("grid_cycle" in record.getMessage() for record in caplog.records) == 3


@pytest.mark.parametrize(
    "sequence,key,modifiers",
    [
        ("Alt+a", "a", {"alt"}),
        ("Space", " ", set()),
        ("Shift++", "+", {"shift"}),
        ("+", "+", set()),
        ("ArrowLeft", "ArrowLeft", set()),
        ("V", "v", set()),
    ],
)
def test_parse_sequence(sequence: str, key: str, modifiers: set[str]) -> None:
    chord = parse_sequence(sequence)

    assert chord.key == key
    assert chord.modifiers == frozenset(modifiers)


def test_required_modifiers_must_be_pressed() -> None:
    bindings = KeyBindings(_config({"clear": ["Alt+a"], "toggle": ["a"]}))

    assert not bindings.matches("clear", KeyEvent("a"))
    assert bindings.matches("clear", KeyEvent("A", alt=True, shift=True))
    assert bindings.matches("toggle", KeyEvent("A", shift=True))
    assert not bindings.matches("toggle", KeyEvent("a", ctrl=True))


def test_custom_scheme_rebinds_action(tmp_path: Path) -> None:
    bindings = KeyBindings(_config({"pause_toggle": ["p"]}))

    assert bindings.matches("pause_toggle", KeyEvent("p"))
    assert not bindings.matches("pause_toggle", KeyEvent(" "))
    assert bindings.matches_key("pause_toggle", "P")
