from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from practice_client.logging_utils import configure_logging
from practice_client.settings import DEFAULT_SETTINGS_PATH, load_client_settings
from practice_engine.errors import PracticeError, format_error_message
from practice_engine.generator import generate_classroom_session, generate_quick_session
from practice_engine.library import JsonLibrary, Notifier
from practice_engine.models import TimerEntry
from practice_engine.presets import PresetCatalog
from practice_engine.storage import KeyValueStore, RecentTags, default_state_path

_LOGGER_NAME = "DrawStack.Client"
_CLIENT_LOGGER = logging.getLogger(_LOGGER_NAME)

DEFAULT_PRESET = "classic-figure"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Draw Stack timed practice session")
    parser.add_argument("--library", required=True, help="Path to the library export JSON")
    parser.add_argument(
        "--images",
        help="Comma-separated, ordered image ids the session is limited to (default: whole library)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--preset", help=f"Classroom preset or custom session id (default: {DEFAULT_PRESET})")
    mode.add_argument("--quick", type=int, metavar="COUNT", help="Ad-hoc session of COUNT poses")
    mode.add_argument("--list-presets", action="store_true", help="Print available sessions and exit")
    parser.add_argument(
        "--seconds",
        type=int,
        help="Seconds per pose for --quick (default: default_duration_seconds from settings)",
    )
    parser.add_argument("--tags", help="Comma-separated tag ids every pose must carry")
    parser.add_argument("--settings", help="Path to settings.json")
    parser.add_argument("--state", help="Path to the persisted state file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def _split_ids(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def prepare_entries(
    args: argparse.Namespace,
    library: JsonLibrary,
    catalog: PresetCatalog,
    notifier: Notifier,
    *,
    default_seconds: int = 60,
) -> List[TimerEntry]:
    """Generate the pose sequence requested on the command line."""
    allowed_ids = _split_ids(args.images) or None
    tags = _split_ids(args.tags)
    if args.quick is not None:
        count = args.quick
        seconds = args.seconds if args.seconds is not None else default_seconds
        return asyncio.run(
            generate_quick_session(count, seconds, library, notifier, tag_filter=tags, allowed_ids=allowed_ids)
        )
    preset_id = args.preset or DEFAULT_PRESET
    preset = catalog.get(preset_id)
    if preset is None:
        raise SystemExit(f"Unknown session '{preset_id}'. Use --list-presets to see the options.")
    return asyncio.run(
        generate_classroom_session(preset, library, notifier, global_tag_filter=tags, allowed_ids=allowed_ids)
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    settings_path = Path(args.settings).expanduser() if args.settings else DEFAULT_SETTINGS_PATH
    settings = load_client_settings(settings_path)
    log_path = configure_logging(debug=args.debug or settings.debug, retention=settings.client_log_retention)
    _CLIENT_LOGGER.info("Starting practice session (pid=%s)", os.getpid())
    _CLIENT_LOGGER.debug("Logging to %s; settings from %s", log_path, settings_path)

    state = KeyValueStore(Path(args.state).expanduser() if args.state else default_state_path())
    catalog = PresetCatalog(state)
    if args.list_presets:
        for preset in catalog.all():
            origin = "built-in" if preset.builtin else "custom"
            print(f"{preset.id:20} {preset.total_poses:4d} poses  {preset.name} ({origin})")
        return 0

    # Qt is only needed once a session is actually shown.
    from PyQt6.QtWidgets import QApplication

    from practice_client.session_controller import SessionController
    from practice_client.session_window import QtTimerBridge, SessionWindow, WindowNotifier
    from practice_engine.audio import AudioCues
    from practice_engine.storage import load_muted
    from practice_engine.timers import TickTimers
    from practice_input.bindings import load_bindings

    app = QApplication(sys.argv[:1])
    library = JsonLibrary(Path(args.library).expanduser())
    window = SessionWindow()
    notifier = WindowNotifier(window)
    try:
        entries = prepare_entries(
            args, library, catalog, notifier, default_seconds=settings.default_duration_seconds
        )
    except PracticeError as exc:
        print(format_error_message(exc), file=sys.stderr)
        return 2
    tags = _split_ids(args.tags)
    if tags:
        RecentTags(state).record(tags)

    bridge = QtTimerBridge(window)
    controller = SessionController(
        library,
        TickTimers(bridge.after, bridge.after_cancel),
        cues=AudioCues(muted=load_muted(state)),
        store=state,
        bindings=load_bindings(),
        host=window,
        image_size_provider=window.image_size,
        chrome_hide_delay_ms=settings.chrome_hide_delay_ms,
        auto_advance=settings.auto_advance,
        on_changed=window.controller_changed,
    )
    window.attach(controller)

    try:
        asyncio.run(controller.start_session(entries))
    except PracticeError as exc:
        print(format_error_message(exc), file=sys.stderr)
        return 2

    window.show()
    if settings.start_fullscreen:
        controller.toggle_fullscreen()
    exit_code = app.exec()
    _CLIENT_LOGGER.info("Practice session exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
