from .bindings import BindingConfig, KeyBindings, load_bindings
from .dispatch import KeyDispatcher, build_dispatcher
from .events import HandlerResult, KeyEvent
from .handlers import AngleModeHandler, GridToolHandler, LineNudgeHandler, LineToggleReleaseHandler, PlaybackHandler

__all__ = [
    "BindingConfig",
    "KeyBindings",
    "load_bindings",
    "KeyDispatcher",
    "build_dispatcher",
    "HandlerResult",
    "KeyEvent",
    "AngleModeHandler",
    "GridToolHandler",
    "LineNudgeHandler",
    "LineToggleReleaseHandler",
    "PlaybackHandler",
]
