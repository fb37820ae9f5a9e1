from .errors import ImageLoadError, PoolEmptyError, PracticeError, ValidationError, format_error_message
from .generator import generate, generate_classroom_session, generate_quick_session
from .models import ImageRef, PlaybackPhase, SessionPreset, SessionStage, Tag, TimerEntry
from .playback import PlaybackStateMachine
from .timers import TickTimers

__all__ = [
    "ImageLoadError",
    "PoolEmptyError",
    "PracticeError",
    "ValidationError",
    "format_error_message",
    "generate",
    "generate_classroom_session",
    "generate_quick_session",
    "ImageRef",
    "PlaybackPhase",
    "SessionPreset",
    "SessionStage",
    "Tag",
    "TimerEntry",
    "PlaybackStateMachine",
    "TickTimers",
]
