"""Error taxonomy shared by the session generator, playback and storage layers."""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from practice_engine.models import SessionStage


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    POOL_EMPTY = "POOL_EMPTY"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
    IMAGE_LOAD_FAILED = "IMAGE_LOAD_FAILED"
    SETTINGS_LOAD_FAILED = "SETTINGS_LOAD_FAILED"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class PracticeError(Exception):
    """Base class for errors surfaced to the user through the notifier."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = context

    @property
    def full_message(self) -> str:
        if self.context:
            return f"{self.context}: {self.message}"
        return self.message


class ValidationError(PracticeError):
    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(ErrorCode.VALIDATION_FAILED, message, context="Validation")
        self.field = field


class PoolEmptyError(PracticeError):
    """A stage's tag filter resolved to an empty image pool."""

    def __init__(self, stage_index: int, stage: Optional["SessionStage"] = None) -> None:
        label = f"Stage {stage_index + 1}"
        description = getattr(stage, "description", None)
        if description:
            label = f"{label} ({description})"
        super().__init__(
            ErrorCode.POOL_EMPTY,
            f"{label} has no images matching its tag filter",
            context="Session",
        )
        self.stage_index = stage_index
        self.stage = stage


class ImageLoadError(PracticeError):
    def __init__(self, image_id: str, message: str = "Failed to load image") -> None:
        super().__init__(ErrorCode.IMAGE_LOAD_FAILED, message, context="Image")
        self.image_id = image_id


def format_error_message(error: object) -> str:
    """Return a user-facing string for any error raised during a session."""
    if isinstance(error, PracticeError):
        return error.full_message
    if isinstance(error, BaseException):
        return str(error) or UNEXPECTED_ERROR_MESSAGE
    if isinstance(error, str):
        return error
    return UNEXPECTED_ERROR_MESSAGE
