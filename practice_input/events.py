from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class HandlerResult(Enum):
    CLAIMED = "claimed"
    NOT_CLAIMED = "not_claimed"

    def __bool__(self) -> bool:
        return self is HandlerResult.CLAIMED


@dataclass(frozen=True)
class KeyEvent:
    """Host-neutral key event. ``key`` uses DOM names: ``"a"``, ``" "``, ``"ArrowLeft"``, ``"Escape"``."""

    key: str
    alt: bool = False
    ctrl: bool = False
    meta: bool = False
    shift: bool = False

    @property
    def normalized_key(self) -> str:
        return self.key.lower() if len(self.key) == 1 else self.key

    @property
    def has_command_modifier(self) -> bool:
        return self.ctrl or self.meta
