"""Events emitted by the dialogue engine to its subscribers."""

from dataclasses import dataclass
from typing import Any, Callable, Union


@dataclass(frozen=True)
class Speaking:
    """Assistant reply; audio is None when synthesis failed or is disabled."""

    text: str
    audio: bytes | None = None


@dataclass(frozen=True)
class Heard:
    """Transcribed user speech, before the turn runs."""

    text: str


@dataclass(frozen=True)
class ActionCompleted:
    action: str
    data: Any = None


@dataclass(frozen=True)
class EngineError:
    message: str


EngineEvent = Union[Speaking, Heard, ActionCompleted, EngineError]
EventCallback = Callable[[EngineEvent], None]
