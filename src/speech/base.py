"""Speech collaborators: transcription (audio -> text) and synthesis (text -> audio)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from shared_types import Voice


class SpeechError(Exception):
    """Base speech-service error."""


class SpeechRateLimitError(SpeechError):
    """Rate limit hit on a speech endpoint."""


class TranscriptionError(SpeechError):
    """Audio could not be transcribed."""


class SynthesisError(SpeechError):
    """Text could not be synthesized."""


VALID_VOICES = {v.value for v in Voice}


@dataclass
class TranscriptionResult:
    text: str
    language: str | None = None


class Transcriber(ABC):
    """Converts raw audio bytes to text."""

    @abstractmethod
    def transcribe(
        self, audio: bytes, language: str | None = None, prompt: str | None = None
    ) -> TranscriptionResult: ...


class SpeechSynthesizer(ABC):
    """Converts text to audio bytes for a voice identity."""

    @abstractmethod
    def synthesize(self, text: str, voice: str) -> bytes: ...
