"""Speech-to-text and text-to-speech collaborators."""

import os

from .base import (
    VALID_VOICES,
    SpeechError,
    SpeechRateLimitError,
    SpeechSynthesizer,
    SynthesisError,
    Transcriber,
    TranscriptionError,
    TranscriptionResult,
)
from .openai_speech import OpenAITTSSynthesizer, WhisperTranscriber


def resolve_speech_api_key(api_key: str | None = None) -> str | None:
    """Explicit key first, then OPENAI_API_KEY."""
    return api_key or os.getenv("OPENAI_API_KEY")


__all__ = [
    "VALID_VOICES",
    "SpeechError",
    "SpeechRateLimitError",
    "SpeechSynthesizer",
    "SynthesisError",
    "Transcriber",
    "TranscriptionError",
    "TranscriptionResult",
    "WhisperTranscriber",
    "OpenAITTSSynthesizer",
    "resolve_speech_api_key",
]
