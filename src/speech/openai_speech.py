"""OpenAI Whisper transcription and TTS synthesis."""

import structlog

from llm.base import DEFAULT_TIMEOUT

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

logger = structlog.get_logger()


def _build_client(api_key: str | None, timeout: float):
    try:
        from openai import OpenAI
    except ImportError:
        raise SpeechError("openai package not installed. Run: pip install openai")
    return OpenAI(api_key=api_key, timeout=timeout, max_retries=0)


def _raise_mapped(e: Exception, error_cls: type[SpeechError], what: str):
    from openai import RateLimitError

    if isinstance(e, RateLimitError):
        raise SpeechRateLimitError(f"{what} rate limit: {e}") from e
    raise error_cls(f"{what} failed: {e}") from e


class WhisperTranscriber(Transcriber):
    """Transcribes buffered client audio with the OpenAI transcription endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "whisper-1",
        filename: str = "audio.webm",
        client=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model = model
        self.filename = filename
        self.client = client or _build_client(api_key, timeout)

    def transcribe(
        self, audio: bytes, language: str | None = None, prompt: str | None = None
    ) -> TranscriptionResult:
        kwargs = {"model": self.model, "file": (self.filename, audio)}
        if language:
            kwargs["language"] = language
        if prompt:
            kwargs["prompt"] = prompt
        try:
            response = self.client.audio.transcriptions.create(**kwargs)
        except Exception as e:
            _raise_mapped(e, TranscriptionError, "Transcription")
        text = getattr(response, "text", "") or ""
        logger.debug("speech.transcribed", bytes=len(audio), chars=len(text))
        return TranscriptionResult(text=text, language=language)


class OpenAITTSSynthesizer(SpeechSynthesizer):
    """Synthesizes assistant replies with the OpenAI speech endpoint (mp3)."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "tts-1",
        response_format: str = "mp3",
        client=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model = model
        self.response_format = response_format
        self.client = client or _build_client(api_key, timeout)

    def synthesize(self, text: str, voice: str) -> bytes:
        if voice not in VALID_VOICES:
            raise SynthesisError(f"Unsupported voice: {voice}")
        try:
            response = self.client.audio.speech.create(
                model=self.model,
                voice=voice,
                input=text,
                response_format=self.response_format,
            )
            return response.content
        except Exception as e:
            _raise_mapped(e, SynthesisError, "Synthesis")
