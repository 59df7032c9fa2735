"""Tests for the OpenAI speech adapters."""

from unittest.mock import MagicMock

import pytest
from openai import RateLimitError

from speech import (
    OpenAITTSSynthesizer,
    SpeechRateLimitError,
    SynthesisError,
    TranscriptionError,
    WhisperTranscriber,
    resolve_speech_api_key,
)


def _rate_limit():
    return RateLimitError(message="slow down", response=MagicMock(status_code=429), body={})


class TestWhisperTranscriber:
    def test_transcribe(self):
        client = MagicMock()
        client.audio.transcriptions.create.return_value = MagicMock(text="Call my daughter")

        result = WhisperTranscriber(client=client).transcribe(
            b"webm-bytes", language="en", prompt="Boomer AI"
        )

        assert result.text == "Call my daughter"
        assert result.language == "en"
        client.audio.transcriptions.create.assert_called_once_with(
            model="whisper-1",
            file=("audio.webm", b"webm-bytes"),
            language="en",
            prompt="Boomer AI",
        )

    def test_optional_hints_omitted(self):
        client = MagicMock()
        client.audio.transcriptions.create.return_value = MagicMock(text="")

        result = WhisperTranscriber(client=client, filename="clip.wav").transcribe(b"x")

        kwargs = client.audio.transcriptions.create.call_args.kwargs
        assert kwargs["file"] == ("clip.wav", b"x")
        assert "language" not in kwargs
        assert "prompt" not in kwargs
        assert result.text == ""

    def test_errors_mapped(self):
        client = MagicMock()
        client.audio.transcriptions.create.side_effect = RuntimeError("bad audio")
        with pytest.raises(TranscriptionError):
            WhisperTranscriber(client=client).transcribe(b"x")

    def test_rate_limit_mapped(self):
        client = MagicMock()
        client.audio.transcriptions.create.side_effect = _rate_limit()
        with pytest.raises(SpeechRateLimitError):
            WhisperTranscriber(client=client).transcribe(b"x")


class TestOpenAITTSSynthesizer:
    def test_synthesize(self):
        client = MagicMock()
        client.audio.speech.create.return_value = MagicMock(content=b"mp3")

        audio = OpenAITTSSynthesizer(client=client).synthesize("Hello", "shimmer")

        assert audio == b"mp3"
        client.audio.speech.create.assert_called_once_with(
            model="tts-1", voice="shimmer", input="Hello", response_format="mp3"
        )

    def test_unknown_voice_rejected_before_request(self):
        client = MagicMock()
        with pytest.raises(SynthesisError, match="Unsupported voice"):
            OpenAITTSSynthesizer(client=client).synthesize("Hello", "robot")
        client.audio.speech.create.assert_not_called()

    def test_rate_limit_mapped(self):
        client = MagicMock()
        client.audio.speech.create.side_effect = _rate_limit()
        with pytest.raises(SpeechRateLimitError):
            OpenAITTSSynthesizer(client=client).synthesize("Hello", "alloy")


def test_resolve_speech_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert resolve_speech_api_key("sk-explicit") == "sk-explicit"
    assert resolve_speech_api_key() == "sk-env"
    monkeypatch.delenv("OPENAI_API_KEY")
    assert resolve_speech_api_key() is None
