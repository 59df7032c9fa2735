"""Assemble dialogue engines and their upstream collaborators from config."""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import structlog

from cli.config_models import BoomerConfig
from cli.retry import retry_from_config
from llm import LLMProvider, create_cheap_provider
from speech import (
    OpenAITTSSynthesizer,
    SpeechSynthesizer,
    Transcriber,
    WhisperTranscriber,
    resolve_speech_api_key,
)
from store import DataStore

from .actions import ActionExecutor
from .completion import CompletionClient
from .engine import DialogueEngine
from .intents import IntentClassifier

logger = structlog.get_logger()


@dataclass
class Collaborators:
    """Process-wide upstream clients shared by every session."""

    provider: LLMProvider
    transcriber: Transcriber | None = None
    synthesizer: SpeechSynthesizer | None = None


def create_collaborators(config: BoomerConfig, with_speech: bool = True) -> Collaborators:
    """Build the LLM provider and, optionally, OpenAI speech clients.

    Raises LLMError when no LLM key resolves and RuntimeError when speech is
    requested without a key.
    """
    provider = create_cheap_provider(
        provider=config.llm.provider,
        api_key=config.llm.api_key,
        model=config.llm.model,
        timeout=config.llm.timeout_seconds,
    )
    if not with_speech:
        return Collaborators(provider=provider)

    speech_key = resolve_speech_api_key(config.speech.api_key)
    if not speech_key:
        raise RuntimeError("No speech API key found. Set speech.api_key or OPENAI_API_KEY")
    transcriber = WhisperTranscriber(
        api_key=speech_key,
        model=config.speech.transcription_model,
        filename=config.speech.audio_filename,
        timeout=config.speech.timeout_seconds,
    )
    synthesizer = OpenAITTSSynthesizer(
        api_key=speech_key,
        model=config.speech.tts_model,
        timeout=config.speech.timeout_seconds,
    )
    logger.info("voice.collaborators_ready", llm=type(provider).__name__)
    return Collaborators(provider=provider, transcriber=transcriber, synthesizer=synthesizer)


def create_dialogue_engine(
    config: BoomerConfig,
    store: DataStore,
    collaborators: Collaborators,
    user_id: str,
    display_name: str | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> DialogueEngine:
    """One engine per session, bound to the authenticated user."""
    retrying = retry_from_config(config.retry)
    completion = CompletionClient(
        collaborators.provider,
        timeout=config.llm.timeout_seconds,
        retrying=retrying,
    )
    classifier = IntentClassifier(completion, max_tokens=config.llm.classifier_max_tokens)
    executor = ActionExecutor(
        store,
        completion,
        user_id=user_id,
        assistant_name=config.voice.assistant_name,
        extraction_max_tokens=config.llm.extraction_max_tokens,
        fallback_max_tokens=config.llm.fallback_max_tokens,
        store_timeout=config.voice.store_timeout_seconds,
        clock=clock,
    )
    return DialogueEngine(
        classifier,
        executor,
        transcriber=collaborators.transcriber,
        synthesizer=collaborators.synthesizer,
        voice=config.speech.default_voice,
        display_name=display_name or config.voice.default_display_name,
        assistant_name=config.voice.assistant_name,
        min_audio_bytes=config.voice.min_audio_bytes,
        busy_policy=config.voice.busy_policy,
        language=config.speech.language,
        transcription_prompt=config.speech.transcription_prompt,
        speech_timeout=config.speech.timeout_seconds,
        retrying=retrying,
        clock=clock,
    )
