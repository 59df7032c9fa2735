"""Per-session dialogue engine: audio buffering, turns, greeting and speech."""

import asyncio
from datetime import datetime
from enum import StrEnum
from typing import Callable

import structlog

from observability import metrics
from shared_types import Voice
from speech.base import VALID_VOICES, SpeechSynthesizer, Transcriber

from .actions import ActionExecutor
from .completion import run_blocking
from .events import ActionCompleted, EngineError, EngineEvent, EventCallback, Heard, Speaking
from .formatting import time_of_day_greeting
from .intents import IntentClassifier
from .prompts import Replies

logger = structlog.get_logger()


class EngineState(StrEnum):
    IDLE = "idle"
    LISTENING = "listening"
    FLUSHING = "flushing"


class DialogueEngine:
    """Orchestrates transcription, classification, actions and synthesis for one session.

    Turns are serialised by a lock. With busy_policy "reject" a turn that
    arrives while another is running is answered with an error event and
    dropped; with "queue" it waits. A second flush while one is running is
    always a silent no-op.
    """

    def __init__(
        self,
        classifier: IntentClassifier,
        executor: ActionExecutor,
        transcriber: Transcriber | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        voice: str = Voice.ALLOY.value,
        display_name: str = "Friend",
        assistant_name: str = "Boomer AI",
        min_audio_bytes: int = 12000,
        busy_policy: str = "reject",
        language: str | None = "en",
        transcription_prompt: str | None = None,
        speech_timeout: float = 30.0,
        retrying: Callable | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.classifier = classifier
        self.executor = executor
        self.transcriber = transcriber
        self.synthesizer = synthesizer
        self.voice = voice
        self.display_name = display_name
        self.assistant_name = assistant_name
        self.min_audio_bytes = min_audio_bytes
        self.busy_policy = busy_policy
        self.language = language
        self.transcription_prompt = transcription_prompt
        self.speech_timeout = speech_timeout
        self.retrying = retrying
        self.clock = clock

        self.state = EngineState.IDLE
        self._callbacks: list[EventCallback] = []
        self._buffer: list[bytes] = []
        self._flushing = False
        self._turn_lock = asyncio.Lock()
        self._closed = False

    # -- events --

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        self._callbacks.append(callback)

        def unsubscribe():
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def _emit(self, event: EngineEvent):
        if self._closed:
            return
        for callback in list(self._callbacks):
            try:
                callback(event)
            except Exception as e:
                logger.error("voice.callback_failed", error=str(e), event=type(event).__name__)

    # -- session settings --

    def set_voice(self, voice: str):
        if voice not in VALID_VOICES:
            raise ValueError(f"Unsupported voice: {voice}")
        self.voice = voice

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def busy(self) -> bool:
        return self._turn_lock.locked()

    @property
    def is_listening(self) -> bool:
        return self.state == EngineState.LISTENING

    @property
    def buffered_bytes(self) -> int:
        return sum(len(chunk) for chunk in self._buffer)

    # -- audio --

    def start_listening(self):
        """Accept chunks again, even while the previous utterance is still flushing."""
        if not self._closed:
            self.state = EngineState.LISTENING

    def process_audio(self, chunk: bytes):
        """Append a chunk to the buffer. Never transcribes."""
        if not self._closed and chunk:
            self._buffer.append(chunk)

    def stop_listening(self):
        """Stop accepting chunks; the caller follows up with flush_audio()."""
        if self.state == EngineState.LISTENING:
            self.state = EngineState.IDLE

    async def flush_audio(self):
        """Transcribe and process buffered audio, unless empty, too short or already flushing."""
        if not self._buffer or self._flushing or self._closed:
            return

        self._flushing = True
        self.state = EngineState.FLUSHING
        audio = b"".join(self._buffer)
        self._buffer = []

        try:
            if len(audio) < self.min_audio_bytes:
                logger.debug("voice.audio_too_short", size=len(audio))
                return
            text = await self._transcribe(audio)
        except Exception as e:
            logger.error("voice.transcription_failed", error=str(e), error_type=type(e).__name__)
            metrics.counter("voice.transcription_failed")
            self._emit(EngineError(Replies.TROUBLE_HEARING))
            return
        finally:
            self._flushing = False
            # start_listening may have arrived mid-flush
            if self.state == EngineState.FLUSHING:
                self.state = EngineState.IDLE

        if text:
            logger.info("voice.user_said", text=text)
            self._emit(Heard(text))
            await self.process_text(text)

    async def _transcribe(self, audio: bytes) -> str:
        if self.transcriber is None:
            raise RuntimeError("no transcriber configured")
        with metrics.timer("voice.transcribe"):
            result = await run_blocking(
                self.transcriber.transcribe,
                audio,
                language=self.language,
                prompt=self.transcription_prompt,
                timeout=self.speech_timeout,
                retrying=self.retrying,
            )
        return (result.text or "").strip()

    # -- turns --

    async def process_text(self, utterance: str):
        """Run one turn: classify, dispatch, speak. Never raises."""
        text = (utterance or "").strip()
        if not text or self._closed:
            return

        if self.busy_policy == "reject" and self._turn_lock.locked():
            metrics.counter("voice.turn_rejected")
            logger.info("voice.turn_rejected", text=text)
            self._emit(EngineError(Replies.BUSY))
            return

        async with self._turn_lock:
            await self._run_turn(text)

    async def _run_turn(self, text: str):
        metrics.counter("voice.turns")
        try:
            parsed = await self.classifier.classify(text)
            result = await self.executor.execute(parsed, text)
        except Exception as e:
            logger.error("voice.turn_failed", error=str(e), error_type=type(e).__name__)
            await self.speak(Replies.TROUBLE_UNDERSTANDING)
            return

        await self.speak(result.reply)
        if result.action:
            self._emit(ActionCompleted(action=result.action, data=result.data))

    async def greet(self):
        salutation = time_of_day_greeting(self.clock().hour)
        await self.speak(
            f"{salutation}, {self.display_name}! I'm your {self.assistant_name} assistant. "
            "How can I help you today?"
        )

    async def speak(self, text: str):
        """Synthesize and emit; on synthesis failure the text is emitted alone."""
        audio = None
        if self.synthesizer is not None and not self._closed:
            try:
                with metrics.timer("voice.synthesize"):
                    audio = await run_blocking(
                        self.synthesizer.synthesize,
                        text,
                        self.voice,
                        timeout=self.speech_timeout,
                        retrying=self.retrying,
                    )
            except Exception as e:
                logger.error("voice.synthesis_failed", error=str(e), error_type=type(e).__name__)
                metrics.counter("voice.synthesis_failed")
        self._emit(Speaking(text=text, audio=audio))

    def close(self):
        """Release buffer and subscribers. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._callbacks.clear()
        self._buffer.clear()
        self.state = EngineState.IDLE
        logger.debug("voice.engine_closed")
