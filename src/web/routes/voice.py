"""Voice assistant WebSocket: maps protocol frames to dialogue engine calls."""

import asyncio
import base64
import binascii

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from voice.engine import DialogueEngine
from voice.events import ActionCompleted, EngineError, EngineEvent, Heard, Speaking
from web.auth import WS_POLICY_VIOLATION, AuthError, authenticate_websocket
from web.deps import build_engine, get_registry
from web.models import (
    ActionResultMessage,
    AssistantTranscript,
    AudioMessage,
    AudioOut,
    ErrorMessage,
    InitMessage,
    ReadyMessage,
    SessionCount,
    SetVoiceMessage,
    StartListeningMessage,
    StopListeningMessage,
    TextMessage,
    UserTranscript,
    parse_client_message,
)
from web.sessions import SessionRegistry, VoiceSession

logger = structlog.get_logger()

router = APIRouter(tags=["voice"])

INVALID_FORMAT = "Invalid message format"
UNSUPPORTED_VOICE = "Unsupported voice"
INVALID_AUDIO = "Invalid audio data"

# Turns outlive a disconnect; results are dropped by the closed engine
_inflight: set[asyncio.Task] = set()


@router.get("/api/voice/sessions", response_model=SessionCount)
async def active_sessions(registry: SessionRegistry = Depends(get_registry)):
    return SessionCount(active_sessions=len(registry))


def event_to_messages(event: EngineEvent) -> list[BaseModel]:
    """Translate one engine event into outbound protocol messages."""
    if isinstance(event, Speaking):
        messages: list[BaseModel] = []
        if event.audio:
            messages.append(AudioOut(audio=base64.b64encode(event.audio).decode("ascii")))
        if event.text:
            messages.append(AssistantTranscript(text=event.text))
        return messages
    if isinstance(event, Heard):
        return [UserTranscript(text=event.text)]
    if isinstance(event, ActionCompleted):
        return [ActionResultMessage(success=True, action=event.action, data=event.data)]
    if isinstance(event, EngineError):
        return [ErrorMessage(message=event.message or "An error occurred")]
    return []


def _spawn(coro) -> asyncio.Task:
    task = asyncio.create_task(coro)
    _inflight.add(task)
    task.add_done_callback(_turn_done)
    return task


def _turn_done(task: asyncio.Task):
    _inflight.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error("ws.turn_crashed", error=str(task.exception()))


async def _sender(websocket: WebSocket, outbox: asyncio.Queue):
    """Single writer: drains the outbox to the socket in order."""
    while True:
        message = await outbox.get()
        try:
            await websocket.send_json(message.model_dump())
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("ws.send_failed", error=str(e))
            return


def handle_frame(raw: str, engine: DialogueEngine, outbox: asyncio.Queue):
    """Dispatch one inbound frame. Slow work is spawned so the socket keeps reading."""
    try:
        message = parse_client_message(raw)
    except ValidationError as e:
        logger.warning("ws.invalid_message", errors=e.error_count())
        outbox.put_nowait(ErrorMessage(message=INVALID_FORMAT))
        return

    if isinstance(message, InitMessage):
        if message.voice and not _apply_voice(engine, message.voice, outbox):
            logger.info("ws.init_voice_rejected", voice=message.voice)
        _spawn(engine.greet())

    elif isinstance(message, SetVoiceMessage):
        _apply_voice(engine, message.voice, outbox)

    elif isinstance(message, StartListeningMessage):
        engine.start_listening()

    elif isinstance(message, StopListeningMessage):
        engine.stop_listening()
        _spawn(engine.flush_audio())

    elif isinstance(message, AudioMessage):
        if not engine.is_listening or not message.audio:
            return
        try:
            chunk = base64.b64decode(message.audio, validate=True)
        except (binascii.Error, ValueError):
            outbox.put_nowait(ErrorMessage(message=INVALID_AUDIO))
            return
        engine.process_audio(chunk)

    elif isinstance(message, TextMessage):
        if not message.text.strip():
            return
        outbox.put_nowait(UserTranscript(text=message.text))
        _spawn(engine.process_text(message.text))


def _apply_voice(engine: DialogueEngine, voice: str, outbox: asyncio.Queue) -> bool:
    try:
        engine.set_voice(voice)
    except ValueError:
        outbox.put_nowait(ErrorMessage(message=UNSUPPORTED_VOICE))
        return False
    return True


@router.websocket("/ws/voice")
async def voice_socket(websocket: WebSocket):
    state = websocket.app.state
    try:
        user = authenticate_websocket(websocket, state.config.auth)
    except AuthError as e:
        logger.warning("ws.auth_failed", error=str(e))
        await websocket.close(code=WS_POLICY_VIOLATION)
        return

    await websocket.accept()
    try:
        await asyncio.to_thread(state.store.users.get_or_create, user.id, user.name, user.email)
        engine = build_engine(state, user)
    except Exception as e:
        logger.error("ws.session_setup_failed", user_id=user.id, error=str(e))
        await websocket.send_json(ErrorMessage(message="Failed to initialize voice session").model_dump())
        await websocket.close()
        return

    session = state.registry.register(VoiceSession(user_id=user.id, engine=engine))
    structlog.contextvars.bind_contextvars(session_id=session.id, user_id=user.id)
    logger.info("ws.connected")

    outbox: asyncio.Queue = asyncio.Queue()

    def forward(event: EngineEvent):
        for message in event_to_messages(event):
            outbox.put_nowait(message)

    engine.subscribe(forward)
    sender = asyncio.create_task(_sender(websocket, outbox))
    outbox.put_nowait(ReadyMessage())

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw = frame.get("text") or frame.get("bytes") or ""
            handle_frame(raw, engine, outbox)
    except WebSocketDisconnect:
        logger.info("ws.disconnected")
    finally:
        state.registry.remove(session.id)
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
        structlog.contextvars.clear_contextvars()
