"""Pydantic schemas for the voice WebSocket protocol and HTTP responses."""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

# --- Inbound (client -> server) ---


class InitMessage(BaseModel):
    type: Literal["init"]
    voice: Optional[str] = None


class AudioMessage(BaseModel):
    type: Literal["audio"]
    audio: str  # base64


class TextMessage(BaseModel):
    type: Literal["text"]
    text: str = Field(..., max_length=4000)


class StartListeningMessage(BaseModel):
    type: Literal["start_listening"]


class StopListeningMessage(BaseModel):
    type: Literal["stop_listening"]


class SetVoiceMessage(BaseModel):
    type: Literal["set_voice"]
    voice: str


ClientMessage = Annotated[
    Union[
        InitMessage,
        AudioMessage,
        TextMessage,
        StartListeningMessage,
        StopListeningMessage,
        SetVoiceMessage,
    ],
    Field(discriminator="type"),
]

client_message_adapter = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes):
    """Validate one inbound frame. Raises pydantic.ValidationError."""
    return client_message_adapter.validate_json(raw)


# --- Outbound (server -> client) ---


class ReadyMessage(BaseModel):
    type: Literal["ready"] = "ready"


class AudioOut(BaseModel):
    type: Literal["audio"] = "audio"
    audio: str  # base64


class AssistantTranscript(BaseModel):
    type: Literal["assistant_transcript"] = "assistant_transcript"
    text: str


class UserTranscript(BaseModel):
    type: Literal["user_transcript"] = "user_transcript"
    text: str


class ActionResultMessage(BaseModel):
    type: Literal["action_result"] = "action_result"
    success: bool = True
    action: str
    data: Any = None


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    message: str


# --- HTTP ---


class HealthResponse(BaseModel):
    status: str
    service: str
    timestamp: str


class SessionCount(BaseModel):
    active_sessions: int
