"""Pydantic configuration models for Boomer AI."""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shared_types import Voice

VALID_LLM_PROVIDERS = {"auto", "claude", "openai", "gemini"}
VALID_VOICES = {v.value for v in Voice}


def _expand_env(value: Optional[str]) -> Optional[str]:
    """Expand a ${VAR} placeholder; other values pass through."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.getenv(value[2:-1], "")
    return value


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "auto"
    model: Optional[str] = None  # None = provider's cheap default
    api_key: Optional[str] = None
    timeout_seconds: float = Field(default=20.0, gt=0)
    classifier_max_tokens: int = 200
    extraction_max_tokens: int = 150
    fallback_max_tokens: int = 100

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v not in VALID_LLM_PROVIDERS:
            raise ValueError(f"Invalid LLM provider: {v}. Must be one of {VALID_LLM_PROVIDERS}")
        return v


class SpeechConfig(BaseModel):
    """Transcription and synthesis configuration."""

    api_key: Optional[str] = None
    transcription_model: str = "whisper-1"
    tts_model: str = "tts-1"
    language: str = "en"
    transcription_prompt: str = (
        "Boomer AI voice assistant for calendar, medications, contacts, and notes."
    )
    audio_filename: str = "audio.webm"
    default_voice: str = Voice.ALLOY.value
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("default_voice")
    @classmethod
    def validate_voice(cls, v: str) -> str:
        if v not in VALID_VOICES:
            raise ValueError(f"Invalid voice: {v}. Must be one of {sorted(VALID_VOICES)}")
        return v


class VoiceConfig(BaseModel):
    """Dialogue engine behaviour."""

    min_audio_bytes: int = Field(default=12000, ge=0)  # ~0.5 seconds
    assistant_name: str = "Boomer AI"
    default_display_name: str = "Friend"
    busy_policy: Literal["reject", "queue"] = "reject"
    store_timeout_seconds: float = Field(default=10.0, gt=0)


class PathsConfig(BaseModel):
    """File paths configuration."""

    db_path: Path = Path("~/boomer/boomer.db")
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def expand_paths(self):
        """Expand ~ in all paths."""
        self.db_path = self.db_path.expanduser()
        if self.log_file:
            self.log_file = self.log_file.expanduser()
        return self


class RetryConfig(BaseModel):
    """Retry/backoff for rate-limited upstream calls."""

    max_attempts: int = Field(default=2, ge=1)
    min_wait: float = 0.5
    max_wait: float = 4.0


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    json_mode: bool = Field(default=False, alias="json")

    model_config = {"populate_by_name": True}

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
        return v_upper


class AuthConfig(BaseModel):
    """WebSocket token validation."""

    jwt_secret_env: str = "BOOMER_JWT_SECRET"
    algorithm: str = "HS256"

    def secret(self) -> Optional[str]:
        return os.getenv(self.jwt_secret_env)


class BoomerConfig(BaseModel):
    """Main configuration model."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    voice: VoiceConfig = Field(default_factory=VoiceConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @model_validator(mode="after")
    def expand_env_vars(self):
        """Expand ${VAR} patterns in API keys."""
        self.llm.api_key = _expand_env(self.llm.api_key)
        self.speech.api_key = _expand_env(self.speech.api_key)
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "BoomerConfig":
        return cls.model_validate(data)

    def to_dict(self) -> dict:
        return self.model_dump(mode="python")
