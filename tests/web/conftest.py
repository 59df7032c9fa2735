"""Shared fixtures for web and WebSocket tests."""

import os
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from cli.config_models import BoomerConfig
from speech.base import SpeechSynthesizer, Transcriber, TranscriptionResult
from voice.factory import Collaborators
from web.app import create_app


@pytest.fixture
def jwt_secret():
    return "test-boomer-secret"


def _make_auth_token(jwt_secret, user_id, email="u@test.com", name="U"):
    return jwt.encode(
        {"sub": user_id, "email": email, "name": name},
        jwt_secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_token(jwt_secret):
    return _make_auth_token(jwt_secret, "user-123", "test@example.com", "Test")


@pytest.fixture
def auth_token_b(jwt_secret):
    """Second user token for isolation tests."""
    return _make_auth_token(jwt_secret, "user-456", "b@test.com", "UserB")


@pytest.fixture
def synthesizer():
    mock = MagicMock(spec=SpeechSynthesizer)
    mock.synthesize.return_value = b"mp3"
    return mock


@pytest.fixture
def transcriber():
    mock = MagicMock(spec=Transcriber)
    mock.transcribe.return_value = TranscriptionResult(text="Read my pinned notes")
    return mock


@pytest.fixture
def llm_replies():
    """Classifier response for every turn; tests overwrite before connecting."""
    return {"classify": {"intent": "schedule_query", "entities": {"date": "today"}}}


@pytest.fixture
def app(jwt_secret, store, make_provider, llm_replies, transcriber, synthesizer):
    collaborators = Collaborators(
        provider=make_provider(**llm_replies),
        transcriber=transcriber,
        synthesizer=synthesizer,
    )
    with patch.dict(os.environ, {"BOOMER_JWT_SECRET": jwt_secret}):
        yield create_app(config=BoomerConfig(), store=store, collaborators=collaborators)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
