"""WebSocket protocol tests for /ws/voice."""

import base64
import os
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from cli.config_models import BoomerConfig
from web.app import create_app


def _connect(client, token):
    return client.websocket_connect(f"/ws/voice?token={token}")


def _receive_until(ws, message_type):
    """Collect messages up to and including the first of message_type."""
    received = []
    while True:
        message = ws.receive_json()
        received.append(message)
        if message["type"] == message_type:
            return received


class TestHttp:
    def test_healthz(self, client):
        res = client.get("/healthz")
        assert res.status_code == 200
        body = res.json()
        assert body["status"] == "ok"
        assert body["service"] == "boomer-ai"
        assert body["timestamp"]

    def test_session_count(self, client, auth_token):
        assert client.get("/api/voice/sessions").json() == {"active_sessions": 0}
        with _connect(client, auth_token) as ws:
            assert ws.receive_json() == {"type": "ready"}
            assert client.get("/api/voice/sessions").json() == {"active_sessions": 1}
        assert client.get("/api/voice/sessions").json() == {"active_sessions": 0}


class TestAuth:
    def test_missing_token_closes_with_policy_violation(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/ws/voice"):
                pass
        assert exc.value.code == 1008

    def test_bad_signature_rejected(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with _connect(client, "not.a.jwt"):
                pass
        assert exc.value.code == 1008

    def test_bearer_header_accepted(self, client, auth_token):
        with client.websocket_connect(
            "/ws/voice", headers={"Authorization": f"Bearer {auth_token}"}
        ) as ws:
            assert ws.receive_json() == {"type": "ready"}

    def test_new_user_is_created_on_connect(self, client, store, auth_token_b):
        with _connect(client, auth_token_b) as ws:
            ws.receive_json()
        user = store.users.get("user-456")
        assert user.name == "UserB"

    def test_missing_secret_fails_startup(self, store, make_provider):
        from voice.factory import Collaborators

        app = create_app(
            config=BoomerConfig(),
            store=store,
            collaborators=Collaborators(provider=make_provider()),
        )
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(RuntimeError, match="BOOMER_JWT_SECRET"):
                with TestClient(app):
                    pass


class TestProtocol:
    def test_text_turn(self, client, auth_token):
        with _connect(client, auth_token) as ws:
            assert ws.receive_json() == {"type": "ready"}
            ws.send_json({"type": "text", "text": "What's on my schedule today?"})

            messages = _receive_until(ws, "action_result")

        assert messages[0] == {"type": "user_transcript", "text": "What's on my schedule today?"}
        assert messages[1] == {"type": "audio", "audio": base64.b64encode(b"mp3").decode()}
        assert messages[2] == {
            "type": "assistant_transcript",
            "text": "You don't have any appointments today.",
        }
        assert messages[3]["success"] is True
        assert messages[3]["action"] == "schedule_query"
        assert messages[3]["data"] == {"appointments": []}

    def test_init_greets_with_voice(self, client, auth_token, synthesizer):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_json({"type": "init", "voice": "nova"})

            messages = _receive_until(ws, "assistant_transcript")

        assert messages[-1]["text"].endswith(
            ", Test! I'm your Boomer AI assistant. How can I help you today?"
        )
        assert synthesizer.synthesize.call_args.args[1] == "nova"

    def test_unsupported_voice(self, client, auth_token):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_json({"type": "set_voice", "voice": "robot"})
            assert ws.receive_json() == {"type": "error", "message": "Unsupported voice"}

    @pytest.mark.parametrize(
        "frame",
        ["not json", '{"type": "dance"}', '{"type": "text"}', '{"type": "set_voice"}'],
    )
    def test_invalid_message_format(self, client, auth_token, frame):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_text(frame)
            assert ws.receive_json() == {"type": "error", "message": "Invalid message format"}

    def test_session_survives_invalid_frame(self, client, auth_token):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_text("garbage")
            ws.receive_json()
            ws.send_json({"type": "text", "text": "hello"})
            assert ws.receive_json()["type"] == "user_transcript"

    def test_audio_turn(self, client, auth_token, transcriber):
        chunk = base64.b64encode(b"\x00" * 16000).decode()
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_json({"type": "start_listening"})
            ws.send_json({"type": "audio", "audio": chunk})
            ws.send_json({"type": "stop_listening"})

            messages = _receive_until(ws, "assistant_transcript")

        assert messages[0] == {"type": "user_transcript", "text": "Read my pinned notes"}
        transcriber.transcribe.assert_called_once()
        assert transcriber.transcribe.call_args.args[0] == b"\x00" * 16000

    def test_invalid_audio(self, client, auth_token):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_json({"type": "start_listening"})
            ws.send_json({"type": "audio", "audio": "***not base64***"})
            assert ws.receive_json() == {"type": "error", "message": "Invalid audio data"}

    def test_audio_ignored_when_not_listening(self, client, auth_token, transcriber):
        chunk = base64.b64encode(b"\x00" * 16000).decode()
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            ws.send_json({"type": "audio", "audio": chunk})
            ws.send_json({"type": "stop_listening"})
            ws.send_json({"type": "text", "text": "hello"})
            assert ws.receive_json()["type"] == "user_transcript"
        transcriber.transcribe.assert_not_called()


class TestCleanup:
    def test_disconnect_removes_and_closes_session(self, app, client, auth_token):
        with _connect(client, auth_token) as ws:
            ws.receive_json()
            [session] = list(app.state.registry._sessions.values())

        assert len(app.state.registry) == 0
        assert session.engine.closed

    def test_sessions_are_independent(self, app, client, auth_token, auth_token_b):
        with _connect(client, auth_token) as ws_a, _connect(client, auth_token_b) as ws_b:
            ws_a.receive_json()
            ws_b.receive_json()
            assert len(app.state.registry) == 2
            users = {s.user_id for s in app.state.registry._sessions.values()}
            assert users == {"user-123", "user-456"}
        assert len(app.state.registry) == 0
