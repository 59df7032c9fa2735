"""Tests for the live session registry."""

import threading
from unittest.mock import MagicMock

from voice.engine import DialogueEngine
from web.sessions import SessionRegistry, VoiceSession


def _session(user_id="user-123"):
    return VoiceSession(user_id=user_id, engine=MagicMock(spec=DialogueEngine))


def test_register_get_remove():
    registry = SessionRegistry()
    session = registry.register(_session())

    assert session.id in registry
    assert registry.get(session.id) is session
    assert len(registry) == 1

    assert registry.remove(session.id) is session
    session.engine.close.assert_called_once()
    assert registry.get(session.id) is None
    assert len(registry) == 0


def test_remove_unknown_is_noop():
    registry = SessionRegistry()
    session = registry.register(_session())
    registry.remove(session.id)

    assert registry.remove(session.id) is None
    session.engine.close.assert_called_once()


def test_ids_are_unique():
    assert _session().id != _session().id


def test_close_all():
    registry = SessionRegistry()
    sessions = [registry.register(_session(f"user-{i}")) for i in range(3)]

    registry.close_all()

    assert len(registry) == 0
    for session in sessions:
        session.engine.close.assert_called_once()


def test_concurrent_register_and_remove():
    registry = SessionRegistry()

    def churn():
        for _ in range(200):
            session = registry.register(_session())
            registry.get(session.id)
            registry.remove(session.id)

    threads = [threading.Thread(target=churn) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry) == 0
