"""Registry of live voice sessions keyed by connection id."""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from voice.engine import DialogueEngine

logger = structlog.get_logger()


@dataclass
class VoiceSession:
    user_id: str
    engine: DialogueEngine
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    connected_at: datetime = field(default_factory=datetime.now)

    def close(self):
        self.engine.close()


class SessionRegistry:
    """Thread-safe map of connection id -> VoiceSession."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: dict[str, VoiceSession] = {}

    def register(self, session: VoiceSession) -> VoiceSession:
        with self._lock:
            self._sessions[session.id] = session
        logger.debug("sessions.registered", session_id=session.id, user_id=session.user_id)
        return session

    def get(self, session_id: str) -> VoiceSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> VoiceSession | None:
        """Drop and close the session. Unknown ids are ignored."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            session.close()
            logger.debug("sessions.removed", session_id=session_id)
        return session

    def close_all(self):
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions
