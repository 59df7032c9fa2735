"""SQLite schema and base store plumbing."""

import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import structlog

logger = structlog.get_logger()

BUSY_TIMEOUT_MS = 5000


class StoreError(Exception):
    """Base data-store error."""


class NotFoundError(StoreError):
    """Row does not exist."""


class AuthorizationError(StoreError):
    """Row belongs to a different user than the caller."""


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT,
    email TEXT,
    timezone TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS appointments (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL DEFAULT 'OTHER',
    location TEXT,
    start_at TIMESTAMP NOT NULL,
    end_at TIMESTAMP,
    all_day INTEGER NOT NULL DEFAULT 0,
    notes TEXT,
    reminders TEXT,
    recurrence TEXT,
    status TEXT NOT NULL DEFAULT 'SCHEDULED',
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_appt_user_start ON appointments(user_id, start_at);

CREATE TABLE IF NOT EXISTS medications (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    form TEXT NOT NULL DEFAULT 'PILL',
    dosage TEXT,
    instructions TEXT,
    prescribed_by TEXT,
    pharmacy TEXT,
    schedule TEXT,
    pills_remaining INTEGER,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_med_user_active ON medications(user_id, is_active);

CREATE TABLE IF NOT EXISTS medication_logs (
    id TEXT PRIMARY KEY,
    medication_id TEXT NOT NULL REFERENCES medications(id) ON DELETE CASCADE,
    scheduled_at TIMESTAMP NOT NULL,
    status TEXT NOT NULL CHECK(status IN ('PENDING','TAKEN','MISSED')),
    taken_at TIMESTAMP,
    source TEXT NOT NULL DEFAULT 'USER'
);
CREATE INDEX IF NOT EXISTS idx_medlog_med_sched ON medication_logs(medication_id, scheduled_at);

CREATE TABLE IF NOT EXISTS contacts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    phone TEXT,
    email TEXT,
    relationship TEXT NOT NULL DEFAULT 'OTHER',
    preferred_method TEXT NOT NULL DEFAULT 'PHONE',
    notes TEXT,
    is_emergency_contact INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_contact_user ON contacts(user_id);

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    title TEXT,
    body TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT 'GENERAL',
    is_pinned INTEGER NOT NULL DEFAULT 0,
    tags TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_note_user_updated ON notes(user_id, updated_at DESC);
"""


def wal_connect(db_path: str | Path) -> sqlite3.Connection:
    """Open a connection with WAL journaling, foreign keys and Row access."""
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str | Path) -> None:
    """Create tables if they don't exist."""
    path = Path(db_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = wal_connect(path)
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()
    logger.debug("store.initialized", db_path=str(path))


def new_id() -> str:
    return uuid.uuid4().hex


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with %, _ and the escape char escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BaseStore:
    """Shared connection handling for per-entity stores."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = wal_connect(self.db_path)
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _check_owner(self, conn: sqlite3.Connection, table: str, row_id: str, user_id: str) -> None:
        row = conn.execute(f"SELECT user_id FROM {table} WHERE id = ?", (row_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"{table} row {row_id} not found")
        if row["user_id"] != user_id:
            logger.warning("store.ownership_mismatch", table=table, row_id=row_id, user_id=user_id)
            raise AuthorizationError(f"{table} row {row_id} is not owned by {user_id}")
