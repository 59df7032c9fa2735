"""User rows: every other entity hangs off one."""

from datetime import datetime

import structlog

from .database import BaseStore
from .models import User, from_db_time, to_db_time

logger = structlog.get_logger()


class UserStore(BaseStore):
    def get(self, user_id: str) -> User | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if not row:
            return None
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            timezone=row["timezone"],
            created_at=from_db_time(row["created_at"]),
        )

    def get_or_create(
        self, user_id: str, name: str | None = None, email: str | None = None
    ) -> User:
        """Upsert: create on first sight, refresh name/email when provided."""
        now = to_db_time(datetime.now())
        with self._conn() as conn:
            existing = conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
            if existing:
                if name or email:
                    conn.execute(
                        "UPDATE users SET name = COALESCE(?, name), email = COALESCE(?, email) WHERE id = ?",
                        (name, email, user_id),
                    )
            else:
                conn.execute(
                    "INSERT INTO users (id, name, email, created_at) VALUES (?, ?, ?, ?)",
                    (user_id, name, email, now),
                )
                logger.info("store.user_created", user_id=user_id)
        return self.get(user_id)
