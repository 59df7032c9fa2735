"""Note persistence."""

import sqlite3
from datetime import datetime

from shared_types import NoteCategory

from .database import BaseStore, like_pattern, new_id
from .models import Note, coerce_enum, dumps, from_db_time, loads, to_db_time


def _row_to_note(row: sqlite3.Row) -> Note:
    return Note(
        id=row["id"],
        user_id=row["user_id"],
        body=row["body"],
        title=row["title"],
        category=coerce_enum(NoteCategory, row["category"], NoteCategory.GENERAL),
        is_pinned=bool(row["is_pinned"]),
        tags=loads(row["tags"], []),
        created_at=from_db_time(row["created_at"]),
        updated_at=from_db_time(row["updated_at"]),
    )


class NoteStore(BaseStore):
    def search(self, user_id: str, term: str, limit: int = 3) -> list[Note]:
        """Substring match over title and body, most recently updated first."""
        pattern = like_pattern(term)
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM notes
                WHERE user_id = ? AND (
                    COALESCE(title, '') LIKE ? ESCAPE '\\' OR body LIKE ? ESCAPE '\\'
                )
                ORDER BY updated_at DESC
                LIMIT ?
                """,
                (user_id, pattern, pattern, limit),
            ).fetchall()
        return [_row_to_note(r) for r in rows]

    def find_pinned(self, user_id: str, limit: int = 5) -> list[Note]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM notes
                WHERE user_id = ? AND is_pinned = 1
                ORDER BY updated_at DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
        return [_row_to_note(r) for r in rows]

    def create(
        self,
        user_id: str,
        body: str,
        title: str | None = None,
        category: NoteCategory | str = NoteCategory.GENERAL,
        is_pinned: bool = False,
        tags: list[str] | None = None,
        updated_at: datetime | None = None,
    ) -> Note:
        now = datetime.now()
        note = Note(
            id=new_id(),
            user_id=user_id,
            body=body,
            title=title or None,
            category=coerce_enum(NoteCategory, category, NoteCategory.GENERAL),
            is_pinned=is_pinned,
            tags=tags or [],
            created_at=now,
            updated_at=updated_at or now,
        )
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO notes
                   (id, user_id, title, body, category, is_pinned, tags, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    note.id,
                    user_id,
                    note.title,
                    note.body,
                    note.category.value,
                    int(note.is_pinned),
                    dumps(note.tags),
                    to_db_time(note.created_at),
                    to_db_time(note.updated_at),
                ),
            )
        return note
