"""Contact persistence."""

import sqlite3
from datetime import datetime

from shared_types import ContactMethod, ContactRelationship

from .database import BaseStore, like_pattern, new_id
from .models import Contact, coerce_enum, to_db_time


def _row_to_contact(row: sqlite3.Row) -> Contact:
    return Contact(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        phone=row["phone"],
        email=row["email"],
        relationship=coerce_enum(
            ContactRelationship, row["relationship"], ContactRelationship.OTHER
        ),
        preferred_method=coerce_enum(
            ContactMethod, row["preferred_method"], ContactMethod.PHONE
        ),
        notes=row["notes"],
        is_emergency_contact=bool(row["is_emergency_contact"]),
    )


class ContactStore(BaseStore):
    def search(self, user_id: str, term: str, limit: int = 5) -> list[Contact]:
        """Case-insensitive substring match over name, relationship and notes.

        The relationship column stores upper-case enum values, so the term is
        upper-cased for that comparison.
        """
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM contacts
                WHERE user_id = ? AND (
                    name LIKE ? ESCAPE '\\'
                    OR relationship LIKE ? ESCAPE '\\'
                    OR COALESCE(notes, '') LIKE ? ESCAPE '\\'
                )
                ORDER BY is_emergency_contact DESC, name ASC
                LIMIT ?
                """,
                (
                    user_id,
                    like_pattern(term),
                    like_pattern(term.upper()),
                    like_pattern(term),
                    limit,
                ),
            ).fetchall()
        return [_row_to_contact(r) for r in rows]

    def create(
        self,
        user_id: str,
        name: str,
        phone: str | None = None,
        email: str | None = None,
        relationship: ContactRelationship | str = ContactRelationship.OTHER,
        preferred_method: ContactMethod | str = ContactMethod.PHONE,
        notes: str | None = None,
        is_emergency_contact: bool = False,
    ) -> Contact:
        contact = Contact(
            id=new_id(),
            user_id=user_id,
            name=name,
            phone=phone or None,
            email=email or None,
            relationship=coerce_enum(ContactRelationship, relationship, ContactRelationship.OTHER),
            preferred_method=coerce_enum(ContactMethod, preferred_method, ContactMethod.PHONE),
            notes=notes,
            is_emergency_contact=is_emergency_contact,
        )
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO contacts
                   (id, user_id, name, phone, email, relationship, preferred_method, notes,
                    is_emergency_contact, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    contact.id,
                    user_id,
                    contact.name,
                    contact.phone,
                    contact.email,
                    contact.relationship.value,
                    contact.preferred_method.value,
                    contact.notes,
                    int(contact.is_emergency_contact),
                    to_db_time(datetime.now()),
                ),
            )
        return contact
