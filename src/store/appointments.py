"""Appointment persistence."""

import sqlite3
from datetime import datetime, timedelta

from shared_types import AppointmentCategory, AppointmentStatus

from .database import BaseStore, NotFoundError, like_pattern, new_id
from .models import (
    Appointment,
    coerce_enum,
    dumps,
    from_db_time,
    loads,
    to_db_time,
)

DEFAULT_DURATION = timedelta(hours=1)


def _row_to_appointment(row: sqlite3.Row) -> Appointment:
    return Appointment(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        start_at=from_db_time(row["start_at"]),
        end_at=from_db_time(row["end_at"]),
        description=row["description"],
        category=coerce_enum(AppointmentCategory, row["category"], AppointmentCategory.OTHER),
        location=row["location"],
        all_day=bool(row["all_day"]),
        notes=row["notes"],
        reminders=loads(row["reminders"], []),
        recurrence=loads(row["recurrence"]),
        status=coerce_enum(AppointmentStatus, row["status"], AppointmentStatus.SCHEDULED),
        created_at=from_db_time(row["created_at"]),
        updated_at=from_db_time(row["updated_at"]),
    )


class AppointmentStore(BaseStore):
    def find_in_range(self, user_id: str, start: datetime, end: datetime) -> list[Appointment]:
        """Scheduled appointments with start in [start, end), earliest first."""
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM appointments
                WHERE user_id = ? AND status = ? AND start_at >= ? AND start_at < ?
                ORDER BY start_at ASC
                """,
                (user_id, AppointmentStatus.SCHEDULED.value, to_db_time(start), to_db_time(end)),
            ).fetchall()
        return [_row_to_appointment(r) for r in rows]

    def find_upcoming_by_title(
        self, user_id: str, term: str, now: datetime | None = None, limit: int = 5
    ) -> list[Appointment]:
        """Scheduled appointments from now on whose title contains term (case-insensitive)."""
        now = now or datetime.now()
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM appointments
                WHERE user_id = ? AND status = ? AND start_at >= ?
                  AND title LIKE ? ESCAPE '\\'
                ORDER BY start_at ASC
                LIMIT ?
                """,
                (
                    user_id,
                    AppointmentStatus.SCHEDULED.value,
                    to_db_time(now),
                    like_pattern(term),
                    limit,
                ),
            ).fetchall()
        return [_row_to_appointment(r) for r in rows]

    def get(self, user_id: str, appointment_id: str) -> Appointment:
        with self._conn() as conn:
            self._check_owner(conn, "appointments", appointment_id, user_id)
            row = conn.execute(
                "SELECT * FROM appointments WHERE id = ?", (appointment_id,)
            ).fetchone()
        return _row_to_appointment(row)

    def create(
        self,
        user_id: str,
        title: str,
        start_at: datetime,
        end_at: datetime | None = None,
        location: str | None = None,
        category: AppointmentCategory | str = AppointmentCategory.OTHER,
        description: str | None = None,
        all_day: bool = False,
        notes: str | None = None,
        reminders: list[dict] | None = None,
        recurrence: dict | None = None,
    ) -> Appointment:
        """Insert an appointment. end_at defaults to start + 1 hour."""
        now = datetime.now()
        appointment = Appointment(
            id=new_id(),
            user_id=user_id,
            title=title,
            start_at=start_at,
            end_at=end_at or start_at + DEFAULT_DURATION,
            description=description,
            category=coerce_enum(AppointmentCategory, category, AppointmentCategory.OTHER),
            location=location or None,
            all_day=all_day,
            notes=notes,
            reminders=reminders or [],
            recurrence=recurrence,
            created_at=now,
            updated_at=now,
        )
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO appointments
                   (id, user_id, title, description, category, location, start_at, end_at,
                    all_day, notes, reminders, recurrence, status, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    appointment.id,
                    user_id,
                    appointment.title,
                    appointment.description,
                    appointment.category.value,
                    appointment.location,
                    to_db_time(appointment.start_at),
                    to_db_time(appointment.end_at),
                    int(appointment.all_day),
                    appointment.notes,
                    dumps(appointment.reminders),
                    dumps(appointment.recurrence),
                    appointment.status.value,
                    to_db_time(now),
                    to_db_time(now),
                ),
            )
        return appointment

    def set_status(
        self, user_id: str, appointment_id: str, status: AppointmentStatus
    ) -> Appointment:
        """Update status on a row owned by user_id. Rows are never deleted here."""
        with self._conn() as conn:
            self._check_owner(conn, "appointments", appointment_id, user_id)
            cur = conn.execute(
                "UPDATE appointments SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, to_db_time(datetime.now()), appointment_id),
            )
            if cur.rowcount == 0:
                raise NotFoundError(f"appointment {appointment_id} not found")
        return self.get(user_id, appointment_id)
