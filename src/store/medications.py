"""Medication and medication-log persistence."""

import sqlite3
from datetime import datetime

from shared_types import LogSource, MedicationForm, MedicationLogStatus

from .database import BaseStore, new_id
from .models import (
    Medication,
    MedicationLog,
    coerce_enum,
    dumps,
    from_db_time,
    loads,
    to_db_time,
)


def _row_to_medication(row: sqlite3.Row) -> Medication:
    return Medication(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        form=coerce_enum(MedicationForm, row["form"], MedicationForm.OTHER),
        dosage=row["dosage"],
        instructions=row["instructions"],
        prescribed_by=row["prescribed_by"],
        pharmacy=row["pharmacy"],
        schedule=loads(row["schedule"], {}),
        pills_remaining=row["pills_remaining"],
        is_active=bool(row["is_active"]),
    )


def _row_to_log(row: sqlite3.Row) -> MedicationLog:
    return MedicationLog(
        id=row["id"],
        medication_id=row["medication_id"],
        scheduled_at=from_db_time(row["scheduled_at"]),
        status=MedicationLogStatus(row["status"]),
        taken_at=from_db_time(row["taken_at"]),
        source=coerce_enum(LogSource, row["source"], LogSource.SYSTEM),
    )


class MedicationStore(BaseStore):
    def find_active(self, user_id: str) -> list[Medication]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM medications WHERE user_id = ? AND is_active = 1 ORDER BY name ASC",
                (user_id,),
            ).fetchall()
        return [_row_to_medication(r) for r in rows]

    def find_active_with_logs(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[Medication]:
        """Active medications, each carrying its logs scheduled in [start, end)."""
        medications = self.find_active(user_id)
        if not medications:
            return []
        by_id = {m.id: m for m in medications}
        placeholders = ",".join("?" for _ in by_id)
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM medication_logs
                WHERE medication_id IN ({placeholders})
                  AND scheduled_at >= ? AND scheduled_at < ?
                ORDER BY scheduled_at ASC
                """,
                (*by_id.keys(), to_db_time(start), to_db_time(end)),
            ).fetchall()
        for row in rows:
            log = _row_to_log(row)
            by_id[log.medication_id].logs.append(log)
        return medications

    def create(
        self,
        user_id: str,
        name: str,
        dosage: str | None = None,
        form: MedicationForm | str = MedicationForm.PILL,
        instructions: str | None = None,
        prescribed_by: str | None = None,
        pharmacy: str | None = None,
        schedule: dict | None = None,
        pills_remaining: int | None = None,
    ) -> Medication:
        medication = Medication(
            id=new_id(),
            user_id=user_id,
            name=name,
            form=coerce_enum(MedicationForm, form, MedicationForm.OTHER),
            dosage=dosage or None,
            instructions=instructions or None,
            prescribed_by=prescribed_by,
            pharmacy=pharmacy,
            schedule=schedule or {},
            pills_remaining=pills_remaining,
        )
        with self._conn() as conn:
            conn.execute(
                """INSERT INTO medications
                   (id, user_id, name, form, dosage, instructions, prescribed_by, pharmacy,
                    schedule, pills_remaining, is_active, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?)""",
                (
                    medication.id,
                    user_id,
                    medication.name,
                    medication.form.value,
                    medication.dosage,
                    medication.instructions,
                    medication.prescribed_by,
                    medication.pharmacy,
                    dumps(medication.schedule),
                    medication.pills_remaining,
                    to_db_time(datetime.now()),
                ),
            )
        return medication

    def create_log(
        self,
        user_id: str,
        medication_id: str,
        status: MedicationLogStatus,
        scheduled_at: datetime,
        taken_at: datetime | None = None,
        source: LogSource = LogSource.USER,
    ) -> MedicationLog:
        """Insert a log row for a medication owned by user_id.

        PENDING logs never carry a taken_at.
        """
        return self.create_logs(
            user_id, [medication_id], status, scheduled_at, taken_at=taken_at, source=source
        )[0]

    def create_logs(
        self,
        user_id: str,
        medication_ids: list[str],
        status: MedicationLogStatus,
        scheduled_at: datetime,
        taken_at: datetime | None = None,
        source: LogSource = LogSource.USER,
    ) -> list[MedicationLog]:
        """Insert one log per medication in a single transaction; all or nothing."""
        if status != MedicationLogStatus.TAKEN:
            taken_at = None
        logs = [
            MedicationLog(
                id=new_id(),
                medication_id=medication_id,
                scheduled_at=scheduled_at,
                status=status,
                taken_at=taken_at,
                source=source,
            )
            for medication_id in medication_ids
        ]
        with self._conn() as conn:
            for log in logs:
                self._check_owner(conn, "medications", log.medication_id, user_id)
                conn.execute(
                    """INSERT INTO medication_logs
                       (id, medication_id, scheduled_at, status, taken_at, source)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        log.id,
                        log.medication_id,
                        to_db_time(scheduled_at),
                        status.value,
                        to_db_time(taken_at),
                        source.value,
                    ),
                )
        return logs
