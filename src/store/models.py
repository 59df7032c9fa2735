"""Value types for persisted Boomer AI entities."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from shared_types import (
    AppointmentCategory,
    AppointmentStatus,
    ContactMethod,
    ContactRelationship,
    LogSource,
    MedicationForm,
    MedicationLogStatus,
    NoteCategory,
)


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict:
        """JSON-safe dict (datetimes as ISO strings, enums as values)."""
        return _jsonable(asdict(self))


@dataclass
class User(_Serializable):
    id: str
    name: str | None = None
    email: str | None = None
    timezone: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class Appointment(_Serializable):
    id: str
    user_id: str
    title: str
    start_at: datetime
    end_at: datetime | None = None
    description: str | None = None
    category: AppointmentCategory = AppointmentCategory.OTHER
    location: str | None = None
    all_day: bool = False
    notes: str | None = None
    reminders: list[dict] = field(default_factory=list)
    recurrence: dict | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class MedicationLog(_Serializable):
    id: str
    medication_id: str
    scheduled_at: datetime
    status: MedicationLogStatus = MedicationLogStatus.PENDING
    taken_at: datetime | None = None
    source: LogSource = LogSource.USER


@dataclass
class Medication(_Serializable):
    id: str
    user_id: str
    name: str
    form: MedicationForm = MedicationForm.PILL
    dosage: str | None = None
    instructions: str | None = None
    prescribed_by: str | None = None
    pharmacy: str | None = None
    schedule: dict = field(default_factory=dict)  # {"times": ["08:00"], "daysOfWeek": [0..6]}
    pills_remaining: int | None = None
    is_active: bool = True
    logs: list[MedicationLog] = field(default_factory=list)

    def taken_today(self) -> bool:
        return any(log.status == MedicationLogStatus.TAKEN for log in self.logs)


@dataclass
class Contact(_Serializable):
    id: str
    user_id: str
    name: str
    phone: str | None = None
    email: str | None = None
    relationship: ContactRelationship = ContactRelationship.OTHER
    preferred_method: ContactMethod = ContactMethod.PHONE
    notes: str | None = None
    is_emergency_contact: bool = False


@dataclass
class Note(_Serializable):
    id: str
    user_id: str
    body: str
    title: str | None = None
    category: NoteCategory = NoteCategory.GENERAL
    is_pinned: bool = False
    tags: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


def dumps(value: Any) -> str | None:
    """Serialize a list/dict column."""
    if value is None:
        return None
    return json.dumps(value)


def loads(raw: str | None, default: Any = None) -> Any:
    """Deserialize a list/dict column, tolerating bad rows."""
    if not raw:
        return default
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return default


def to_db_time(value: datetime | None) -> str | None:
    return value.isoformat(timespec="seconds") if value else None


def from_db_time(raw: str | None) -> datetime | None:
    return datetime.fromisoformat(raw) if raw else None


def coerce_enum(enum_cls: type[Enum], raw: str | None, default: Enum) -> Enum:
    """Map a stored or model-supplied string onto an enum, falling back to default."""
    if not raw:
        return default
    try:
        return enum_cls(str(raw).strip().upper())
    except ValueError:
        return default
