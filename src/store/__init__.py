"""Data store: SQLite persistence for Boomer AI entities, scoped by owning user."""

from pathlib import Path

from .appointments import AppointmentStore
from .contacts import ContactStore
from .database import AuthorizationError, NotFoundError, StoreError, init_db
from .medications import MedicationStore
from .models import Appointment, Contact, Medication, MedicationLog, Note, User
from .notes import NoteStore
from .users import UserStore


class DataStore:
    """One handle over every entity store sharing a database file."""

    def __init__(self, db_path: str | Path, create: bool = True):
        self.db_path = Path(db_path).expanduser()
        if create:
            init_db(self.db_path)
        self.users = UserStore(self.db_path)
        self.appointments = AppointmentStore(self.db_path)
        self.medications = MedicationStore(self.db_path)
        self.contacts = ContactStore(self.db_path)
        self.notes = NoteStore(self.db_path)


__all__ = [
    "DataStore",
    "init_db",
    "StoreError",
    "NotFoundError",
    "AuthorizationError",
    "Appointment",
    "Contact",
    "Medication",
    "MedicationLog",
    "Note",
    "User",
]
