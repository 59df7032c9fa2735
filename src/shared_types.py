"""Shared enums and types for boomer-ai."""

from enum import StrEnum


class Intent(StrEnum):
    SCHEDULE_QUERY = "schedule_query"
    SCHEDULE_ADD = "schedule_add"
    SCHEDULE_CANCEL = "schedule_cancel"
    MEDICATION_QUERY = "medication_query"
    MEDICATION_TAKEN = "medication_taken"
    MEDICATION_ADD = "medication_add"
    CONTACT_QUERY = "contact_query"
    CONTACT_CALL = "contact_call"
    CONTACT_ADD = "contact_add"
    NOTE_QUERY = "note_query"
    NOTE_ADD = "note_add"
    NOTE_READ_PINNED = "note_read_pinned"
    GREETING = "greeting"
    HELP = "help"
    UNKNOWN = "unknown"


class AppointmentCategory(StrEnum):
    MEDICAL = "MEDICAL"
    DOCTOR = "DOCTOR"
    PERSONAL = "PERSONAL"
    SOCIAL = "SOCIAL"
    HOME = "HOME"
    FINANCIAL = "FINANCIAL"
    VEHICLE = "VEHICLE"
    OTHER = "OTHER"


class AppointmentStatus(StrEnum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"


class MedicationForm(StrEnum):
    PILL = "PILL"
    CAPSULE = "CAPSULE"
    LIQUID = "LIQUID"
    INJECTION = "INJECTION"
    INHALER = "INHALER"
    PATCH = "PATCH"
    DROPS = "DROPS"
    OTHER = "OTHER"


class MedicationLogStatus(StrEnum):
    PENDING = "PENDING"
    TAKEN = "TAKEN"
    MISSED = "MISSED"


class LogSource(StrEnum):
    USER = "USER"
    SYSTEM = "SYSTEM"


class ContactRelationship(StrEnum):
    FAMILY = "FAMILY"
    FRIEND = "FRIEND"
    DOCTOR = "DOCTOR"
    PHARMACY = "PHARMACY"
    CAREGIVER = "CAREGIVER"
    NEIGHBOR = "NEIGHBOR"
    SERVICE = "SERVICE"
    OTHER = "OTHER"


class ContactMethod(StrEnum):
    PHONE = "PHONE"
    SMS = "SMS"
    EMAIL = "EMAIL"


class NoteCategory(StrEnum):
    GENERAL = "GENERAL"
    HEALTH = "HEALTH"
    HOME = "HOME"
    FAMILY = "FAMILY"
    FINANCE = "FINANCE"
    EMERGENCY = "EMERGENCY"
    PERSONAL = "PERSONAL"


class Voice(StrEnum):
    ALLOY = "alloy"
    ECHO = "echo"
    FABLE = "fable"
    ONYX = "onyx"
    NOVA = "nova"
    SHIMMER = "shimmer"
