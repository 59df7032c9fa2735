"""Demo data for a single user: appointments, medications with a week of logs, contacts, notes."""

from datetime import date, datetime, time, timedelta

import structlog

from shared_types import LogSource, MedicationLogStatus

from . import DataStore

logger = structlog.get_logger()

EVERY_DAY = list(range(7))

CONTACTS = [
    {
        "name": "Dr. Michael Smith",
        "phone": "+15551112222",
        "email": "dr.smith@medcenter.com",
        "relationship": "DOCTOR",
        "preferred_method": "PHONE",
        "notes": "Primary care physician",
    },
    {
        "name": "Sarah Johnson",
        "phone": "+15559876543",
        "email": "sarah@example.com",
        "relationship": "FAMILY",
        "preferred_method": "SMS",
        "notes": "Daughter - primary caregiver",
        "is_emergency_contact": True,
    },
    {
        "name": "Mike the Plumber",
        "phone": "+15553334444",
        "relationship": "SERVICE",
        "notes": "Reliable, fair prices",
    },
    {
        "name": "CVS Pharmacy",
        "phone": "+15555556666",
        "relationship": "PHARMACY",
        "notes": "Main Street location",
    },
    {
        "name": "Tommy Johnson",
        "phone": "+15557778888",
        "email": "tommy@example.com",
        "relationship": "FAMILY",
        "preferred_method": "SMS",
        "notes": "Grandson - birthday March 15",
    },
    {
        "name": "Mary Wilson",
        "phone": "+15551239999",
        "relationship": "FRIEND",
        "notes": "Bridge club friend",
    },
]

MEDICATIONS = [
    {
        "name": "Lisinopril",
        "form": "PILL",
        "dosage": "10 mg",
        "instructions": "Take with water in the morning",
        "prescribed_by": "Dr. Smith",
        "pharmacy": "CVS Pharmacy",
        "schedule": {"times": ["08:00"], "daysOfWeek": EVERY_DAY},
        "pills_remaining": 22,
    },
    {
        "name": "Metformin",
        "form": "PILL",
        "dosage": "500 mg",
        "instructions": "Take with food, twice daily",
        "prescribed_by": "Dr. Smith",
        "pharmacy": "CVS Pharmacy",
        "schedule": {"times": ["08:00", "20:00"], "daysOfWeek": EVERY_DAY},
        "pills_remaining": 45,
    },
    {
        "name": "Vitamin D3",
        "form": "CAPSULE",
        "dosage": "2000 IU",
        "instructions": "Take with breakfast",
        "schedule": {"times": ["08:00"], "daysOfWeek": EVERY_DAY},
        "pills_remaining": 60,
    },
    {
        "name": "Aspirin",
        "form": "PILL",
        "dosage": "81 mg",
        "instructions": "Take with food",
        "prescribed_by": "Dr. Smith",
        "schedule": {"times": ["08:00"], "daysOfWeek": EVERY_DAY},
        "pills_remaining": 90,
    },
]

NOTES = [
    {"title": "Garage Code", "body": "The garage door code is 4182", "category": "HOME", "is_pinned": True},
    {
        "title": "Insurance Info",
        "body": "Medicare ID: 1EG4-TE5-MK72\nSupplemental: Blue Cross #BC123456789",
        "category": "HEALTH",
        "is_pinned": True,
    },
    {
        "title": "Allergies",
        "body": "Penicillin - causes rash\nShellfish - severe reaction",
        "category": "EMERGENCY",
        "is_pinned": True,
    },
    {"title": "WiFi Password", "body": "Network: Johnson_Home\nPassword: Summer2024!", "category": "HOME"},
    {
        "title": "Birthday Ideas for Tommy",
        "body": "Video games\nBasketball\nGift card to GameStop",
        "category": "FAMILY",
    },
    {
        "body": "Remember to ask Dr. Smith about the new blood pressure medication",
        "category": "HEALTH",
    },
]


def _at(day: date, offset_days: int, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day + timedelta(days=offset_days), time(hour, minute))


def _appointments(today: date) -> list[dict]:
    next_month = (today.replace(day=1) + timedelta(days=32)).replace(day=1)
    return [
        {
            "title": "Dr. Smith Checkup",
            "description": "Annual physical examination",
            "category": "DOCTOR",
            "location": "123 Medical Center Dr, Suite 200",
            "start_at": _at(today, 3, 10),
            "end_at": _at(today, 3, 11),
            "notes": "Bring insurance card and list of medications",
            "reminders": [
                {"type": "push", "minutesBefore": 1440},
                {"type": "sms", "minutesBefore": 120},
            ],
        },
        {
            "title": "Car Inspection",
            "description": "Annual vehicle inspection",
            "category": "VEHICLE",
            "location": "Auto Care Center, 456 Main St",
            "start_at": _at(today, 7, 9),
            "end_at": _at(today, 7, 10),
            "reminders": [{"type": "push", "minutesBefore": 1440}],
        },
        {
            "title": "Haircut",
            "description": "Regular haircut appointment",
            "category": "PERSONAL",
            "location": "Joe's Barbershop",
            "start_at": _at(today, 5, 14),
            "end_at": _at(today, 5, 14, 30),
            "reminders": [{"type": "push", "minutesBefore": 180}],
        },
        {
            "title": "Bridge Club",
            "description": "Weekly bridge game with friends",
            "category": "SOCIAL",
            "location": "Community Center",
            "start_at": _at(today, 2, 13),
            "end_at": _at(today, 2, 16),
            "recurrence": {"rule": "WEEKLY", "interval": 1, "dayOfWeek": 3},
            "reminders": [{"type": "push", "minutesBefore": 120}],
        },
        {
            "title": "Pay Electric Bill",
            "description": "Monthly electric bill due",
            "category": "FINANCIAL",
            "start_at": datetime.combine(next_month, time(9, 0)),
            "all_day": True,
            "recurrence": {"rule": "MONTHLY", "dayOfMonth": 1},
            "reminders": [{"type": "push", "minutesBefore": 1440}],
        },
    ]


def seed_demo(
    store: DataStore,
    user_id: str,
    name: str | None = None,
    today: date | None = None,
) -> dict[str, int]:
    """Insert the demo data set for user_id. Returns per-entity counts."""
    today = today or date.today()
    store.users.get_or_create(user_id, name=name)

    for appt in _appointments(today):
        store.appointments.create(user_id, **appt)

    logs = 0
    for fields in MEDICATIONS:
        med = store.medications.create(user_id, **fields)
        # A week of history: morning doses taken, today's still pending
        for days_ago in range(7):
            scheduled = _at(today, -days_ago, 8)
            status = MedicationLogStatus.PENDING if days_ago == 0 else MedicationLogStatus.TAKEN
            store.medications.create_log(
                user_id,
                med.id,
                status,
                scheduled_at=scheduled,
                taken_at=scheduled + timedelta(minutes=15),
                source=LogSource.USER,
            )
            logs += 1

    for contact in CONTACTS:
        store.contacts.create(user_id, **contact)

    for note in NOTES:
        store.notes.create(user_id, **note)

    counts = {
        "appointments": len(_appointments(today)),
        "medications": len(MEDICATIONS),
        "medication_logs": logs,
        "contacts": len(CONTACTS),
        "notes": len(NOTES),
    }
    logger.info("store.demo_seeded", user_id=user_id, **counts)
    return counts
