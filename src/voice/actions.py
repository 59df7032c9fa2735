"""Domain action executor: one handler per intent, each returning a spoken reply."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

import structlog

from observability import metrics
from shared_types import AppointmentStatus, Intent, LogSource, MedicationLogStatus
from store import DataStore

from .completion import CompletionClient, run_blocking
from .formatting import (
    day_bounds,
    format_date_long,
    format_phone,
    format_time,
    join_names,
    phone_digits,
    resolve_date_range,
)
from .intents import (
    ContactAddEntities,
    ContactLookupEntities,
    MedicationAddEntities,
    MedicationQueryEntities,
    MedicationTakenEntities,
    NoteQueryEntities,
    ParsedIntent,
    ScheduleAddEntities,
    ScheduleCancelEntities,
    ScheduleQueryEntities,
)
from .prompts import Prompts, Replies

logger = structlog.get_logger()

NOTE_TRIGGER = re.compile(r"^(take a note|note|write down|remember|save)\b", re.IGNORECASE)
NOTE_SEPARATOR = re.compile(r"^[:,.\-\s]+")
_TIME_OF_DAY = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

SCHEDULE_PREVIEW = 3
PINNED_LABEL_CHARS = 50
EXTRACTION_TEMPERATURE = 0.2
FALLBACK_TEMPERATURE = 0.7
EVERY_DAY = list(range(7))


@dataclass
class ActionResult:
    """Reply to speak, plus the action_completed payload when the handler succeeded."""

    reply: str
    action: str | None = None
    data: Any = None


def strip_note_trigger(utterance: str) -> str:
    """Drop a leading "take a note"-style phrase and separator from the utterance."""
    content = NOTE_TRIGGER.sub("", utterance.strip(), count=1)
    return NOTE_SEPARATOR.sub("", content).strip()


class ActionExecutor:
    """Executes a parsed intent against the data store for one user.

    Handlers never raise: data-store and extraction failures are logged and
    turned into a fixed apology for that intent.
    """

    def __init__(
        self,
        store: DataStore,
        completion: CompletionClient,
        user_id: str,
        assistant_name: str = "Boomer AI",
        extraction_max_tokens: int = 150,
        fallback_max_tokens: int = 100,
        store_timeout: float = 10.0,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if not user_id:
            raise ValueError("user_id is required")
        self.store = store
        self.completion = completion
        self.user_id = user_id
        self.assistant_name = assistant_name
        self.extraction_max_tokens = extraction_max_tokens
        self.fallback_max_tokens = fallback_max_tokens
        self.store_timeout = store_timeout
        self.clock = clock
        self._handlers = {
            Intent.GREETING: self._greeting,
            Intent.HELP: self._help,
            Intent.SCHEDULE_QUERY: self.schedule_query,
            Intent.SCHEDULE_ADD: self.schedule_add,
            Intent.SCHEDULE_CANCEL: self.schedule_cancel,
            Intent.MEDICATION_QUERY: self.medication_query,
            Intent.MEDICATION_TAKEN: self.medication_taken,
            Intent.MEDICATION_ADD: self.medication_add,
            Intent.CONTACT_QUERY: self.contact_query,
            Intent.CONTACT_CALL: self.contact_call,
            Intent.CONTACT_ADD: self.contact_add,
            Intent.NOTE_QUERY: self.note_query,
            Intent.NOTE_ADD: self.note_add,
            Intent.NOTE_READ_PINNED: self.note_read_pinned,
        }

    async def execute(self, parsed: ParsedIntent, utterance: str) -> ActionResult:
        handler = self._handlers.get(parsed.intent)
        if handler is None:
            return await self.fallback(utterance)
        try:
            return await handler(parsed.entities, utterance)
        except Exception as e:
            metrics.counter("actions.handler_failed")
            logger.error(
                "actions.handler_failed",
                handler=handler.__name__,
                intent=parsed.intent.value,
                user_id=self.user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ActionResult(Replies.TROUBLE.get(parsed.intent.value, Replies.TROUBLE_DEFAULT))

    async def _db(self, fn, *args, **kwargs):
        return await run_blocking(fn, *args, timeout=self.store_timeout, **kwargs)

    async def _extract(self, system: str, utterance: str) -> dict:
        details = await self.completion.complete_json(
            system,
            utterance,
            max_tokens=self.extraction_max_tokens,
            temperature=EXTRACTION_TEMPERATURE,
        )
        return details or {}

    # -- canned --

    async def _greeting(self, entities, utterance: str) -> ActionResult:
        return ActionResult(Replies.GREETING)

    async def _help(self, entities, utterance: str) -> ActionResult:
        return ActionResult(Replies.HELP)

    # -- schedule --

    async def schedule_query(self, entities: ScheduleQueryEntities, utterance: str) -> ActionResult:
        start, end, label = resolve_date_range(entities.date, self.clock().date())
        appointments = await self._db(
            self.store.appointments.find_in_range, self.user_id, start, end
        )

        if not appointments:
            reply = f"You don't have any appointments {label}."
        elif len(appointments) == 1:
            apt = appointments[0]
            where = f" at {apt.location}" if apt.location else ""
            reply = (
                f"You have one appointment {label}: "
                f"{apt.title} at {format_time(apt.start_at)}{where}."
            )
        else:
            parts = [f"You have {len(appointments)} appointments {label}."]
            for i, apt in enumerate(appointments[:SCHEDULE_PREVIEW], start=1):
                parts.append(f"{i}: {apt.title} at {format_time(apt.start_at)}.")
            if len(appointments) > SCHEDULE_PREVIEW:
                parts.append(f"And {len(appointments) - SCHEDULE_PREVIEW} more.")
            reply = " ".join(parts)

        return ActionResult(
            reply,
            action=Intent.SCHEDULE_QUERY.value,
            data={"appointments": [a.to_dict() for a in appointments]},
        )

    async def schedule_add(self, entities: ScheduleAddEntities, utterance: str) -> ActionResult:
        now = self.clock()
        details = await self._extract(
            Prompts.APPOINTMENT_EXTRACTION.format(today=now.strftime("%a %b %d %Y")),
            utterance,
        )
        title = str(details.get("title") or entities.title or "").strip()
        start_at = _combine_date_time(
            details.get("date") or entities.date, details.get("time") or entities.time
        )
        if not title or start_at is None:
            return ActionResult(
                "I need more details to add that appointment. "
                "Please tell me the title, date, and time."
            )

        appointment = await self._db(
            self.store.appointments.create,
            self.user_id,
            title=title,
            start_at=start_at,
            location=details.get("location") or None,
            category=details.get("category") or "OTHER",
        )
        logger.info("actions.appointment_added", appointment_id=appointment.id, user_id=self.user_id)
        return ActionResult(
            f"Done! I've added {title} on {format_date_long(start_at)} at {format_time(start_at)}.",
            action=Intent.SCHEDULE_ADD.value,
            data={"appointment": appointment.to_dict()},
        )

    async def schedule_cancel(self, entities: ScheduleCancelEntities, utterance: str) -> ActionResult:
        term = entities.search_term
        if not term:
            return ActionResult("Which appointment would you like me to cancel?")

        matches = await self._db(
            self.store.appointments.find_upcoming_by_title, self.user_id, term, self.clock()
        )
        if not matches:
            return ActionResult(f'I couldn\'t find an upcoming appointment matching "{term}".')

        appointment = await self._db(
            self.store.appointments.set_status,
            self.user_id,
            matches[0].id,
            AppointmentStatus.CANCELLED,
        )
        logger.info("actions.appointment_cancelled", appointment_id=appointment.id, user_id=self.user_id)
        return ActionResult(
            f"I've cancelled {appointment.title} on {format_date_long(appointment.start_at)}.",
            action=Intent.SCHEDULE_CANCEL.value,
            data={"appointment": appointment.to_dict()},
        )

    # -- medications --

    async def medication_query(self, entities: MedicationQueryEntities, utterance: str) -> ActionResult:
        start, end = day_bounds(self.clock().date())
        medications = await self._db(
            self.store.medications.find_active_with_logs, self.user_id, start, end
        )
        if not medications:
            return ActionResult("You don't have any medications tracked.")

        if "take" in (entities.query or "").lower():
            taken = [m.name for m in medications if m.taken_today()]
            pending = [m.name for m in medications if not m.taken_today()]
            if not pending:
                reply = "Great job! You've taken all your medications for today."
            elif not taken:
                reply = (
                    "You haven't taken any medications yet today. "
                    f"You still need to take: {join_names(pending)}."
                )
            else:
                reply = (
                    f"You've taken {join_names(taken)}. "
                    f"You still need to take: {join_names(pending)}."
                )
        else:
            listing = join_names(
                [f"{m.name} {m.dosage}" if m.dosage else m.name for m in medications]
            )
            reply = f"You're taking {len(medications)} medications: {listing}."

        return ActionResult(
            reply,
            action=Intent.MEDICATION_QUERY.value,
            data={"medications": [m.to_dict() for m in medications]},
        )

    async def medication_taken(self, entities: MedicationTakenEntities, utterance: str) -> ActionResult:
        medications = await self._db(self.store.medications.find_active, self.user_id)
        if not medications:
            return ActionResult("You don't have any medications to mark.")

        # Mark only the named medications when the user named any we track
        mentioned = (entities.medication or "").lower()
        selected = [m for m in medications if mentioned and m.name.lower() in mentioned]
        targets = selected or medications

        now = self.clock()
        await self._db(
            self.store.medications.create_logs,
            self.user_id,
            [med.id for med in targets],
            MedicationLogStatus.TAKEN,
            scheduled_at=now,
            taken_at=now,
            source=LogSource.USER,
        )

        if selected:
            reply = f"Done! I've marked {join_names([m.name for m in selected])} as taken."
        else:
            reply = "Done! I've marked your medications as taken."
        return ActionResult(
            reply,
            action=Intent.MEDICATION_TAKEN.value,
            data={"count": len(targets), "medications": [m.name for m in targets]},
        )

    async def medication_add(self, entities: MedicationAddEntities, utterance: str) -> ActionResult:
        details = await self._extract(Prompts.MEDICATION_EXTRACTION, utterance)
        name = str(details.get("name") or entities.medication or "").strip()
        if not name:
            return ActionResult("What's the name of the medication you'd like to add?")

        dosage = str(details.get("dosage") or entities.dosage or "").strip() or None
        times = _schedule_times(details.get("times"))
        medication = await self._db(
            self.store.medications.create,
            self.user_id,
            name=name,
            dosage=dosage,
            form=details.get("form") or "PILL",
            instructions=details.get("instructions") or None,
            schedule={"times": times, "daysOfWeek": EVERY_DAY} if times else {},
        )
        logger.info("actions.medication_added", medication_id=medication.id, user_id=self.user_id)
        label = f"{name} {dosage}" if dosage else name
        return ActionResult(
            f"I've added {label} to your medications.",
            action=Intent.MEDICATION_ADD.value,
            data={"medication": medication.to_dict()},
        )

    # -- contacts --

    async def _find_contact(self, entities: ContactLookupEntities):
        term = entities.search_term
        contacts = await self._db(self.store.contacts.search, self.user_id, term)
        return term, contacts

    async def contact_query(self, entities: ContactLookupEntities, utterance: str) -> ActionResult:
        term, contacts = await self._find_contact(entities)
        if not contacts:
            return ActionResult(_contact_not_found(term))

        contact = contacts[0]
        return ActionResult(
            _describe_contact(contact),
            action=Intent.CONTACT_QUERY.value,
            data={"contact": contact.to_dict()},
        )

    async def contact_call(self, entities: ContactLookupEntities, utterance: str) -> ActionResult:
        term, contacts = await self._find_contact(entities)
        if not contacts:
            return ActionResult(_contact_not_found(term))

        contact = contacts[0]
        dial = phone_digits(contact.phone) or None
        if contact.phone:
            reply = f"To call {contact.name}, dial {format_phone(contact.phone)}."
        else:
            reply = f"I don't have a phone number for {contact.name}."
            if contact.email:
                reply += f" Their email is {contact.email}."
        return ActionResult(
            reply,
            action=Intent.CONTACT_CALL.value,
            data={"contact": contact.to_dict(), "dial": dial},
        )

    async def contact_add(self, entities: ContactAddEntities, utterance: str) -> ActionResult:
        details = await self._extract(Prompts.CONTACT_EXTRACTION, utterance)
        name = str(details.get("name") or entities.name or "").strip()
        if not name:
            return ActionResult("What's the name of the contact you'd like to add?")

        phone = phone_digits(str(details.get("phone") or entities.phone or "")) or None
        contact = await self._db(
            self.store.contacts.create,
            self.user_id,
            name=name,
            phone=phone,
            email=details.get("email") or None,
            relationship=details.get("relationship") or entities.relationship or "OTHER",
        )
        logger.info("actions.contact_added", contact_id=contact.id, user_id=self.user_id)
        return ActionResult(
            f"I've added {name} to your contacts.",
            action=Intent.CONTACT_ADD.value,
            data={"contact": contact.to_dict()},
        )

    # -- notes --

    async def note_query(self, entities: NoteQueryEntities, utterance: str) -> ActionResult:
        term = entities.search_term
        notes = await self._db(self.store.notes.search, self.user_id, term)
        if not notes:
            return ActionResult(f'I couldn\'t find any notes about "{term}".')

        note = notes[0]
        if note.title:
            reply = f'I found a note called "{note.title}": {note.body}'
        else:
            reply = f"I found this note: {note.body}"
        return ActionResult(
            reply,
            action=Intent.NOTE_QUERY.value,
            data={"note": note.to_dict()},
        )

    async def note_add(self, entities, utterance: str) -> ActionResult:
        content = strip_note_trigger(utterance)
        if not content:
            return ActionResult("What would you like me to note down?")

        note = await self._db(self.store.notes.create, self.user_id, body=content)
        logger.info("actions.note_added", note_id=note.id, user_id=self.user_id)
        return ActionResult(
            f'Got it! I\'ve saved that note: "{content}"',
            action=Intent.NOTE_ADD.value,
            data={"note": note.to_dict()},
        )

    async def note_read_pinned(self, entities, utterance: str) -> ActionResult:
        notes = await self._db(self.store.notes.find_pinned, self.user_id)
        if not notes:
            return ActionResult("You don't have any pinned notes.")

        plural = "s" if len(notes) > 1 else ""
        parts = [f"You have {len(notes)} pinned note{plural}."]
        for i, note in enumerate(notes, start=1):
            parts.append(f"{i}: {note.title or note.body[:PINNED_LABEL_CHARS]}.")
        return ActionResult(
            " ".join(parts),
            action=Intent.NOTE_READ_PINNED.value,
            data={"notes": [n.to_dict() for n in notes]},
        )

    # -- unknown --

    async def fallback(self, utterance: str) -> ActionResult:
        """Ask the LLM for a short redirecting reply; canned reply if that fails too."""
        try:
            content = await self.completion.complete(
                Prompts.FALLBACK.format(assistant_name=self.assistant_name),
                utterance,
                max_tokens=self.fallback_max_tokens,
                temperature=FALLBACK_TEMPERATURE,
            )
        except Exception as e:
            logger.warning("actions.fallback_failed", error=str(e), error_type=type(e).__name__)
            return ActionResult(Replies.NOT_SURE)
        return ActionResult((content or "").strip() or Replies.NOT_SURE_SHORT)


def _combine_date_time(raw_date, raw_time) -> datetime | None:
    """YYYY-MM-DD plus HH:MM into a naive local datetime; None if either is unusable."""
    if not raw_date or not raw_time:
        return None
    try:
        day = datetime.strptime(str(raw_date).strip(), "%Y-%m-%d")
    except ValueError:
        return None
    match = _TIME_OF_DAY.match(str(raw_time).strip())
    if not match:
        return None
    return day + timedelta(hours=int(match.group(1)), minutes=int(match.group(2)))


def _schedule_times(raw) -> list[str]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return []
    times = []
    for value in raw:
        match = _TIME_OF_DAY.match(str(value).strip())
        if match:
            times.append(f"{int(match.group(1)):02d}:{match.group(2)}")
    return times


def _contact_not_found(term: str) -> str:
    return f'I couldn\'t find a contact matching "{term}". Would you like me to add them?'


def _describe_contact(contact) -> str:
    reply = contact.name
    if contact.phone:
        reply += f"'s phone number is {format_phone(contact.phone)}"
    if contact.email:
        if contact.phone:
            reply += f", and their email is {contact.email}"
        else:
            reply += f"'s email is {contact.email}"
    return reply + "."
