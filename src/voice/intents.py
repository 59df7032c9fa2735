"""Intent classification: utterance -> ParsedIntent with typed entities."""

from dataclasses import dataclass, field
from typing import Union

import structlog

from observability import metrics
from shared_types import Intent

from .completion import CompletionClient
from .prompts import Prompts

logger = structlog.get_logger()


# Typed entities, one shape per intent family. Every field is optional since
# the classifier decides which keys to fill.


@dataclass
class NoEntities:
    pass


@dataclass
class ScheduleQueryEntities:
    date: str | None = None


@dataclass
class ScheduleAddEntities:
    title: str | None = None
    date: str | None = None
    time: str | None = None


@dataclass
class ScheduleCancelEntities:
    title: str | None = None
    name: str | None = None
    date: str | None = None

    @property
    def search_term(self) -> str:
        return self.title or self.name or ""


@dataclass
class MedicationQueryEntities:
    query: str | None = None


@dataclass
class MedicationTakenEntities:
    medication: str | None = None
    time: str | None = None


@dataclass
class MedicationAddEntities:
    medication: str | None = None
    dosage: str | None = None
    time: str | None = None


@dataclass
class ContactLookupEntities:
    name: str | None = None
    relationship: str | None = None

    @property
    def search_term(self) -> str:
        return self.name or self.relationship or ""


@dataclass
class ContactAddEntities:
    name: str | None = None
    relationship: str | None = None
    phone: str | None = None


@dataclass
class NoteQueryEntities:
    search: str | None = None
    topic: str | None = None

    @property
    def search_term(self) -> str:
        return self.search or self.topic or ""


Entities = Union[
    NoEntities,
    ScheduleQueryEntities,
    ScheduleAddEntities,
    ScheduleCancelEntities,
    MedicationQueryEntities,
    MedicationTakenEntities,
    MedicationAddEntities,
    ContactLookupEntities,
    ContactAddEntities,
    NoteQueryEntities,
]

ENTITY_TYPES: dict[Intent, type] = {
    Intent.SCHEDULE_QUERY: ScheduleQueryEntities,
    Intent.SCHEDULE_ADD: ScheduleAddEntities,
    Intent.SCHEDULE_CANCEL: ScheduleCancelEntities,
    Intent.MEDICATION_QUERY: MedicationQueryEntities,
    Intent.MEDICATION_TAKEN: MedicationTakenEntities,
    Intent.MEDICATION_ADD: MedicationAddEntities,
    Intent.CONTACT_QUERY: ContactLookupEntities,
    Intent.CONTACT_CALL: ContactLookupEntities,
    Intent.CONTACT_ADD: ContactAddEntities,
    Intent.NOTE_QUERY: NoteQueryEntities,
}

# Keys models tend to use instead of the ones the prompt asks for
ENTITY_ALIASES = {
    "contact": "name",
    "person": "name",
    "contact_name": "name",
    "medication_name": "medication",
    "medications": "medication",
    "appointment": "title",
    "appointment_title": "title",
    "search_term": "search",
    "keyword": "search",
    "day": "date",
}


def _as_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return ", ".join(parts) or None
    if isinstance(value, dict):
        return None
    text = str(value).strip()
    return text or None


def normalize_entities(raw) -> dict[str, str]:
    """Flatten a model-supplied entity map to lower-case keys and string values."""
    if not isinstance(raw, dict):
        return {}
    entities: dict[str, str] = {}
    for key, value in raw.items():
        text = _as_text(value)
        if text is None:
            continue
        name = str(key).strip().lower()
        entities[name] = text
    for alias, canonical in ENTITY_ALIASES.items():
        if alias in entities and canonical not in entities:
            entities[canonical] = entities[alias]
    return entities


def build_entities(intent: Intent, raw: dict[str, str]) -> Entities:
    """Project the free-form entity map onto the intent's typed entities."""
    entity_type = ENTITY_TYPES.get(intent)
    if entity_type is None:
        return NoEntities()
    fields = entity_type.__dataclass_fields__
    return entity_type(**{k: v for k, v in raw.items() if k in fields})


@dataclass
class ParsedIntent:
    intent: Intent
    entities: Entities = field(default_factory=NoEntities)
    confidence: float = 0.0
    raw_entities: dict[str, str] = field(default_factory=dict)

    @classmethod
    def unknown(cls) -> "ParsedIntent":
        return cls(intent=Intent.UNKNOWN)

    @classmethod
    def from_payload(cls, payload: dict) -> "ParsedIntent":
        """Build from a classifier JSON object. Unrecognised intents become unknown."""
        try:
            intent = Intent(str(payload.get("intent", "")).strip().lower())
        except ValueError:
            return cls.unknown()
        raw = normalize_entities(payload.get("entities"))
        try:
            confidence = float(payload.get("confidence", 0.0))
        except (TypeError, ValueError):
            confidence = 0.0
        confidence = min(1.0, max(0.0, confidence))
        return cls(
            intent=intent,
            entities=build_entities(intent, raw),
            confidence=confidence,
            raw_entities=raw,
        )

    def to_dict(self) -> dict:
        return {
            "intent": self.intent.value,
            "entities": dict(self.raw_entities),
            "confidence": self.confidence,
        }


class IntentClassifier:
    """Sends the utterance and fixed taxonomy to the LLM; never raises."""

    def __init__(
        self,
        completion: CompletionClient,
        max_tokens: int = 200,
        temperature: float = 0.3,
    ):
        self.completion = completion
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def classify(self, utterance: str) -> ParsedIntent:
        try:
            with metrics.timer("voice.classify"):
                payload = await self.completion.complete_json(
                    Prompts.INTENT_CLASSIFIER,
                    utterance,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
        except Exception as e:
            logger.warning("voice.classify_failed", error=str(e), error_type=type(e).__name__)
            metrics.counter("voice.classifier_fallback")
            return ParsedIntent.unknown()

        if payload is None:
            metrics.counter("voice.classifier_fallback")
            return ParsedIntent.unknown()

        parsed = ParsedIntent.from_payload(payload)
        metrics.counter(f"voice.intent.{parsed.intent.value}")
        logger.info("voice.intent_parsed", **parsed.to_dict())
        return parsed
