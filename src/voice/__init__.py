"""Voice assistant core: intent classification, domain actions and the dialogue engine."""

from .actions import ActionExecutor, ActionResult
from .completion import CompletionClient, extract_json_object
from .engine import DialogueEngine, EngineState
from .events import ActionCompleted, EngineError, EngineEvent, Heard, Speaking
from .factory import Collaborators, create_collaborators, create_dialogue_engine
from .intents import IntentClassifier, ParsedIntent

__all__ = [
    "ActionExecutor",
    "ActionResult",
    "CompletionClient",
    "extract_json_object",
    "DialogueEngine",
    "EngineState",
    "ActionCompleted",
    "EngineError",
    "EngineEvent",
    "Heard",
    "Speaking",
    "Collaborators",
    "create_collaborators",
    "create_dialogue_engine",
    "IntentClassifier",
    "ParsedIntent",
]
