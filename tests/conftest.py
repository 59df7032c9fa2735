"""Shared test fixtures for Boomer AI."""

import json
import sys
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from llm.base import LLMProvider  # noqa: E402
from observability import metrics  # noqa: E402
from store import DataStore  # noqa: E402
from voice.completion import CompletionClient  # noqa: E402
from voice.prompts import Prompts  # noqa: E402

# Monday morning
FIXED_NOW = datetime(2026, 10, 19, 9, 30)
USER_ID = "user-123"


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def store(tmp_path):
    """Fresh SQLite store per test with one registered user."""
    data_store = DataStore(tmp_path / "boomer.db")
    data_store.users.get_or_create(USER_ID, name="Robert")
    return data_store


@pytest.fixture
def user_id():
    return USER_ID


def _reply(value):
    if isinstance(value, Exception):
        raise value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


@pytest.fixture
def make_provider():
    """Build a mocked LLMProvider that answers by prompt kind.

    classify/extract/fallback may be a dict (sent as JSON), a raw string, or
    an exception to raise.
    """

    def factory(classify=None, extract=None, fallback="How about checking your schedule?"):
        provider = MagicMock(spec=LLMProvider)

        def generate(messages, system=None, max_tokens=2000, temperature=None):
            if system == Prompts.INTENT_CLASSIFIER:
                return _reply(classify if classify is not None else {"intent": "unknown"})
            if system and system.startswith("Extract"):
                return _reply(extract if extract is not None else {})
            return _reply(fallback)

        provider.generate.side_effect = generate
        return provider

    return factory


@pytest.fixture
def completion_for(make_provider):
    def factory(**kwargs):
        return CompletionClient(make_provider(**kwargs), timeout=5.0)

    return factory
