"""Tests for upstream retry policy."""

import pytest

from cli.config_models import RetryConfig
from cli.retry import retry_from_config, upstream_retry
from llm import LLMError, LLMRateLimitError
from speech import SpeechRateLimitError


def _flaky(errors):
    calls = []

    def fn():
        calls.append(1)
        if len(calls) <= len(errors):
            raise errors[len(calls) - 1]
        return "ok"

    return fn, calls


def test_retries_rate_limits():
    fn, calls = _flaky([LLMRateLimitError("429")])
    assert upstream_retry(max_attempts=2, min_wait=0, max_wait=0)(fn)() == "ok"
    assert len(calls) == 2


def test_retries_speech_rate_limits():
    fn, calls = _flaky([SpeechRateLimitError("429")])
    assert upstream_retry(max_attempts=2, min_wait=0, max_wait=0)(fn)() == "ok"


def test_other_errors_not_retried():
    fn, calls = _flaky([LLMError("bad request")])
    with pytest.raises(LLMError):
        upstream_retry(max_attempts=3, min_wait=0, max_wait=0)(fn)()
    assert len(calls) == 1


def test_gives_up_after_max_attempts():
    fn, calls = _flaky([LLMRateLimitError("429")] * 5)
    with pytest.raises(LLMRateLimitError):
        retry_from_config(RetryConfig(max_attempts=3, min_wait=0, max_wait=0))(fn)()
    assert len(calls) == 3
