"""Retry utilities with exponential backoff."""

import logging

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from llm.base import LLMRateLimitError
from speech.base import SpeechRateLimitError

from .config_models import RetryConfig

logger = structlog.stdlib.get_logger(__name__)

# Only rate limits are worth another attempt inside a live turn
RATE_LIMIT_ERRORS = (LLMRateLimitError, SpeechRateLimitError)


def upstream_retry(
    max_attempts: int = 2,
    min_wait: float = 0.5,
    max_wait: float = 4.0,
    exceptions: tuple = RATE_LIMIT_ERRORS,
):
    """Retry decorator for LLM and speech API calls.

    Args:
        max_attempts: Max attempts (1 = no retry)
        min_wait: Min wait between retries (seconds)
        max_wait: Max wait between retries (seconds)
        exceptions: Exception types to retry on
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def retry_from_config(config: RetryConfig):
    """Create retry decorator from the retry config section."""
    return upstream_retry(
        max_attempts=config.max_attempts,
        min_wait=config.min_wait,
        max_wait=config.max_wait,
    )
