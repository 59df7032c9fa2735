"""Base LLM provider abstraction."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """Base LLM error."""


class LLMRateLimitError(LLMError):
    """Rate limit hit."""


class LLMAuthError(LLMError):
    """Authentication failure."""


DEFAULT_TIMEOUT = 20.0


def raise_for_sdk_error(label: str, e: Exception, auth=(), rate_limit=(), api=()):
    """Re-raise an SDK exception as the matching LLMError subclass."""
    if isinstance(e, auth):
        raise LLMAuthError(f"{label} auth failed: {e}") from e
    if isinstance(e, rate_limit):
        raise LLMRateLimitError(f"{label} rate limit: {e}") from e
    if isinstance(e, api):
        raise LLMError(f"{label} API error: {e}") from e
    raise LLMError(f"{label} error: {e}") from e


class LLMProvider(ABC):
    """Abstract chat-completion provider interface."""

    provider_name: str = "base"

    @abstractmethod
    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
    ) -> str:
        """Generate a response from messages.

        Args:
            messages: List of {"role": ..., "content": ...} dicts
            system: Optional system prompt
            max_tokens: Max response tokens
            temperature: Sampling temperature (None = provider default)

        Returns:
            Generated text
        """
        ...
