"""Claude (Anthropic) LLM provider."""

from ..base import DEFAULT_TIMEOUT, LLMError, LLMProvider, raise_for_sdk_error


class ClaudeProvider(LLMProvider):
    """Anthropic Claude provider."""

    provider_name = "claude"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model = model or "claude-3-5-haiku-latest"

        if client:
            self.client = client
            return

        try:
            from anthropic import Anthropic
        except ImportError:
            raise LLMError("anthropic package not installed. Run: pip install anthropic")

        # Retries belong to cli.retry, which only retries rate limits
        self.client = Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
    ) -> str:
        request = {"model": self.model, "max_tokens": max_tokens, "messages": messages}
        if system:
            request["system"] = system
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = self.client.messages.create(**request)
            return response.content[0].text
        except Exception as e:
            from anthropic import APIError, AuthenticationError, RateLimitError

            raise_for_sdk_error(
                "Claude", e, auth=AuthenticationError, rate_limit=RateLimitError, api=APIError
            )
