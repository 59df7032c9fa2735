"""OpenAI LLM provider."""

from ..base import DEFAULT_TIMEOUT, LLMError, LLMProvider, raise_for_sdk_error


class OpenAIProvider(LLMProvider):
    """OpenAI chat-completions provider."""

    provider_name = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model = model or "gpt-4o-mini"

        if client:
            self.client = client
            return

        try:
            from openai import OpenAI
        except ImportError:
            raise LLMError("openai package not installed. Run: pip install openai")

        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
    ) -> str:
        # Chat completions take the system prompt as the first message
        chat = [{"role": "system", "content": system}] if system else []
        chat.extend(messages)

        request = {"model": self.model, "max_tokens": max_tokens, "messages": chat}
        if temperature is not None:
            request["temperature"] = temperature

        try:
            response = self.client.chat.completions.create(**request)
            return response.choices[0].message.content or ""
        except Exception as e:
            from openai import APIError, AuthenticationError, RateLimitError

            raise_for_sdk_error(
                "OpenAI", e, auth=AuthenticationError, rate_limit=RateLimitError, api=APIError
            )
