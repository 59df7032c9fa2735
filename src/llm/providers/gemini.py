"""Google Gemini LLM provider using google-genai SDK."""

from ..base import (
    DEFAULT_TIMEOUT,
    LLMAuthError,
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    raise_for_sdk_error,
)

# google-genai surfaces most failures as one error type; the message tells them apart
_AUTH_MARKERS = ("api key", "authentication", "permission", "401", "403")
_RATE_MARKERS = ("resource_exhausted", "resource exhausted", "rate limit", "429", "quota")


class GeminiProvider(LLMProvider):
    """Google Gemini provider (google-genai SDK)."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.model_name = model or "gemini-2.0-flash"

        if client:
            self.client = client
            return

        try:
            from google import genai
            from google.genai import types
        except ImportError:
            raise LLMError("google-genai package not installed. Run: pip install google-genai")

        # HttpOptions takes milliseconds
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout * 1000)),
        )

    def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 2000,
        temperature: float | None = None,
    ) -> str:
        from google.genai import types

        config = types.GenerateContentConfig(
            max_output_tokens=max_tokens,
            system_instruction=system,
            temperature=temperature,
        )
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents="\n".join(msg["content"] for msg in messages),
                config=config,
            )
        except Exception as e:
            _raise_gemini_error(e)
        return response.text or ""


def _raise_gemini_error(e: Exception):
    message = str(e).lower()
    if any(marker in message for marker in _AUTH_MARKERS):
        raise LLMAuthError(f"Gemini auth failed: {e}") from e
    if any(marker in message for marker in _RATE_MARKERS):
        raise LLMRateLimitError(f"Gemini rate limit: {e}") from e
    raise_for_sdk_error("Gemini", e, api=Exception)
