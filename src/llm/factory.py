"""LLM provider factory with auto-detection."""

import importlib
import os
from dataclasses import dataclass

from .base import DEFAULT_TIMEOUT, LLMError, LLMProvider


@dataclass(frozen=True)
class _ProviderEntry:
    module: str
    class_name: str
    env_key: str
    key_prefix: str
    cheap_model: str


# Detection order: speech already needs OpenAI, so it wins when several keys are set
_PROVIDERS = {
    "openai": _ProviderEntry("openai", "OpenAIProvider", "OPENAI_API_KEY", "sk-", "gpt-4o-mini"),
    "claude": _ProviderEntry(
        "claude", "ClaudeProvider", "ANTHROPIC_API_KEY", "sk-ant-", "claude-3-5-haiku-latest"
    ),
    "gemini": _ProviderEntry("gemini", "GeminiProvider", "GOOGLE_API_KEY", "AI", "gemini-2.0-flash"),
}


def create_cheap_provider(
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
    timeout: float = DEFAULT_TIMEOUT,
) -> LLMProvider:
    """Small-model provider; intent parsing and slot extraction need nothing bigger."""
    resolved = resolve_provider_name(provider, api_key)
    entry = _PROVIDERS.get(resolved)
    return create_llm_provider(
        provider=resolved,
        api_key=api_key,
        model=model or (entry.cheap_model if entry else None),
        client=client,
        timeout=timeout,
    )


def create_llm_provider(
    provider: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    client=None,
    timeout: float = DEFAULT_TIMEOUT,
) -> LLMProvider:
    """Create an LLM provider instance.

    Args:
        provider: "claude", "openai", "gemini", "auto", or None (auto-detect)
        api_key: Explicit API key (overrides env var)
        model: Model name (None = provider default)
        client: Pre-built SDK client for testing/DI
        timeout: Per-request timeout in seconds handed to the SDK client
    """
    resolved = resolve_provider_name(provider, api_key)
    entry = _PROVIDERS.get(resolved)
    if entry is None:
        raise LLMError(f"Unknown provider: {resolved}. Use: {', '.join(sorted(_PROVIDERS))}")

    if not api_key and not client:
        api_key = os.getenv(entry.env_key)

    module = importlib.import_module(f".providers.{entry.module}", __package__)
    provider_cls = getattr(module, entry.class_name)
    return provider_cls(api_key=api_key, model=model, client=client, timeout=timeout)


def resolve_provider_name(provider: str | None = None, api_key: str | None = None) -> str:
    """Return a concrete provider name, auto-detecting when provider is None/"auto"."""
    if provider and provider != "auto":
        return provider
    return _auto_detect_provider(api_key)


def _detect_provider_from_key(api_key: str) -> str | None:
    # Longest prefix first so sk-ant- is not taken for an OpenAI key
    for name, entry in sorted(_PROVIDERS.items(), key=lambda item: -len(item[1].key_prefix)):
        if api_key.startswith(entry.key_prefix):
            return name
    return None


def _auto_detect_provider(api_key: str | None = None) -> str:
    """Detect provider from explicit key prefix, then env vars."""
    if api_key:
        inferred = _detect_provider_from_key(api_key)
        if inferred:
            return inferred

    for name, entry in _PROVIDERS.items():
        if os.getenv(entry.env_key):
            return name
    env_keys = ", ".join(entry.env_key for entry in _PROVIDERS.values())
    raise LLMError(f"No LLM API key found. Set one of: {env_keys}")
