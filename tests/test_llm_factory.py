"""Tests for LLM factory and auto-detection."""

from unittest.mock import MagicMock, patch

import pytest

from llm import LLMError, create_cheap_provider, create_llm_provider, resolve_provider_name
from llm.factory import _auto_detect_provider

ALL_KEYS = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY")


@pytest.fixture
def no_keys(monkeypatch):
    for key in ALL_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestAutoDetection:
    @pytest.mark.parametrize(
        "env_var,expected",
        [("ANTHROPIC_API_KEY", "claude"), ("OPENAI_API_KEY", "openai"), ("GOOGLE_API_KEY", "gemini")],
    )
    def test_detects_single_key(self, no_keys, env_var, expected):
        no_keys.setenv(env_var, "test-key")
        assert _auto_detect_provider() == expected

    def test_prefers_openai_when_multiple(self, no_keys):
        no_keys.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        assert _auto_detect_provider() == "openai"

    @pytest.mark.parametrize(
        "api_key,expected",
        [("sk-ant-abc", "claude"), ("sk-proj-abc", "openai"), ("AIzaSy-abc", "gemini")],
    )
    def test_explicit_key_prefix_wins(self, no_keys, api_key, expected):
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        assert _auto_detect_provider(api_key) == expected

    def test_no_keys_raises(self, no_keys):
        with pytest.raises(LLMError, match="No LLM API key found"):
            _auto_detect_provider()

    def test_explicit_provider_skips_detection(self, no_keys):
        assert resolve_provider_name("gemini") == "gemini"


class TestCreateProvider:
    @pytest.mark.parametrize("name", ["claude", "openai", "gemini"])
    def test_explicit_with_client(self, name):
        mock_client = MagicMock()
        provider = create_llm_provider(provider=name, client=mock_client)
        assert provider.provider_name == name
        assert provider.client is mock_client

    def test_unknown_provider_raises(self):
        with pytest.raises(LLMError, match="Unknown provider"):
            create_llm_provider(provider="llama", client=MagicMock())

    def test_auto_builds_sdk_client_with_timeout(self, no_keys):
        no_keys.setenv("OPENAI_API_KEY", "sk-test")
        with patch("openai.OpenAI") as sdk:
            provider = create_llm_provider(timeout=7.5)
        assert provider.provider_name == "openai"
        sdk.assert_called_once_with(api_key="sk-test", timeout=7.5, max_retries=0)

    def test_custom_model(self):
        provider = create_llm_provider(provider="claude", client=MagicMock(), model="claude-opus-4-1")
        assert provider.model == "claude-opus-4-1"


class TestCheapProvider:
    def test_cheap_defaults(self):
        client = MagicMock()
        assert create_cheap_provider("claude", client=client).model == "claude-3-5-haiku-latest"
        assert create_cheap_provider("openai", client=client).model == "gpt-4o-mini"
        assert create_cheap_provider("gemini", client=client).model_name == "gemini-2.0-flash"

    def test_model_override(self):
        provider = create_cheap_provider("openai", model="gpt-4.1-nano", client=MagicMock())
        assert provider.model == "gpt-4.1-nano"

    def test_auto_uses_key_prefix(self, no_keys):
        provider = create_cheap_provider(api_key="sk-ant-abc", client=MagicMock())
        assert provider.provider_name == "claude"
