"""Tests for LLM provider adapters."""

from unittest.mock import MagicMock

import pytest

from llm import LLMAuthError, LLMError, LLMRateLimitError
from llm.providers.claude import ClaudeProvider
from llm.providers.gemini import GeminiProvider
from llm.providers.openai import OpenAIProvider

HI = [{"role": "user", "content": "hi"}]


class TestClaudeProvider:
    def _client(self, text="Hello from Claude"):
        mock_client = MagicMock()
        mock_client.messages.create.return_value = MagicMock(content=[MagicMock(text=text)])
        return mock_client

    def test_generate(self):
        mock_client = self._client()

        result = ClaudeProvider(client=mock_client).generate(
            messages=HI, system="Be helpful", max_tokens=100, temperature=0.3
        )

        assert result == "Hello from Claude"
        mock_client.messages.create.assert_called_once_with(
            model="claude-3-5-haiku-latest",
            max_tokens=100,
            messages=HI,
            system="Be helpful",
            temperature=0.3,
        )

    def test_optional_fields_omitted(self):
        mock_client = self._client("response")
        ClaudeProvider(client=mock_client).generate(messages=HI)

        call_kwargs = mock_client.messages.create.call_args.kwargs
        assert "system" not in call_kwargs
        assert "temperature" not in call_kwargs

    def test_auth_error(self):
        from anthropic import AuthenticationError

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = AuthenticationError(
            message="bad key", response=MagicMock(status_code=401), body={}
        )

        with pytest.raises(LLMAuthError):
            ClaudeProvider(client=mock_client).generate(messages=HI)

    def test_rate_limit_error(self):
        from anthropic import RateLimitError

        mock_client = MagicMock()
        mock_client.messages.create.side_effect = RateLimitError(
            message="rate limited", response=MagicMock(status_code=429), body={}
        )

        with pytest.raises(LLMRateLimitError):
            ClaudeProvider(client=mock_client).generate(messages=HI)

    def test_unexpected_error_wrapped(self):
        mock_client = MagicMock()
        mock_client.messages.create.side_effect = ValueError("weird")

        with pytest.raises(LLMError, match="Claude error"):
            ClaudeProvider(client=mock_client).generate(messages=HI)


class TestOpenAIProvider:
    def _client(self, content="Hello from GPT"):
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = MagicMock(
            choices=[MagicMock(message=MagicMock(content=content))]
        )
        return mock_client

    def test_generate_prepends_system(self):
        mock_client = self._client()

        result = OpenAIProvider(client=mock_client).generate(
            messages=HI, system="Be helpful", max_tokens=200, temperature=0.7
        )

        assert result == "Hello from GPT"
        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["messages"] == [{"role": "system", "content": "Be helpful"}, *HI]
        assert call_kwargs["max_tokens"] == 200
        assert call_kwargs["temperature"] == 0.7

    def test_generate_no_system(self):
        mock_client = self._client("response")
        OpenAIProvider(client=mock_client).generate(messages=HI)

        call_kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert call_kwargs["messages"] == HI
        assert "temperature" not in call_kwargs

    def test_none_content_is_empty_string(self):
        assert OpenAIProvider(client=self._client(None)).generate(messages=HI) == ""

    def test_rate_limit_error(self):
        from openai import RateLimitError

        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = RateLimitError(
            message="slow down", response=MagicMock(status_code=429), body={}
        )

        with pytest.raises(LLMRateLimitError):
            OpenAIProvider(client=mock_client).generate(messages=HI)


class TestGeminiProvider:
    def _client(self, text="Hello from Gemini"):
        mock_client = MagicMock()
        mock_client.models.generate_content.return_value = MagicMock(text=text)
        return mock_client

    def test_generate_uses_system_instruction(self):
        mock_client = self._client()

        result = GeminiProvider(client=mock_client).generate(
            messages=HI, system="Be helpful", max_tokens=50, temperature=0.2
        )

        assert result == "Hello from Gemini"
        call_kwargs = mock_client.models.generate_content.call_args.kwargs
        assert call_kwargs["model"] == "gemini-2.0-flash"
        assert call_kwargs["contents"] == "hi"
        assert call_kwargs["config"].system_instruction == "Be helpful"
        assert call_kwargs["config"].max_output_tokens == 50
        assert call_kwargs["config"].temperature == 0.2

    def test_empty_text(self):
        assert GeminiProvider(client=self._client(None)).generate(messages=HI) == ""

    def test_auth_error(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.side_effect = Exception("API key not valid")

        with pytest.raises(LLMAuthError):
            GeminiProvider(client=mock_client).generate(messages=HI)

    def test_rate_limit(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.side_effect = Exception("429 RESOURCE_EXHAUSTED")

        with pytest.raises(LLMRateLimitError):
            GeminiProvider(client=mock_client).generate(messages=HI)

    def test_generic_error(self):
        mock_client = MagicMock()
        mock_client.models.generate_content.side_effect = Exception("something broke")

        with pytest.raises(LLMError):
            GeminiProvider(client=mock_client).generate(messages=HI)
