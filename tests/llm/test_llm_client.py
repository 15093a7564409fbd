"""Tests for LLM client module."""

from unittest.mock import MagicMock, patch

import pytest

from cosmos.llm.client import (
    LLMClient,
    LLMConfig,
    LLMConnectionError,
    LLMError,
    LLMResponse,
    LLMResponseError,
    Message,
)


def _completion(content: str) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.model = "test-model"
    response.usage.prompt_tokens = 10
    response.usage.completion_tokens = 20
    response.usage.total_tokens = 30
    return response


class TestLLMConfig:
    """Tests for LLMConfig dataclass."""

    def test_default_config(self):
        config = LLMConfig()

        assert config.provider == "lmstudio"
        assert config.base_url == "http://localhost:1234/v1"
        assert config.model == "default"
        assert config.max_tokens == 2048
        assert config.timeout == 60

    def test_from_yaml_missing_file(self, tmp_path):
        config = LLMConfig.from_yaml(tmp_path / "nonexistent.yaml")
        assert config.provider == "lmstudio"

    def test_from_yaml_valid_file(self, tmp_path):
        config_path = tmp_path / "models.yaml"
        config_path.write_text(
            """
llm:
  provider: openai
  model: gpt-4o-mini
  temperature: 0.2
  max_tokens: 512
  timeout: 30
"""
        )

        with patch.dict("os.environ", {"OPENAI_API_KEY": "test-key"}):
            config = LLMConfig.from_yaml(config_path)

        assert config.provider == "openai"
        assert config.base_url == "https://api.openai.com/v1"
        assert config.model == "gpt-4o-mini"
        assert config.temperature == 0.2
        assert config.max_tokens == 512
        assert config.api_key == "test-key"


class TestLLMResponse:
    """Tests for LLMResponse dataclass."""

    def test_total_tokens(self):
        response = LLMResponse(
            content="x", model="m", provider="lmstudio", usage={"total_tokens": 30}
        )
        assert response.total_tokens == 30

    def test_empty_usage(self):
        assert LLMResponse(content="x", model="m", provider="lmstudio").total_tokens == 0


class TestLLMClientMocked:
    """Tests for LLMClient using mocks (no real API calls)."""

    @pytest.fixture
    def mock_openai_client(self):
        """Create a mock OpenAI client."""
        with patch("cosmos.llm.client.OpenAI") as mock:
            mock_instance = MagicMock()
            mock.return_value = mock_instance
            yield mock_instance

    def test_provider_override(self, mock_openai_client):
        with patch.dict("os.environ", {"GEMINI_API_KEY": "g-key"}):
            client = LLMClient(config=LLMConfig(), provider="gemini")

        assert client.config.provider == "gemini"
        assert "generativelanguage" in client.config.base_url
        assert client.config.api_key == "g-key"

    def test_model_override(self, mock_openai_client):
        client = LLMClient(config=LLMConfig(), model="custom-model")
        assert client.config.model == "custom-model"

    def test_chat_success(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion("Hello")

        response = LLMClient(config=LLMConfig()).chat([Message(role="user", content="Hi")])

        assert response.content == "Hello"
        assert response.total_tokens == 30

    def test_chat_empty_response(self, mock_openai_client):
        empty = MagicMock()
        empty.choices = []
        mock_openai_client.chat.completions.create.return_value = empty

        with pytest.raises(LLMResponseError):
            LLMClient(config=LLMConfig()).chat([Message(role="user", content="Hi")])

    def test_chat_connection_error(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = Exception("Connection refused")

        with pytest.raises(LLMConnectionError):
            LLMClient(config=LLMConfig()).chat([Message(role="user", content="Hi")])

    def test_chat_generic_error(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = Exception("rate limited")

        with pytest.raises(LLMError) as exc:
            LLMClient(config=LLMConfig()).chat([Message(role="user", content="Hi")])
        assert not isinstance(exc.value, LLMConnectionError)

    def test_json_mode_only_for_supporting_providers(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion("{}")

        LLMClient(config=LLMConfig(provider="lmstudio")).chat_json(
            [Message(role="user", content="Hi")]
        )
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert "response_format" not in kwargs

        LLMClient(config=LLMConfig(provider="openai")).chat_json(
            [Message(role="user", content="Hi")]
        )
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_chat_json_parses_fenced_block(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion(
            'Sure!\n```json\n{"keywords": ["aurora"]}\n```'
        )

        result = LLMClient(config=LLMConfig()).simple_json("system", "user")
        assert result == {"keywords": ["aurora"]}

    def test_chat_json_repairs_once(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = [
            _completion("not json at all"),
            _completion('{"ok": true}'),
        ]

        result = LLMClient(config=LLMConfig()).simple_json("system", "user")

        assert result == {"ok": True}
        assert mock_openai_client.chat.completions.create.call_count == 2

    def test_chat_json_gives_up_after_repair(self, mock_openai_client):
        mock_openai_client.chat.completions.create.return_value = _completion("still not json")

        with pytest.raises(LLMResponseError):
            LLMClient(config=LLMConfig()).simple_json("system", "user")

    def test_stream_falls_back_to_chat(self, mock_openai_client):
        mock_openai_client.chat.completions.create.side_effect = [
            Exception("stream unsupported"),
            _completion("whole answer"),
        ]

        chunks = list(LLMClient(config=LLMConfig()).chat_stream([Message(role="user", content="Hi")]))
        assert chunks == ["whole answer"]
