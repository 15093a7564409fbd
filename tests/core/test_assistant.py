"""Tests for the reading assistant."""

import pytest

from cosmos.core.assistant import (
    MAX_HISTORY_TURNS,
    AssistantError,
    ChatTurn,
    EmptyMessageError,
    ReadingAssistant,
    book_context,
)
from cosmos.llm.client import LLMConnectionError, LLMResponse


def _response(content: str) -> LLMResponse:
    return LLMResponse(content=content, model="test-model", provider="lmstudio")


class TestBookContext:
    """Tests for book_context."""

    def test_with_author(self, make_book):
        book = make_book(title="Auroras", author="Ada")
        assert book_context(book, 2, 5) == "Auroras - Ada (page 2/5)"

    def test_without_author(self, make_book):
        assert book_context(make_book(title="Auroras"), 1, 1) == "Auroras (page 1/1)"


class TestReadingAssistant:
    """Tests for ReadingAssistant with a mocked client."""

    def test_reply_strips_thinking(self, mock_llm_client):
        mock_llm_client.chat.return_value = _response("<think>hmm</think>Auroras are lights.")

        reply = ReadingAssistant(mock_llm_client).reply("What is an aurora?")

        assert reply == "Auroras are lights."

    def test_context_goes_into_system_prompt(self, mock_llm_client):
        mock_llm_client.chat.return_value = _response("ok")

        ReadingAssistant(mock_llm_client).reply("Hi", context="Auroras (page 1/3)")

        messages = mock_llm_client.chat.call_args.args[0]
        assert messages[0].role == "system"
        assert "Auroras (page 1/3)" in messages[0].content
        assert messages[-1].content == "Hi"

    def test_history_is_trimmed(self, mock_llm_client):
        mock_llm_client.chat.return_value = _response("ok")
        history = [
            ChatTurn(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
            for i in range(MAX_HISTORY_TURNS + 10)
        ]

        ReadingAssistant(mock_llm_client).reply("latest", history=history)

        messages = mock_llm_client.chat.call_args.args[0]
        assert len(messages) == MAX_HISTORY_TURNS + 2
        assert messages[1].content == "turn 10"

    def test_empty_message_rejected(self, mock_llm_client):
        with pytest.raises(EmptyMessageError):
            ReadingAssistant(mock_llm_client).reply("   ")
        mock_llm_client.chat.assert_not_called()

    def test_llm_failure_raises_assistant_error(self, mock_llm_client):
        mock_llm_client.chat.side_effect = LLMConnectionError("offline")
        with pytest.raises(AssistantError, match="offline"):
            ReadingAssistant(mock_llm_client).reply("Hello")

    def test_stream_yields_chunks(self, mock_llm_client):
        mock_llm_client.chat_stream.return_value = iter(["Aur", "oras"])
        chunks = list(ReadingAssistant(mock_llm_client).stream("Hello"))
        assert chunks == ["Aur", "oras"]

    def test_stream_strips_thinking(self, mock_llm_client):
        mock_llm_client.chat_stream.return_value = iter(
            ["<thi", "nk>plan the answer</th", "ink>\n\nAuroras ", "glow."]
        )

        chunks = list(ReadingAssistant(mock_llm_client).stream("Hello"))

        assert "".join(chunks) == "Auroras glow."

    def test_stream_rejects_blank_message(self, mock_llm_client):
        with pytest.raises(EmptyMessageError):
            list(ReadingAssistant(mock_llm_client).stream("  "))
        mock_llm_client.chat_stream.assert_not_called()

    def test_stream_failure_raises_assistant_error(self, mock_llm_client):
        mock_llm_client.chat_stream.side_effect = LLMConnectionError("offline")
        with pytest.raises(AssistantError, match="offline"):
            list(ReadingAssistant(mock_llm_client).stream("Hello"))
