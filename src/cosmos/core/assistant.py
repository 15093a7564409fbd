"""Reading assistant chat.

Answers questions about space science and the book being read. The book
context is a one-line string such as "Cosmos - Carl Sagan (page 3/12)".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Literal

import structlog

from cosmos.llm.client import LLMError, Message
from cosmos.utils.text_utils import strip_think, strip_think_stream

if TYPE_CHECKING:
    from cosmos.db.books_repository import BookRecord
    from cosmos.llm.client import LLMClient

logger = structlog.get_logger(__name__)

MAX_HISTORY_TURNS = 20

SYSTEM_PROMPT = """You are the Cosmos Reader assistant, a friendly guide to astronomy, \
space weather and the books in the reader's library.
Answer clearly and concisely. When a book context is given, relate your answer \
to that book and page where it helps. If you don't know something, say so."""


class AssistantError(Exception):
    """Raised when the assistant cannot produce a reply."""

    pass


class EmptyMessageError(AssistantError):
    """Raised for a blank message; nothing is sent to the model."""

    pass


@dataclass
class ChatTurn:
    """A previous message in the conversation."""

    role: Literal["user", "assistant"]
    content: str


def book_context(book: BookRecord, current_page: int, total_pages: int) -> str:
    """Describe the open book for the assistant prompt."""
    author = f" - {book.author}" if book.author else ""
    return f"{book.title}{author} (page {current_page}/{total_pages})"


class ReadingAssistant:
    """Chat assistant backed by an LLM client."""

    def __init__(self, client: LLMClient):
        self.client = client

    def _messages(
        self,
        message: str,
        history: list[ChatTurn] | None,
        context: str | None,
    ) -> list[Message]:
        system = SYSTEM_PROMPT
        if context:
            system += f"\n\nThe reader currently has open: {context}"

        messages = [Message(role="system", content=system)]
        for turn in (history or [])[-MAX_HISTORY_TURNS:]:
            messages.append(Message(role=turn.role, content=turn.content))
        messages.append(Message(role="user", content=message))
        return messages

    def reply(
        self,
        message: str,
        history: list[ChatTurn] | None = None,
        context: str | None = None,
    ) -> str:
        """Answer a message.

        Raises:
            EmptyMessageError: If the message is blank
            AssistantError: If the LLM call fails
        """
        if not message.strip():
            raise EmptyMessageError("Message is empty")

        try:
            response = self.client.chat(self._messages(message, history, context))
        except LLMError as e:
            logger.error("assistant.reply_failed", error=str(e))
            raise AssistantError(str(e)) from e

        return strip_think(response.content)

    def stream(
        self,
        message: str,
        history: list[ChatTurn] | None = None,
        context: str | None = None,
    ) -> Iterator[str]:
        """Yield the answer in chunks as they arrive, without reasoning blocks.

        Raises:
            EmptyMessageError: If the message is blank
            AssistantError: If the LLM call fails
        """
        if not message.strip():
            raise EmptyMessageError("Message is empty")

        started = False
        try:
            chunks = self.client.chat_stream(self._messages(message, history, context))
            for piece in strip_think_stream(chunks):
                if not started:
                    piece = piece.lstrip()
                    if not piece:
                        continue
                    started = True
                yield piece
        except LLMError as e:
            logger.error("assistant.stream_failed", error=str(e))
            raise AssistantError(str(e)) from e
