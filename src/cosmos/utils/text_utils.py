"""Text processing utilities.

Helpers for cleaning LLM output before it is shown or parsed.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Iterator

# Reasoning blocks some models emit before the answer
THINK_PATTERNS = [
    re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<thinking>.*?</thinking>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<analysis>.*?</analysis>", re.DOTALL | re.IGNORECASE),
    re.compile(r"<reasoning>.*?</reasoning>", re.DOTALL | re.IGNORECASE),
]

THINK_TAGS = ("think", "thinking", "analysis", "reasoning")
_OPEN_THINK_TAG = re.compile(r"<(" + "|".join(THINK_TAGS) + r")>", re.IGNORECASE)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def strip_think(text: str) -> str:
    """Remove thinking/reasoning blocks from LLM output.

    Args:
        text: Raw LLM output text

    Returns:
        Cleaned text without thinking artifacts
    """
    result = text
    for pattern in THINK_PATTERNS:
        result = pattern.sub("", result)
    return result.strip()


def _could_open_think(fragment: str) -> bool:
    fragment = fragment.lower()
    return any(f"<{tag}>".startswith(fragment) for tag in THINK_TAGS)


def strip_think_stream(chunks: Iterable[str]) -> Iterator[str]:
    """Remove thinking/reasoning blocks from streamed LLM output.

    Text is held back only while it could still be the start of an
    opening tag. An unterminated block swallows the rest of the stream.
    """
    buffer = ""
    closing: str | None = None

    for chunk in chunks:
        buffer += chunk
        while buffer:
            if closing:
                end = buffer.lower().find(closing)
                if end == -1:
                    # Keep a possible partial closing tag
                    buffer = buffer[-(len(closing) - 1):]
                    break
                buffer = buffer[end + len(closing):]
                closing = None
                continue

            match = _OPEN_THINK_TAG.search(buffer)
            if match:
                if match.start():
                    yield buffer[:match.start()]
                closing = f"</{match.group(1).lower()}>"
                buffer = buffer[match.end():]
                continue

            cut = buffer.rfind("<")
            if cut == -1 or not _could_open_think(buffer[cut:]):
                yield buffer
                buffer = ""
            else:
                if cut:
                    yield buffer[:cut]
                buffer = buffer[cut:]
            break

    if buffer and not closing:
        yield buffer


def extract_json(content: str) -> Any | None:
    """Parse JSON from model output, tolerating common wrappers.

    Tries, in order:
    1. Direct parse
    2. The first ```json ... ``` fenced block
    3. The outermost {...} object, then the outermost [...] array

    Returns:
        Parsed value, or None if every strategy fails
    """
    content = strip_think(content)

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    fenced = _FENCED_BLOCK.search(content)
    if fenced:
        try:
            return json.loads(fenced.group(1).strip())
        except json.JSONDecodeError:
            pass

    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = content.find(open_char)
        end = content.rfind(close_char) + 1
        if start >= 0 and end > start:
            try:
                return json.loads(content[start:end])
            except json.JSONDecodeError:
                continue

    return None
