"""LLM client for OpenAI-compatible chat endpoints.

Used for delegated keyword extraction, glossary enrichment and the
reading assistant.

Supported providers:
- lmstudio: Local LM Studio server
- openai: OpenAI API
- gemini: Google Gemini through its OpenAI-compatible endpoint
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Literal

import structlog
import yaml
from openai import OpenAI

from cosmos.config import get_provider_config
from cosmos.utils.text_utils import extract_json

logger = structlog.get_logger(__name__)

Provider = Literal["lmstudio", "openai", "gemini"]

DEFAULT_CONFIG_PATH = Path("configs/models.yaml")

PROVIDER_DEFAULTS: dict[str, dict[str, Any]] = {
    "lmstudio": {
        "base_url": "http://localhost:1234/v1",
        "api_key": "lm-studio",
        "supports_json_object": False,
    },
    "openai": {
        "base_url": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
        "supports_json_object": True,
    },
    "gemini": {
        "base_url": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "api_key_env": "GEMINI_API_KEY",
        "supports_json_object": True,
    },
}

JSON_REPAIR_PROMPT = """Fix the following text and return ONLY valid JSON:
<<<
{invalid_output}
>>>

Reply with the corrected JSON only, no explanations and no markdown."""


def _api_key_for(provider: str) -> str | None:
    defaults = PROVIDER_DEFAULTS.get(provider, {})
    if "api_key_env" in defaults:
        return os.environ.get(defaults["api_key_env"])
    return defaults.get("api_key")


@dataclass
class LLMConfig:
    """Configuration for LLM client."""

    provider: str = "lmstudio"
    base_url: str = "http://localhost:1234/v1"
    model: str = "default"
    temperature: float = 0.7
    max_tokens: int = 2048
    timeout: int = 60
    api_key: str | None = None
    supports_json_object: bool | None = None

    @classmethod
    def from_yaml(cls, config_path: Path | None = None) -> LLMConfig:
        """Load configuration from the `llm:` section of a YAML file."""
        config_path = config_path or DEFAULT_CONFIG_PATH

        if not config_path.exists():
            logger.warning("llm_config_not_found", path=str(config_path))
            return cls()

        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        llm_config = data.get("llm", {})

        provider = llm_config.get("provider", "lmstudio")
        defaults = PROVIDER_DEFAULTS.get(provider, {})

        return cls(
            provider=provider,
            base_url=llm_config.get("base_url", defaults.get("base_url", "")),
            model=llm_config.get("model", "default"),
            temperature=llm_config.get("temperature", 0.7),
            max_tokens=llm_config.get("max_tokens", 2048),
            timeout=llm_config.get("timeout", 60),
            api_key=_api_key_for(provider),
            supports_json_object=llm_config.get("supports_json_object"),
        )


@dataclass
class Message:
    """A chat message."""

    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    provider: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMError(Exception):
    """Error during LLM interaction."""

    pass


class LLMConnectionError(LLMError):
    """Error connecting to LLM server."""

    pass


class LLMResponseError(LLMError):
    """Error in LLM response."""

    pass


class LLMClient:
    """Client for OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        config: LLMConfig | None = None,
        provider: str | None = None,
        model: str | None = None,
    ):
        """Initialize LLM client.

        Args:
            config: LLM configuration (loads from YAML if not provided)
            provider: Override provider; base URL, key and default model
                come from the providers block of the app config
            model: Override model from config
        """
        self.config = config or LLMConfig.from_yaml()

        if provider is not None:
            self.config.provider = provider
            configured = get_provider_config(provider)
            defaults = PROVIDER_DEFAULTS.get(provider, {})
            base_url = (configured.base_url if configured else None) or defaults.get(
                "base_url"
            )
            if base_url:
                self.config.base_url = base_url
            self.config.api_key = (
                configured.get_api_key() if configured else None
            ) or _api_key_for(provider)
            if model is None and configured is not None:
                self.config.model = configured.default_model

        if model is not None:
            self.config.model = model

        self._client = OpenAI(
            base_url=self.config.base_url,
            api_key=self.config.api_key or "not-needed",
            timeout=self.config.timeout,
        )

        logger.info(
            "llm_client_initialized",
            provider=self.config.provider,
            model=self.config.model,
            base_url=self.config.base_url,
        )

    def _supports_json_object(self) -> bool:
        if self.config.supports_json_object is not None:
            return self.config.supports_json_object
        return PROVIDER_DEFAULTS.get(self.config.provider, {}).get(
            "supports_json_object", False
        )

    def chat(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Send a chat completion request.

        Raises:
            LLMConnectionError: If the server cannot be reached
            LLMResponseError: If the response has no choices
            LLMError: For any other API failure
        """
        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
        }
        if json_mode and self._supports_json_object():
            request_kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        try:
            response = self._client.chat.completions.create(**request_kwargs)
        except Exception as e:
            message = str(e)
            if "Connection" in message or "connect" in message.lower():
                raise LLMConnectionError(
                    f"Could not reach {self.config.provider} at {self.config.base_url}: {e}"
                ) from e
            raise LLMError(f"LLM call failed: {e}") from e
        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices:
            raise LLMResponseError("Empty response from LLM")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            provider=self.config.provider,
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider=self.config.provider,
            usage=usage,
            latency_ms=latency_ms,
        )

    def chat_stream(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Iterator[str]:
        """Stream completion chunks, falling back to a single reply on error."""
        request_kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
            "stream": True,
        }

        try:
            stream = self._client.chat.completions.create(**request_kwargs)
            for chunk in stream:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except Exception as e:
            logger.warning("streaming_failed_fallback", error=str(e))
            yield self.chat(messages, temperature, max_tokens).content

    def chat_json(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
        max_retries: int = 1,
    ) -> Any:
        """Send a chat request expecting JSON, with one repair round.

        Raises:
            LLMResponseError: If no valid JSON is obtained
        """
        response = self.chat(messages, temperature, max_tokens, json_mode=True)
        parsed = extract_json(response.content)
        if parsed is not None:
            return parsed

        if max_retries > 0:
            logger.warning(
                "json_parse_failed_retrying",
                content=response.content[:100],
                provider=self.config.provider,
            )
            repair = Message(
                role="user",
                content=JSON_REPAIR_PROMPT.format(invalid_output=response.content[:1000]),
            )
            retry = self.chat(messages + [repair], temperature, max_tokens, json_mode=True)
            parsed = extract_json(retry.content)
            if parsed is not None:
                logger.info("json_parse_recovered_after_retry")
                return parsed

        raise LLMResponseError(f"No valid JSON in response: {response.content[:200]}...")

    def simple_json(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> Any:
        """Single-turn chat returning parsed JSON."""
        messages = [
            Message(role="system", content=system_prompt),
            Message(role="user", content=user_message),
        ]
        return self.chat_json(messages, temperature, max_tokens)
