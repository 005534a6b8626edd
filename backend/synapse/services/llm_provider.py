"""LLM provider abstraction for the Synapse assistant.

Supports any OpenAI-compatible endpoint (OpenRouter by default), Anthropic
(Claude) and Ollama (local) behind one interface. The provider receives a
system prompt + message history and returns the assistant's text response.

Providers raise ``LLMProviderError`` on failure; callers decide how to surface it.
"""

from abc import ABC, abstractmethod

import httpx
import structlog

from synapse.config import settings
from synapse.services.ai_config import get_current_provider

logger = structlog.get_logger()


class LLMProviderError(Exception):
    """The text-generation service failed or returned nothing usable."""


class LLMProviderBase(ABC):
    """Abstract base for LLM chat providers."""

    @abstractmethod
    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Send a chat request and return the assistant's text response.

        Args:
            system_prompt: System-level instructions.
            messages: List of {"role": "user"|"assistant", "content": "..."}.
            temperature: Sampling temperature (defaults to settings).
            max_tokens: Completion budget (defaults to settings).

        Raises:
            LLMProviderError: the upstream call failed.
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the provider is reachable."""

    def get_model_name(self) -> str:
        """Return the configured model name for this provider."""
        return getattr(self, "model", "?")


def _chat_messages(messages: list[dict]) -> list[dict]:
    """Keep only user/assistant turns, in order."""
    return [
        {"role": msg["role"], "content": msg["content"]}
        for msg in messages
        if msg["role"] in ("user", "assistant")
    ]


class OpenAIChatProvider(LLMProviderBase):
    """OpenAI chat completions API, pointed at any compatible base URL."""

    def __init__(self) -> None:
        self.api_key = settings.openai_api_key
        self.base_url = settings.openai_base_url
        self.model = settings.openai_model

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        if not self.api_key:
            raise LLMProviderError("OpenAI-compatible API key is not configured")

        from openai import AsyncOpenAI

        client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            default_headers={
                "HTTP-Referer": settings.openai_referer,
                "X-Title": "Synapse",
            },
        )

        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}, *_chat_messages(messages)],
                temperature=settings.ai_chat_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.ai_chat_max_tokens,
            )
        except Exception as e:
            logger.error("openai_chat_error", error=str(e), model=self.model)
            raise LLMProviderError(f"OpenAI-compatible call failed: {e}") from e

        if not response.choices:
            raise LLMProviderError("OpenAI-compatible call returned no choices")
        return response.choices[0].message.content or ""


class AnthropicChatProvider(LLMProviderBase):
    """Anthropic Claude provider using the messages API.

    Key difference: system prompt is a top-level parameter, not a message.
    """

    def __init__(self) -> None:
        self.api_key = settings.anthropic_api_key
        self.model = settings.anthropic_model

    async def is_available(self) -> bool:
        return bool(self.api_key)

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        if not self.api_key:
            raise LLMProviderError("Anthropic API key is not configured")

        from anthropic import AsyncAnthropic

        client = AsyncAnthropic(api_key=self.api_key)

        try:
            response = await client.messages.create(
                model=self.model,
                system=system_prompt,
                messages=_chat_messages(messages),
                temperature=settings.ai_chat_temperature if temperature is None else temperature,
                max_tokens=max_tokens or settings.ai_chat_max_tokens,
            )
        except Exception as e:
            logger.error("anthropic_chat_error", error=str(e), model=self.model)
            raise LLMProviderError(f"Anthropic call failed: {e}") from e

        return response.content[0].text if response.content else ""


class OllamaChatProvider(LLMProviderBase):
    """Ollama-based provider using the /api/chat endpoint."""

    def __init__(self) -> None:
        self.base_url = settings.llm_base_url.rstrip("/")
        self.model = settings.llm_model

    async def is_available(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
                if resp.status_code != 200:
                    return False
                model_names = [m.get("name", "") for m in resp.json().get("models", [])]
                return any(
                    n == self.model or n.startswith(f"{self.model}:")
                    for n in model_names
                )
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}, *_chat_messages(messages)],
            "stream": False,
            "options": {
                "temperature": settings.ai_chat_temperature if temperature is None else temperature,
                "num_predict": max_tokens or settings.ai_chat_max_tokens,
            },
        }
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(connect=5.0, read=settings.llm_timeout, write=5.0, pool=5.0)
            ) as client:
                resp = await client.post(f"{self.base_url}/api/chat", json=payload)
        except httpx.TimeoutException as e:
            logger.warning("ollama_chat_timeout", model=self.model)
            raise LLMProviderError("Local model took too long to answer") from e
        except httpx.HTTPError as e:
            logger.warning("ollama_chat_unreachable", error=str(e))
            raise LLMProviderError(f"Ollama is not reachable: {e}") from e

        if resp.status_code != 200:
            logger.warning("ollama_chat_error", status=resp.status_code)
            raise LLMProviderError(f"Ollama returned HTTP {resp.status_code}")
        return resp.json().get("message", {}).get("content", "")


def get_llm_provider() -> LLMProviderBase:
    """Factory: return the configured LLM provider."""
    provider = get_current_provider()
    if provider == "anthropic":
        return AnthropicChatProvider()
    if provider == "ollama":
        return OllamaChatProvider()
    return OpenAIChatProvider()
