"""LLM providers - direct HTTP calls to OpenAI-compatible and Ollama APIs."""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx

from taskpilot.exceptions import LLMAPIError, LLMError
from taskpilot.logging import get_logger

log = get_logger(__name__)


OPENAI_BASE_URL = "https://api.openai.com/v1"
OLLAMA_NATIVE_BASE_URL = "http://127.0.0.1:11434"

_PROVIDER_ALIASES = {
    "chatgpt": "openai",
}


@dataclass
class Message:
    """A message in the conversation."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class LLMResponse:
    """Response from the LLM."""

    content: str
    model: str = ""
    usage: dict[str, int] = field(default_factory=dict)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        pass

    async def close(self) -> None:
        pass


class _HTTPProvider(LLMProvider):
    """Shared HTTP plumbing for JSON chat endpoints."""

    def __init__(
        self,
        model: str,
        base_url: str,
        temperature: float | None = None,
        max_tokens: int = 50,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @staticmethod
    def _convert_messages(messages: list[Message]) -> list[dict[str, Any]]:
        return [{"role": msg.role, "content": msg.content or ""} for msg in messages]

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post(self, url: str, body: dict[str, Any], label: str) -> dict[str, Any]:
        try:
            log.debug(f"Calling {label}", model=self.model, url=url, msg_count=len(body.get("messages", [])))
            response = await self.client.post(url, json=body, headers=self._headers())
            log.debug(f"{label} response status", status=response.status_code)
        except httpx.HTTPError as e:
            raise LLMAPIError(f"{label} HTTP error: {e}") from e

        if not response.is_success:
            raise LLMAPIError(
                f"{label} API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise LLMError(f"{label} response decode error: {e}") from e

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


class OpenAIProvider(_HTTPProvider):
    """OpenAI-compatible chat completions provider."""

    def __init__(self, model: str = "gpt-4o-mini", base_url: str = OPENAI_BASE_URL, **kwargs: Any):
        super().__init__(model=model, base_url=base_url, **kwargs)

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion."""
        body: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "n": 1,
            "max_tokens": max_tokens or self.max_tokens,
        }
        temperature = self.temperature if temperature is None else temperature
        if temperature is not None:
            body["temperature"] = temperature
        data = await self._post(f"{self.base_url}/chat/completions", body, "OpenAI")

        choices = data.get("choices") or []
        if not choices:
            raise LLMError("No response received from OpenAI service.")

        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage={
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
            },
        )


class OllamaProvider(_HTTPProvider):
    """Direct Ollama API provider."""

    def __init__(self, model: str = "llama3.2", base_url: str = OLLAMA_NATIVE_BASE_URL, **kwargs: Any):
        super().__init__(model=model, base_url=base_url, **kwargs)

    async def complete(
        self,
        messages: list[Message],
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Generate a completion."""
        options: dict[str, Any] = {}
        temperature = self.temperature if temperature is None else temperature
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens or self.max_tokens:
            options["num_predict"] = max_tokens or self.max_tokens

        body: dict[str, Any] = {
            "model": self.model,
            "messages": self._convert_messages(messages),
            "stream": False,
            "options": options,
        }
        data = await self._post(f"{self.base_url}/api/chat", body, "Ollama")

        message = data.get("message")
        if not message:
            raise LLMError("No response received from Ollama service.")

        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)
        return LLMResponse(
            content=message.get("content", ""),
            model=self.model,
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        )


def create_provider(
    provider: str = "openai",
    model: str = "gpt-4o-mini",
    api_key: str | None = None,
    base_url: str | None = None,
    temperature: float | None = None,
    max_tokens: int = 50,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LLMProvider:
    """Create an LLM provider.

    Args:
        provider: Provider name (openai, chatgpt, ollama)
        model: Model name
        api_key: Optional API key
        base_url: Optional base URL
        temperature: Default temperature; None leaves it to the service
        max_tokens: Default max tokens
        timeout: Request timeout in seconds
        transport: Optional httpx transport override

    Returns:
        Configured LLMProvider instance
    """
    normalized = (provider or "").strip().lower()
    normalized = _PROVIDER_ALIASES.get(normalized, normalized)
    common: dict[str, Any] = {
        "temperature": temperature,
        "max_tokens": max_tokens,
        "api_key": api_key,
        "timeout": timeout,
        "transport": transport,
    }
    if normalized == "openai":
        return OpenAIProvider(model=model, base_url=base_url or OPENAI_BASE_URL, **common)
    if normalized == "ollama":
        return OllamaProvider(model=model, base_url=base_url or OLLAMA_NATIVE_BASE_URL, **common)
    raise ValueError(f"Provider '{provider}' not supported. Use 'openai' or 'ollama'.")
