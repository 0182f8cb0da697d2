"""Language-model providers and the provider-neutral streaming bridge.

Two backends are supported:

* ``OllamaProvider`` talks to a local Ollama server over HTTP with
  ``requests``, reading the newline-delimited JSON stream of ``/api/chat``.
* ``ClaudeProvider`` uses the ``anthropic`` SDK's streaming messages API.

``LLMBridge`` hides the choice of backend from the DM chat. It streams a
prompt into ``on_chunk`` callbacks and reports completion through exactly
one of ``on_done`` or ``on_error``. With no backend registered it answers
with a canned line instead of failing.
"""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import anthropic
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from dm_companion.core.config import AIProviderSettings, get_settings
from dm_companion.core.constants import CLAUDE_MODELS, FALLBACK_DM_RESPONSE
from dm_companion.core.exceptions import (
    AIConnectionError,
    AIResponseError,
    ConfigurationError,
    DmCompanionError,
)
from dm_companion.core.logging import get_logger
from dm_companion.models.enums import AIProvider


logger = get_logger(__name__)

ChatMessage = dict[str, str]
"""A chat turn: ``{"role": "user" | "assistant", "content": "..."}``."""

ChunkCallback = Callable[[str], None]
DoneCallback = Callable[[], None]
ErrorCallback = Callable[[Exception], None]


class LLMProvider(ABC):
    """Base class for streaming chat backends."""

    provider: AIProvider

    def __init__(self, model: str) -> None:
        self.model = model

    @property
    def is_configured(self) -> bool:
        """Whether the provider has what it needs to make requests."""
        return True

    @abstractmethod
    def generate_stream(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> Iterator[str]:
        """Stream a reply as text chunks.

        Raises:
            AIConnectionError: If the backend cannot be reached.
            AIResponseError: If the backend rejects the request.
        """

    def generate(self, messages: list[ChatMessage], system_prompt: str | None = None) -> str:
        """Return the whole reply as one string."""
        return "".join(self.generate_stream(messages, system_prompt))

    @abstractmethod
    def check_connection(self) -> bool:
        """Return True if the backend answers."""

    @abstractmethod
    def list_models(self) -> list[str]:
        """Return the model names the backend offers."""

    def set_model(self, model: str) -> None:
        logger.info("Model selected", provider=str(self.provider), model=model)
        self.model = model


# =============================================================================
# Ollama
# =============================================================================


class OllamaProvider(LLMProvider):
    """Chat with a local Ollama server.

    Args:
        base_url: Server address, e.g. 'http://localhost:11434'.
        model: Model tag, e.g. 'mistral:latest'.
        timeout: Seconds to wait for the server to start answering.
        max_retries: Attempts for connection-level failures.
        session: HTTP session to use; a new one is created if omitted.
    """

    provider = AIProvider.OLLAMA

    def __init__(
        self,
        base_url: str,
        model: str,
        *,
        timeout: float = 60,
        max_retries: int = 3,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(model)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self._http = session or requests.Session()

    def _post_chat(self, payload: dict[str, Any]) -> requests.Response:
        """Open the streaming chat request, retrying connection failures."""

        @retry(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )
        def _call() -> requests.Response:
            response = self._http.post(
                f"{self.base_url}/api/chat",
                json=payload,
                stream=True,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response

        try:
            return _call()
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise AIConnectionError(
                f"Failed to connect to Ollama at {self.base_url}: {exc}",
                model=self.model,
                provider=str(self.provider),
            ) from exc
        except requests.HTTPError as exc:
            raise AIResponseError(
                f"Ollama API error: {exc}",
                model=self.model,
                provider=str(self.provider),
            ) from exc

    def generate_stream(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> Iterator[str]:
        all_messages = [{"role": "system", "content": system_prompt}, *messages] if system_prompt else list(messages)
        payload = {"model": self.model, "messages": all_messages, "stream": True}
        logger.debug("Ollama request", model=self.model, messages=len(all_messages))

        response = self._post_chat(payload)
        try:
            for line in response.iter_lines(decode_unicode=True):
                if not line or not line.strip():
                    continue
                try:
                    data = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping invalid JSON line from Ollama")
                    continue
                if data.get("error"):
                    raise AIResponseError(
                        f"Ollama API error: {data['error']}",
                        model=self.model,
                        provider=str(self.provider),
                    )
                content = (data.get("message") or {}).get("content")
                if content:
                    yield content
                if data.get("done"):
                    break
        except requests.RequestException as exc:
            raise AIConnectionError(
                f"Ollama stream interrupted: {exc}",
                model=self.model,
                provider=str(self.provider),
            ) from exc
        finally:
            response.close()

    def _tags(self) -> dict[str, Any]:
        response = self._http.get(f"{self.base_url}/api/tags", timeout=5)
        response.raise_for_status()
        return response.json()

    def check_connection(self) -> bool:
        try:
            self._tags()
        except requests.RequestException as exc:
            logger.warning("Ollama connection failed", base_url=self.base_url, error=str(exc))
            return False
        return True

    def list_models(self) -> list[str]:
        try:
            data = self._tags()
        except requests.RequestException as exc:
            logger.warning("Failed to list Ollama models", base_url=self.base_url, error=str(exc))
            return []
        return [model["name"] for model in data.get("models", []) if "name" in model]


# =============================================================================
# Claude
# =============================================================================


class ClaudeProvider(LLMProvider):
    """Chat with Claude through the Anthropic SDK.

    The API key may be missing at construction and supplied later with
    ``set_api_key``; until then ``is_configured`` is False.
    """

    provider = AIProvider.CLAUDE

    def __init__(
        self,
        api_key: str | None,
        model: str,
        *,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        client: anthropic.Anthropic | None = None,
    ) -> None:
        super().__init__(model)
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client
        if client is None:
            self.set_api_key(api_key)

    def set_api_key(self, api_key: str | None) -> None:
        self._client = anthropic.Anthropic(api_key=api_key) if api_key else None
        logger.info("Claude API key updated", configured=self._client is not None)

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    @staticmethod
    def available_models() -> list[str]:
        return list(CLAUDE_MODELS)

    def generate_stream(
        self,
        messages: list[ChatMessage],
        system_prompt: str | None = None,
    ) -> Iterator[str]:
        if self._client is None:
            raise AIConnectionError("Claude API key not set", model=self.model, provider=str(self.provider))

        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": "user" if msg["role"] == "user" else "assistant", "content": msg["content"]}
                for msg in messages
            ],
        }
        if system_prompt:
            request["system"] = system_prompt
        logger.debug("Claude request", model=self.model, messages=len(messages))

        try:
            with self._client.messages.stream(**request) as stream:
                yield from stream.text_stream
        except anthropic.APIConnectionError as exc:
            raise AIConnectionError(
                f"Claude API error: {exc}",
                model=self.model,
                provider=str(self.provider),
            ) from exc
        except anthropic.APIError as exc:
            raise AIResponseError(
                f"Claude API error: {exc}",
                model=self.model,
                provider=str(self.provider),
            ) from exc

    def check_connection(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.messages.create(
                model=self.model,
                max_tokens=10,
                messages=[{"role": "user", "content": "test"}],
            )
        except anthropic.APIError as exc:
            logger.warning("Claude API test failed", model=self.model, error=str(exc))
            return False
        return True

    def list_models(self) -> list[str]:
        return self.available_models()


# =============================================================================
# Bridge
# =============================================================================


class LLMBridge:
    """Provider-neutral streaming entry point for the DM chat.

    Args:
        providers: Backends by provider name.
        active: Backend used for new prompts.
    """

    def __init__(
        self,
        providers: Mapping[AIProvider, LLMProvider] | None = None,
        active: AIProvider = AIProvider.OLLAMA,
    ) -> None:
        self.providers: dict[AIProvider, LLMProvider] = dict(providers or {})
        self.active = AIProvider(active)

    @property
    def active_provider(self) -> LLMProvider | None:
        return self.providers.get(self.active)

    def set_provider(self, provider: AIProvider | str) -> None:
        """Switch the backend used for new prompts.

        Raises:
            ConfigurationError: If no backend is registered under that name.
        """
        selected = AIProvider(provider)
        if selected not in self.providers:
            raise ConfigurationError(f"No {selected} provider registered", config_key="default_provider")
        self.active = selected
        logger.info("LLM provider switched", provider=str(selected))

    def _stream(
        self,
        text: str,
        system_prompt: str | None,
        history: list[ChatMessage] | None,
    ) -> Iterator[str]:
        provider = self.active_provider
        if provider is None:
            logger.info("No LLM provider registered, using canned response", provider=str(self.active))
            return iter([FALLBACK_DM_RESPONSE])
        messages = [*(history or []), {"role": "user", "content": text}]
        return provider.generate_stream(messages, system_prompt)

    def send_prompt(
        self,
        text: str,
        on_chunk: ChunkCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        *,
        system_prompt: str | None = None,
        history: list[ChatMessage] | None = None,
    ) -> None:
        """Stream a reply for ``text``, blocking until it is complete.

        ``on_chunk`` receives each text chunk, then exactly one of
        ``on_done`` or ``on_error`` is called.
        """
        try:
            for chunk in self._stream(text, system_prompt, history):
                on_chunk(chunk)
        except DmCompanionError as exc:
            logger.warning("LLM request failed", provider=str(self.active), error=str(exc))
            on_error(exc)
            return
        on_done()

    async def send_prompt_async(
        self,
        text: str,
        on_chunk: ChunkCallback,
        on_done: DoneCallback,
        on_error: ErrorCallback,
        *,
        system_prompt: str | None = None,
        history: list[ChatMessage] | None = None,
    ) -> None:
        """Like ``send_prompt`` but without blocking the event loop.

        Network reads happen in a worker thread; callbacks run on the
        event loop's thread, so they may touch session state freely.
        """
        done = object()
        try:
            chunks = self._stream(text, system_prompt, history)
            while (chunk := await asyncio.to_thread(next, chunks, done)) is not done:
                on_chunk(chunk)
        except DmCompanionError as exc:
            logger.warning("LLM request failed", provider=str(self.active), error=str(exc))
            on_error(exc)
            return
        on_done()


def create_bridge(settings: AIProviderSettings | None = None) -> LLMBridge:
    """Build a bridge with both backends from configuration."""
    settings = settings or get_settings().ai
    api_key = settings.claude_api_key.get_secret_value() if settings.claude_api_key else None

    providers: dict[AIProvider, LLMProvider] = {
        AIProvider.OLLAMA: OllamaProvider(
            settings.ollama_url,
            settings.ollama_model,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
        ),
        AIProvider.CLAUDE: ClaudeProvider(
            api_key,
            settings.claude_model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        ),
    }
    return LLMBridge(providers, active=AIProvider(settings.default_provider))


__all__ = [
    "ChatMessage",
    "LLMProvider",
    "OllamaProvider",
    "ClaudeProvider",
    "LLMBridge",
    "create_bridge",
]
