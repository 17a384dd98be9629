"""LLM provider abstraction for insight generation.

Supports Groq (hosted, OpenAI-compatible API) and Ollama (local) with a
unified interface. The provider receives a system prompt + message history
and returns the assistant's text response.

Credentials are passed in explicitly. A provider that cannot work without
one refuses to be built (``ConfigurationError``), so a missing key is
reported before any network call. Failures of the call itself are raised
as ``ProviderError``.
"""

from abc import ABC, abstractmethod

import httpx
import openai
import structlog
from openai import AsyncOpenAI

from expense_insights.config import Settings
from expense_insights.core.exceptions import ConfigurationError, ProviderError

logger = structlog.get_logger()


class LLMProviderBase(ABC):
    """Abstract base for LLM chat providers."""

    model: str = "?"

    @abstractmethod
    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float = 0.3,
    ) -> str:
        """Send a chat request and return the assistant's text response.

        Args:
            system_prompt: System-level instructions.
            messages: List of {"role": "user"|"assistant", "content": "..."}.
            temperature: Sampling temperature.

        Returns:
            The assistant's response text ("" when the model returned nothing).

        Raises:
            ProviderError: the request failed.
        """

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if the provider is reachable."""

    def get_model_name(self) -> str:
        """Return the configured model name for this provider."""
        return self.model


class GroqChatProvider(LLMProviderBase):
    """Groq provider using its OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.3-70b-versatile",
        base_url: str = "https://api.groq.com/openai/v1",
        timeout: float = 60.0,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "GROQ_API_KEY is not configured. "
                "Please set the GROQ_API_KEY environment variable."
            )
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def is_available(self) -> bool:
        return True

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float = 0.3,
    ) -> str:
        chat_messages = [{"role": "system", "content": system_prompt}]
        for msg in messages:
            chat_messages.append({
                "role": msg["role"],
                "content": msg["content"],
            })

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=chat_messages,
                temperature=temperature,
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error("groq_auth_error", error=str(e))
            raise ProviderError(
                "AI service authentication failed. "
                "Please check your GROQ_API_KEY configuration.",
                reason="authentication",
            ) from e
        except openai.RateLimitError as e:
            logger.warning("groq_rate_limited", error=str(e))
            raise ProviderError(
                "AI service rate limit reached. Please wait a moment and retry.",
                reason="rate_limit",
            ) from e
        except openai.APIConnectionError as e:
            logger.warning("groq_unreachable", error=str(e))
            raise ProviderError(
                f"AI service unreachable: {e}", reason="network"
            ) from e
        except openai.APIError as e:
            logger.error("groq_chat_error", error=str(e))
            raise ProviderError(f"AI service unavailable: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class OllamaChatProvider(LLMProviderBase):
    """Ollama-based provider using the /api/chat endpoint."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "mistral",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def is_available(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=5.0, transport=self.transport) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
                if resp.status_code != 200:
                    return False
                data = resp.json()
                model_names = [m.get("name", "") for m in data.get("models", [])]
                return any(
                    n == self.model or n.startswith(f"{self.model}:")
                    for n in model_names
                )
        except (httpx.HTTPError, ValueError, AttributeError):
            return False

    async def chat(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float = 0.3,
    ) -> str:
        ollama_messages = [{"role": "system", "content": system_prompt}]
        ollama_messages.extend(
            {"role": msg["role"], "content": msg["content"]} for msg in messages
        )

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(
                    connect=5.0,
                    read=self.timeout,
                    write=5.0,
                    pool=5.0,
                ),
                transport=self.transport,
            ) as client:
                resp = await client.post(
                    f"{self.base_url}/api/chat",
                    json={
                        "model": self.model,
                        "messages": ollama_messages,
                        "stream": False,
                        "options": {"temperature": temperature},
                    },
                )
        except httpx.TimeoutException as e:
            logger.warning("ollama_chat_timeout", model=self.model)
            raise ProviderError("Local model timed out.", reason="network") from e
        except httpx.HTTPError as e:
            logger.warning("ollama_unreachable", url=self.base_url, error=str(e))
            raise ProviderError(
                f"Ollama is not reachable at {self.base_url}: {e}", reason="network"
            ) from e

        if resp.status_code != 200:
            logger.warning("ollama_chat_error", status=resp.status_code, body=resp.text[:200])
            raise ProviderError(f"Ollama returned HTTP {resp.status_code}.")

        try:
            content = resp.json()["message"].get("content")
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("ollama_bad_response", body=resp.text[:200], error=str(e))
            raise ProviderError("Ollama returned an unreadable response.") from e
        if content is None:
            return ""
        if not isinstance(content, str):
            raise ProviderError("Ollama returned an unreadable response.")
        return content


def get_llm_provider(settings: Settings) -> LLMProviderBase:
    """Factory: return the configured LLM provider.

    Raises:
        ConfigurationError: the selected provider lacks its credential.
    """
    if settings.llm_provider.lower() == "ollama":
        return OllamaChatProvider(
            base_url=settings.llm_base_url,
            model=settings.llm_model,
            timeout=settings.llm_timeout,
        )
    return GroqChatProvider(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        base_url=settings.groq_base_url,
        timeout=settings.llm_timeout,
    )
