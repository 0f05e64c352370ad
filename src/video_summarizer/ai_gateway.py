"""AI gateway over interchangeable LLM providers.

Each provider adapts one vendor's request and response shape to a single
``generate(prompt) -> text`` contract and maps throttling to
``ProviderThrottledError``. The gateway picks one provider at startup,
admits every call through the AI rate limiter and retries throttled calls
with exponential backoff.
"""

from typing import Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from openai import APIError, AsyncOpenAI, RateLimitError

from src.utils.logging import get_logger

from .backoff import BackoffPolicy
from .config import VideoSummarizerConfig, resolve_provider_config
from .exceptions import AIProviderError, ProviderThrottledError
from .rate_limiter import RateLimiter
from .schemas import ProviderConfig

logger = get_logger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"
ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"
REQUEST_TIMEOUT_SECONDS = 120.0


class AIProvider(Protocol):
    """Capability set every provider implements."""

    name: str
    model: str

    async def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> str: ...

    async def aclose(self) -> None: ...


class OpenAICompatibleProvider:
    """Provider for OpenAI and OpenAI-compatible APIs such as Groq."""

    def __init__(self, name: str, api_key: str, model: str, base_url: str):
        self.name = name
        self.model = model
        self.client = AsyncOpenAI(
            base_url=base_url, api_key=api_key, timeout=REQUEST_TIMEOUT_SECONDS
        )

    async def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except RateLimitError as e:
            raise ProviderThrottledError(f"{self.name} rate limit (429): {e}") from e
        except APIError as e:
            raise AIProviderError(f"{self.name} API error: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()


class AnthropicProvider:
    """Provider for the Anthropic Messages API over plain HTTP."""

    name = "anthropic"

    def __init__(self, api_key: str, model: str, client: httpx.AsyncClient | None = None):
        self.model = model
        self.client = client or httpx.AsyncClient(
            base_url=ANTHROPIC_BASE_URL, timeout=REQUEST_TIMEOUT_SECONDS
        )
        self._headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }

    async def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        payload = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        try:
            response = await self.client.post("/v1/messages", headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            raise AIProviderError(f"anthropic request failed: {e}") from e

        if response.status_code == 429:
            raise ProviderThrottledError("anthropic rate limit (429)")
        if response.status_code >= 400:
            raise AIProviderError(
                f"anthropic API error: {response.status_code} {response.text[:200]}"
            )

        for block in response.json().get("content", []):
            if block.get("type") == "text":
                return block.get("text", "")
        return ""

    async def aclose(self) -> None:
        await self.client.aclose()


class GoogleProvider:
    """Provider for Google Gemini through the google-genai SDK."""

    name = "google"

    def __init__(self, api_key: str, model: str):
        self.model = model
        self.client = genai.Client(api_key=api_key)

    async def generate(self, prompt: str, *, temperature: float, max_tokens: int) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                    top_k=40,
                    top_p=0.8,
                ),
            )
        except genai_errors.APIError as e:
            if e.code == 429:
                raise ProviderThrottledError(f"google rate limit (429): {e}") from e
            raise AIProviderError(f"google API error: {e}") from e

        return response.text or ""

    async def aclose(self) -> None:
        return None


def build_provider(provider_config: ProviderConfig) -> AIProvider:
    """Instantiate the provider implementation for a resolved config."""
    name = provider_config.name
    if name == "groq":
        return OpenAICompatibleProvider(
            "groq", provider_config.api_key, provider_config.model, GROQ_BASE_URL
        )
    if name == "openai":
        return OpenAICompatibleProvider(
            "openai", provider_config.api_key, provider_config.model, OPENAI_BASE_URL
        )
    if name == "anthropic":
        return AnthropicProvider(provider_config.api_key, provider_config.model)
    if name == "google":
        return GoogleProvider(provider_config.api_key, provider_config.model)
    raise ValueError(f"Unsupported provider: {name}")


class AIGateway:
    """Uniform text-generation entry point for the summarization engine."""

    def __init__(
        self,
        provider: AIProvider,
        rate_limiter: RateLimiter,
        backoff: BackoffPolicy,
    ):
        """Initialize the gateway around an already selected provider.

        Args:
            provider: The provider every call is dispatched to.
            rate_limiter: Sliding-window limiter admitting each call.
            backoff: Retry policy applied to throttled calls only.
        """
        self.provider = provider
        self.rate_limiter = rate_limiter
        self.backoff = backoff
        logger.info("ai_gateway_initialized", provider=provider.name, model=provider.model)

    @classmethod
    def from_config(cls, config: VideoSummarizerConfig) -> "AIGateway":
        """Select the highest-priority configured provider.

        Raises:
            ConfigurationError: If no provider credential is configured.
        """
        provider_config = resolve_provider_config(config)
        return cls(
            provider=build_provider(provider_config),
            rate_limiter=RateLimiter(
                config.ai_rate_limit_max_requests,
                config.ai_rate_limit_window_seconds,
                name="ai",
            ),
            backoff=BackoffPolicy(
                max_retries=config.ai_max_retries,
                base_delay=config.ai_retry_base_delay_seconds,
            ),
        )

    @property
    def provider_name(self) -> str:
        return self.provider.name

    async def generate(
        self, prompt: str, *, temperature: float = 0.7, max_tokens: int = 1024
    ) -> str:
        """Generate text for a prompt with the selected provider.

        Args:
            prompt: Full prompt text.
            temperature: Sampling temperature.
            max_tokens: Output token ceiling.

        Returns:
            Plain generated text.

        Raises:
            ProviderThrottledError: If throttling outlasted the retry ceiling.
            AIProviderError: On any other provider failure (not retried).
        """

        async def call() -> str:
            return await self.rate_limiter.execute(
                self.provider.generate,
                prompt,
                temperature=temperature,
                max_tokens=max_tokens,
            )

        text = await self.backoff.run(call, retry_on=(ProviderThrottledError,))
        logger.debug(
            "ai_generation_completed",
            provider=self.provider.name,
            prompt_chars=len(prompt),
            output_chars=len(text),
        )
        return text

    async def aclose(self) -> None:
        await self.provider.aclose()
