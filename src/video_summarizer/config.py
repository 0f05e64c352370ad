"""Configuration module for the video summarizer pipeline."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConfigurationError
from .schemas import ProviderConfig

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class VideoSummarizerConfig(BaseModel):
    """Configuration for the video summarizer pipeline.

    This configuration class manages AI provider credentials, browser
    behaviour, summarization tunables and throttling. All settings can be
    overridden via environment variables.
    """

    # Environment strings are coerced and validated like explicit values
    model_config = ConfigDict(validate_default=True)

    # AI provider credentials (checked in priority order, see PROVIDER_PRIORITY)
    groq_api_key: str = Field(default_factory=lambda: os.getenv("GROQ_API_KEY", ""))
    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", "")
    )
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", "")
    )
    google_api_key: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_GENERATIVE_AI_API_KEY")
        or os.getenv("GEMINI_API_KEY", "")
    )

    # Provider models
    groq_model: str = Field(
        default_factory=lambda: os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
    )
    openai_model: str = Field(
        default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    )
    anthropic_model: str = Field(
        default_factory=lambda: os.getenv(
            "ANTHROPIC_MODEL", "claude-3-5-haiku-20241022"
        )
    )
    google_model: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_MODEL", "gemini-1.5-flash")
    )

    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Browser settings
    browser_headless: bool = Field(
        default_factory=lambda: _env_bool("BROWSER_HEADLESS", "true")
    )
    navigation_timeout_ms: int = Field(
        default_factory=lambda: os.getenv("NAVIGATION_TIMEOUT_MS", "30000")
    )
    navigation_max_retries: int = Field(
        default_factory=lambda: os.getenv("NAVIGATION_MAX_RETRIES", "3")
    )

    # Summarization settings
    max_chunk_size: int = Field(
        default_factory=lambda: os.getenv("MAX_CHUNK_SIZE", "5000")
    )
    target_summary_words: int = Field(
        default_factory=lambda: os.getenv("TARGET_SUMMARY_WORDS", "500")
    )
    summary_length_tolerance: float = Field(
        default_factory=lambda: os.getenv("SUMMARY_LENGTH_TOLERANCE", "0.8")
    )
    chunk_delay_seconds: float = Field(
        default_factory=lambda: os.getenv("CHUNK_DELAY_SECONDS", "1.0")
    )
    summary_temperature: float = Field(
        default_factory=lambda: os.getenv("SUMMARY_TEMPERATURE", "0.7")
    )

    # Throttling settings
    ai_rate_limit_max_requests: int = Field(
        default_factory=lambda: os.getenv("AI_RATE_LIMIT_MAX_REQUESTS", "10")
    )
    ai_rate_limit_window_seconds: float = Field(
        default_factory=lambda: os.getenv("AI_RATE_LIMIT_WINDOW_SECONDS", "60")
    )
    site_rate_limit_max_requests: int = Field(
        default_factory=lambda: os.getenv("SITE_RATE_LIMIT_MAX_REQUESTS", "20")
    )
    site_rate_limit_window_seconds: float = Field(
        default_factory=lambda: os.getenv("SITE_RATE_LIMIT_WINDOW_SECONDS", "60")
    )
    ai_max_retries: int = Field(
        default_factory=lambda: os.getenv("AI_MAX_RETRIES", "3")
    )
    ai_retry_base_delay_seconds: float = Field(
        default_factory=lambda: os.getenv("AI_RETRY_BASE_DELAY_SECONDS", "2.0")
    )


# Priority order: Groq > OpenAI > Anthropic > Google
PROVIDER_PRIORITY: tuple[str, ...] = ("groq", "openai", "anthropic", "google")

MISSING_CREDENTIALS_MESSAGE = """No AI API key found. Please set one of:
- GROQ_API_KEY                     # Groq
- OPENAI_API_KEY                   # OpenAI
- ANTHROPIC_API_KEY                # Anthropic
- GOOGLE_GENERATIVE_AI_API_KEY     # Google Gemini (GEMINI_API_KEY also accepted)"""


def get_config() -> VideoSummarizerConfig:
    """Get validated configuration instance.

    Returns:
        VideoSummarizerConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If a numeric environment variable cannot be parsed.
    """
    return VideoSummarizerConfig()


def resolve_provider_config(config: VideoSummarizerConfig) -> ProviderConfig:
    """Pick the highest-priority AI provider that has a credential configured.

    Args:
        config: Loaded configuration.

    Returns:
        Immutable ProviderConfig for the selected provider.

    Raises:
        ConfigurationError: If no provider credential is configured.
    """
    for rank, name in enumerate(PROVIDER_PRIORITY):
        api_key = getattr(config, f"{name}_api_key")
        if api_key:
            return ProviderConfig(
                name=name,
                api_key=api_key,
                model=getattr(config, f"{name}_model"),
                priority=rank,
            )

    raise ConfigurationError(MISSING_CREDENTIALS_MESSAGE)
