"""Unit tests for video summarizer configuration."""

import pytest
from pydantic import ValidationError

from src.video_summarizer.config import (
    PROVIDER_PRIORITY,
    VideoSummarizerConfig,
    get_config,
    resolve_provider_config,
)
from src.video_summarizer.exceptions import ConfigurationError

PROVIDER_ENV_VARS = (
    "GROQ_API_KEY",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GOOGLE_GENERATIVE_AI_API_KEY",
    "GEMINI_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every provider credential from the environment."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
class TestVideoSummarizerConfig:
    """Test suite for VideoSummarizerConfig."""

    def test_default_values(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test configuration defaults when no overrides are set."""
        for name in (
            "MAX_CHUNK_SIZE",
            "TARGET_SUMMARY_WORDS",
            "SUMMARY_LENGTH_TOLERANCE",
            "AI_RATE_LIMIT_MAX_REQUESTS",
            "AI_RATE_LIMIT_WINDOW_SECONDS",
            "SITE_RATE_LIMIT_MAX_REQUESTS",
            "BROWSER_HEADLESS",
        ):
            clean_env.delenv(name, raising=False)

        config = VideoSummarizerConfig()

        assert config.max_chunk_size == 5000
        assert config.target_summary_words == 500
        assert config.summary_length_tolerance == 0.8
        assert config.ai_rate_limit_max_requests == 10
        assert config.ai_rate_limit_window_seconds == 60
        assert config.site_rate_limit_max_requests == 20
        assert config.browser_headless is True
        assert config.groq_api_key == ""

    def test_environment_overrides(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that environment variables override defaults."""
        clean_env.setenv("MAX_CHUNK_SIZE", "1200")
        clean_env.setenv("TARGET_SUMMARY_WORDS", "300")
        clean_env.setenv("BROWSER_HEADLESS", "false")
        clean_env.setenv("OPENAI_MODEL", "gpt-4o")

        config = get_config()

        assert config.max_chunk_size == 1200
        assert config.target_summary_words == 300
        assert config.browser_headless is False
        assert config.openai_model == "gpt-4o"

    def test_invalid_numeric_environment_value(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that an unparsable number is reported as a validation error."""
        clean_env.setenv("MAX_CHUNK_SIZE", "five thousand")

        with pytest.raises(ValidationError) as exc_info:
            get_config()

        assert "max_chunk_size" in str(exc_info.value)

    def test_gemini_key_alias(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that GEMINI_API_KEY is accepted for Google."""
        clean_env.setenv("GEMINI_API_KEY", "gemini-key")

        config = VideoSummarizerConfig()

        assert config.google_api_key == "gemini-key"


@pytest.mark.unit
class TestResolveProviderConfig:
    """Test suite for provider selection."""

    def test_priority_order(self) -> None:
        """Test the fixed provider priority."""
        assert PROVIDER_PRIORITY == ("groq", "openai", "anthropic", "google")

    def test_highest_priority_provider_wins(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that Groq is chosen over every other configured provider."""
        config = VideoSummarizerConfig(
            groq_api_key="groq-key",
            openai_api_key="openai-key",
            google_api_key="google-key",
        )

        provider = resolve_provider_config(config)

        assert provider.name == "groq"
        assert provider.api_key == "groq-key"
        assert provider.model == config.groq_model
        assert provider.priority == 0

    def test_falls_through_to_lower_priority(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test selection of Anthropic when only Anthropic and Google are set."""
        config = VideoSummarizerConfig(anthropic_api_key="anthropic-key", google_api_key="g")

        provider = resolve_provider_config(config)

        assert provider.name == "anthropic"
        assert provider.priority == 2

    def test_missing_credentials_raises(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test that no credential at all is a configuration error."""
        config = VideoSummarizerConfig()

        with pytest.raises(ConfigurationError) as exc_info:
            resolve_provider_config(config)

        assert "GROQ_API_KEY" in str(exc_info.value)
        assert "GOOGLE_GENERATIVE_AI_API_KEY" in str(exc_info.value)

    def test_api_key_hidden_from_repr(self) -> None:
        """Test that the selected key never shows up in repr output."""
        config = VideoSummarizerConfig(openai_api_key="sk-secret", groq_api_key="")

        provider = resolve_provider_config(config)

        assert "sk-secret" not in repr(provider)
