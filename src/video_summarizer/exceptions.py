"""Error taxonomy for the video summarizer pipeline.

Callers only ever see these types; raw Playwright or provider SDK errors are
converted at the component boundary.
"""


class VideoSummarizerError(Exception):
    """Base class for every error surfaced by the pipeline."""


class NotFoundError(VideoSummarizerError):
    """A channel, video or transcript could not be resolved."""


class ExtractionExhaustedError(VideoSummarizerError):
    """Every locator strategy for a required UI step failed."""


class TransientError(VideoSummarizerError):
    """A failure that is retried locally before being surfaced."""


class ProviderThrottledError(TransientError):
    """The AI provider signalled rate limiting (HTTP 429)."""


class NavigationError(TransientError):
    """Page navigation failed after all retries."""


class AIProviderError(VideoSummarizerError):
    """Non-throttling failure reported by an AI provider."""


class ConfigurationError(VideoSummarizerError):
    """Fatal startup misconfiguration, e.g. no AI credential."""


class InvalidInputError(VideoSummarizerError):
    """Channel or video input was rejected before any browser work."""


class PipelineError(VideoSummarizerError):
    """Unexpected failure wrapped with the pipeline stage it happened in."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
