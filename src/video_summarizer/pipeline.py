"""Main pipeline orchestrator for video summarization."""

from collections.abc import Awaitable
from typing import TypeVar

from src.utils.logging import get_logger

from .ai_gateway import AIGateway
from .backoff import BackoffPolicy
from .browser_session import BrowserSession
from .channel_service import ChannelService
from .config import VideoSummarizerConfig, get_config
from .exceptions import NotFoundError, PipelineError, VideoSummarizerError
from .rate_limiter import RateLimiter
from .schemas import FinalSummary, SummaryData, SummaryResponse, TranscriptText
from .summarization_service import SummarizationService
from .transcript_service import TranscriptService
from .validators import validate_channel_input, validate_video_url
from .video_service import VideoService

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_VIDEO_TITLE = "YouTube Video"


class VideoSummaryPipeline:
    """Orchestrates one summarization run from channel to summary.

    Stages run strictly in sequence: channel lookup, latest video, transcript
    extraction, summarization. The browser session is owned here and closed
    on every exit path of a run, including cancellation.
    """

    def __init__(
        self,
        config: VideoSummarizerConfig | None = None,
        session: BrowserSession | None = None,
        gateway: AIGateway | None = None,
    ):
        """Initialize pipeline with all required services.

        Args:
            config: Configuration object. If None, loads from environment.
            session: Browser session. If None, a new one is created.
            gateway: AI gateway. If None, one is built from configuration.

        Raises:
            ConfigurationError: If no AI provider credential is configured.
        """
        self.config = config or get_config()
        self.session = session or BrowserSession(self.config)
        self.gateway = gateway or AIGateway.from_config(self.config)

        site_limiter = RateLimiter(
            self.config.site_rate_limit_max_requests,
            self.config.site_rate_limit_window_seconds,
            name="site",
        )
        navigation_backoff = BackoffPolicy(
            max_retries=self.config.navigation_max_retries, base_delay=2.0
        )
        self.channel_service = ChannelService(
            self.session, site_limiter, self.config, navigation_backoff
        )
        self.video_service = VideoService(
            self.session, site_limiter, self.config, navigation_backoff
        )
        self.transcript_service = TranscriptService(
            self.session, site_limiter, self.config, navigation_backoff
        )
        self.summarization_service = SummarizationService(self.gateway, self.config)

        logger.info("pipeline_initialized", provider=self.gateway.provider_name)

    @property
    def provider_name(self) -> str:
        return self.gateway.provider_name

    async def _stage(self, stage: str, step: Awaitable[T]) -> T:
        """Await one stage, wrapping unexpected errors with the stage name."""
        try:
            return await step
        except VideoSummarizerError:
            raise
        except Exception as e:
            logger.exception("pipeline_stage_failed", stage=stage, error_type=type(e).__name__)
            raise PipelineError(stage, e) from e

    async def summarize_channel(self, channel_input: str) -> SummaryResponse:
        """Summarize the latest video of a channel.

        Args:
            channel_input: Channel name, handle or URL.

        Returns:
            SummaryResponse; failures are reported with success=False.
        """
        logger.info("pipeline_started", mode="channel", channel_input=channel_input)

        try:
            channel_input = validate_channel_input(channel_input)

            channel = await self._stage(
                "channel_lookup", self.channel_service.resolve(channel_input)
            )
            if channel is None:
                raise NotFoundError(f"Channel not found: {channel_input}")

            channel_name = channel.display_name or await self._stage(
                "channel_name", self.channel_service.get_display_name(channel.url)
            )
            channel_name = channel_name or channel_input
            logger.info("processing_channel", channel_name=channel_name, url=channel.url)

            video = await self._stage("latest_video", self.video_service.latest(channel.url))
            if video is None:
                raise NotFoundError("No videos found")

            transcript = await self._stage(
                "transcript", self.transcript_service.get_transcript(video.url)
            )
            summary = await self._summarize(transcript)

            logger.info(
                "pipeline_completed",
                mode="channel",
                video_id=video.id,
                word_count=summary.word_count,
            )
            return SummaryResponse.ok(
                SummaryData(
                    title=video.title,
                    summary=summary.text,
                    url=video.url,
                    channel_name=channel_name,
                    provider=self.provider_name,
                )
            )

        except VideoSummarizerError as e:
            logger.error("pipeline_failed", mode="channel", error_type=type(e).__name__, error=str(e))
            return SummaryResponse.fail(str(e))

        finally:
            await self.session.close()

    async def summarize_video(self, video_url: str) -> SummaryResponse:
        """Summarize one specific video.

        Args:
            video_url: YouTube watch or youtu.be URL.

        Returns:
            SummaryResponse; failures are reported with success=False.
        """
        logger.info("pipeline_started", mode="video", video_url=video_url)

        try:
            video_url = validate_video_url(video_url)
            transcript = await self._stage(
                "transcript", self.transcript_service.get_transcript(video_url)
            )
            summary = await self._summarize(transcript)

            logger.info("pipeline_completed", mode="video", word_count=summary.word_count)
            return SummaryResponse.ok(
                SummaryData(
                    title=transcript.title or DEFAULT_VIDEO_TITLE,
                    summary=summary.text,
                    url=video_url,
                    provider=self.provider_name,
                )
            )

        except VideoSummarizerError as e:
            logger.error("pipeline_failed", mode="video", error_type=type(e).__name__, error=str(e))
            return SummaryResponse.fail(str(e))

        finally:
            await self.session.close()

    async def _summarize(self, transcript: TranscriptText) -> FinalSummary:
        return await self._stage(
            "summarization",
            self.summarization_service.summarize(transcript.cleaned_text),
        )

    async def aclose(self) -> None:
        """Release the browser and provider clients."""
        await self.session.close()
        await self.gateway.aclose()
