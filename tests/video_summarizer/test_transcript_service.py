"""Unit tests for transcript cleaning and the transcript extractor."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.video_summarizer.config import VideoSummarizerConfig
from src.video_summarizer.exceptions import ExtractionExhaustedError, NotFoundError
from src.video_summarizer.locator import NotFound
from src.video_summarizer.transcript_service import (
    ExtractionState,
    TranscriptService,
    clean_transcript,
    is_timestamp_only,
)

VIDEO_URL = "https://www.youtube.com/watch?v=abc123XYZ"
MODULE = "src.video_summarizer.transcript_service"


@pytest.mark.unit
class TestCleanTranscript:
    """Test suite for clean_transcript."""

    def test_strips_annotations_and_timestamps(self) -> None:
        """Test removal of bracketed notes and timestamps."""
        raw = "[Music] Hello 0:01 world\n\n [Applause [laughs]] again   1:02:03 end"

        assert clean_transcript(raw) == "Hello world again end"

    @pytest.mark.parametrize(
        "raw",
        [
            "[Music] intro 0:00 text",
            "nested [a [b] c] brackets 12:34",
            "already clean text",
            "   ",
        ],
    )
    def test_idempotent(self, raw: str) -> None:
        """Test that cleaning twice equals cleaning once."""
        once = clean_transcript(raw)

        assert clean_transcript(once) == once

    def test_timestamp_only(self) -> None:
        """Test detection of fragments holding only a timestamp."""
        assert is_timestamp_only("1:05")
        assert is_timestamp_only(" 1:02:03 ")
        assert not is_timestamp_only("1:05 hello")


@pytest.mark.unit
class TestTranscriptService:
    """Test suite for TranscriptService."""

    @pytest.fixture
    def config(self) -> VideoSummarizerConfig:
        """Create test configuration."""
        return VideoSummarizerConfig(groq_api_key="test-key")

    @pytest.fixture
    def page(self) -> MagicMock:
        page = MagicMock()
        page.evaluate = AsyncMock(return_value=["[Music] Hello", "0:05", "world 1:00", ""])
        page.content = AsyncMock(return_value="<html></html>")
        page.wait_for_timeout = AsyncMock()
        return page

    @pytest.fixture
    def session(self, page: MagicMock) -> MagicMock:
        session = MagicMock()
        session.acquire_page = AsyncMock(return_value=page)
        session.release_page = AsyncMock()
        return session

    @pytest.fixture
    def service(self, session: MagicMock, config: VideoSummarizerConfig) -> TranscriptService:
        return TranscriptService(session, MagicMock(), config)

    @staticmethod
    def fake_locate(missing: set[str]):
        """Locate stub returning NotFound for the given targets."""

        async def locate(scope, candidates, *, target):
            if target in missing:
                return NotFound(target=target)
            element = MagicMock()
            element.click = AsyncMock()
            return element

        return locate

    @pytest.mark.asyncio
    async def test_overflow_menu_fallback(
        self, service: TranscriptService, session: MagicMock, page: MagicMock
    ) -> None:
        """Test extraction through the overflow menu when no direct button exists."""
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.first_text", AsyncMock(return_value="Great Video")),
            patch(
                f"{MODULE}.locate",
                side_effect=self.fake_locate({"transcript_button", "description_expand"}),
            ),
            patch(f"{MODULE}.click_with_fallback", new_callable=AsyncMock) as mock_click,
        ):
            result = await service.get_transcript(VIDEO_URL)

        assert result.cleaned_text == "Hello world"
        assert result.raw_text == "[Music] Hello world 1:00"
        assert result.title == "Great Video"
        assert result.video_url == VIDEO_URL
        assert [c.kwargs["target"] for c in mock_click.await_args_list] == [
            "more_actions",
            "transcript_menu_item",
        ]
        assert service.state == ExtractionState.DONE
        session.release_page.assert_awaited_once_with(page)

    @pytest.mark.asyncio
    async def test_direct_button(self, service: TranscriptService) -> None:
        """Test that the direct transcript button is preferred."""
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.first_text", AsyncMock(return_value=None)),
            patch(f"{MODULE}.locate", side_effect=self.fake_locate(set())),
            patch(f"{MODULE}.click_with_fallback", new_callable=AsyncMock) as mock_click,
        ):
            result = await service.get_transcript(VIDEO_URL)

        assert result.title is None
        mock_click.assert_awaited_once()
        assert mock_click.await_args.kwargs["target"] == "transcript_button"

    @pytest.mark.asyncio
    async def test_every_transcript_control_missing(
        self, service: TranscriptService, session: MagicMock
    ) -> None:
        """Test ExtractionExhaustedError when both control paths fail."""
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.first_text", AsyncMock(return_value=None)),
            patch(
                f"{MODULE}.locate",
                side_effect=self.fake_locate({"transcript_button", "more_actions"}),
            ),
            patch(f"{MODULE}.click_with_fallback", new_callable=AsyncMock),
        ):
            with pytest.raises(ExtractionExhaustedError):
                await service.get_transcript(VIDEO_URL)

        assert service.state == ExtractionState.OPEN_TRANSCRIPT_PANEL
        session.release_page.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_player_never_ready(self, service: TranscriptService) -> None:
        """Test that a missing player exhausts extraction."""
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.locate", side_effect=self.fake_locate({"video_player"})),
        ):
            with pytest.raises(ExtractionExhaustedError, match="Video player"):
                await service.get_transcript(VIDEO_URL)

    @pytest.mark.asyncio
    async def test_panel_not_visible(self, service: TranscriptService, session: MagicMock) -> None:
        """Test NotFoundError when the panel never shows."""
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.first_text", AsyncMock(return_value=None)),
            patch(f"{MODULE}.locate", side_effect=self.fake_locate({"transcript_panel"})),
            patch(f"{MODULE}.click_with_fallback", new_callable=AsyncMock),
        ):
            with pytest.raises(NotFoundError, match="Transcript panel not found"):
                await service.get_transcript(VIDEO_URL)

        session.release_page.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_scrape(self, service: TranscriptService, page: MagicMock) -> None:
        """Test NotFoundError when every segment is empty after cleaning."""
        page.evaluate.return_value = ["[Music]", "0:00", ""]
        with (
            patch(f"{MODULE}.navigate", new_callable=AsyncMock),
            patch(f"{MODULE}.dismiss_consent", new_callable=AsyncMock),
            patch(f"{MODULE}.first_text", AsyncMock(return_value=None)),
            patch(f"{MODULE}.locate", side_effect=self.fake_locate(set())),
            patch(f"{MODULE}.click_with_fallback", new_callable=AsyncMock),
        ):
            with pytest.raises(NotFoundError, match="No transcript found"):
                await service.get_transcript(VIDEO_URL)

        assert service.state == ExtractionState.CLEAN
