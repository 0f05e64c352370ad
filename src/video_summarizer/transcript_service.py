"""Transcript extraction by driving the YouTube watch-page UI."""

import re
from enum import Enum

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from src.utils.logging import get_logger

from .backoff import BackoffPolicy
from .browser_session import BrowserSession
from .config import VideoSummarizerConfig
from .exceptions import ExtractionExhaustedError, NotFoundError
from .locator import NotFound, first_text, locate
from .page_actions import click_with_fallback, dismiss_consent, navigate
from .rate_limiter import RateLimiter
from .schemas import TranscriptText
from .selectors import (
    DESCRIPTION_EXPAND,
    MORE_ACTIONS_BUTTON,
    TRANSCRIPT_BUTTON,
    TRANSCRIPT_MENU_ITEM,
    TRANSCRIPT_PANEL,
    TRANSCRIPT_SEGMENT_SELECTORS,
    TRANSCRIPT_TEXT_SELECTORS,
    TRANSCRIPT_TIMESTAMP_SELECTORS,
    VIDEO_PLAYER,
    WATCH_TITLE,
)

logger = get_logger(__name__)

_BRACKETED = re.compile(r"\[[^\[\]]*\]")
_TIMESTAMP = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\b")
_WHITESPACE = re.compile(r"\s+")

# Reads every segment, trying text selectors in order and skipping timestamp
# nodes. Returns one fragment per segment.
_SCRAPE_SEGMENTS_JS = """
({segmentSelectors, textSelectors, timestampSelectors}) => {
  let segments = [];
  for (const sel of segmentSelectors) {
    segments = Array.from(document.querySelectorAll(sel));
    if (segments.length) break;
  }
  return segments.map(segment => {
    for (const sel of textSelectors) {
      const node = segment.querySelector(sel);
      if (!node) continue;
      if (timestampSelectors.some(ts => node.matches(ts))) continue;
      const text = (node.textContent || '').trim();
      if (text) return text;
    }
    return '';
  });
}
"""


def clean_transcript(raw: str) -> str:
    """Strip bracketed annotations and timestamps, then collapse whitespace.

    Pure and idempotent: cleaning already-clean text returns it unchanged.
    """
    text = raw
    # Innermost brackets first, until nested annotations are gone
    while True:
        stripped = _BRACKETED.sub(" ", text)
        if stripped == text:
            break
        text = stripped
    text = _TIMESTAMP.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def is_timestamp_only(fragment: str) -> bool:
    return not _TIMESTAMP.sub("", fragment).strip()


class ExtractionState(str, Enum):
    """Linear states of one transcript extraction run."""

    NAVIGATE = "navigate"
    DISMISS_CONSENT = "dismiss_consent"
    WAIT_PLAYER_READY = "wait_player_ready"
    EXPAND_DESCRIPTION = "expand_description"
    OPEN_TRANSCRIPT_PANEL = "open_transcript_panel"
    WAIT_PANEL_READY = "wait_panel_ready"
    SCRAPE_SEGMENTS = "scrape_segments"
    CLEAN = "clean"
    DONE = "done"


class TranscriptService:
    """Service extracting full transcripts from the watch page.

    The run is a strictly linear state machine; consent dismissal and
    description expansion are best-effort, every other step is required.
    The page is always released, but the browser itself is left running.
    """

    def __init__(
        self,
        session: BrowserSession,
        site_limiter: RateLimiter,
        config: VideoSummarizerConfig,
        backoff: BackoffPolicy | None = None,
    ):
        self.session = session
        self.site_limiter = site_limiter
        self.config = config
        self.backoff = backoff or BackoffPolicy(
            max_retries=config.navigation_max_retries, base_delay=2.0
        )
        self.state = ExtractionState.NAVIGATE

    def _advance(self, state: ExtractionState, video_url: str) -> None:
        self.state = state
        logger.info("transcript_state", state=state.value, video_url=video_url)

    async def get_transcript(self, video_url: str) -> TranscriptText:
        """Extract and clean the transcript of one video.

        Args:
            video_url: Absolute watch URL.

        Returns:
            TranscriptText with raw and cleaned text and the page title.

        Raises:
            NavigationError: If the watch page could not be loaded.
            ExtractionExhaustedError: If the player or every transcript
                control strategy failed.
            NotFoundError: If the panel never appeared or held no text.
        """
        page = await self.session.acquire_page()
        try:
            self._advance(ExtractionState.NAVIGATE, video_url)
            await navigate(
                page,
                video_url,
                limiter=self.site_limiter,
                backoff=self.backoff,
                timeout_ms=self.config.navigation_timeout_ms,
            )

            self._advance(ExtractionState.DISMISS_CONSENT, video_url)
            await dismiss_consent(page)

            self._advance(ExtractionState.WAIT_PLAYER_READY, video_url)
            player = await locate(page, VIDEO_PLAYER, target="video_player")
            if isinstance(player, NotFound):
                raise ExtractionExhaustedError("Video player did not load")
            title = await first_text(page, WATCH_TITLE, target="watch_title")

            self._advance(ExtractionState.EXPAND_DESCRIPTION, video_url)
            await self._expand_description(page)

            self._advance(ExtractionState.OPEN_TRANSCRIPT_PANEL, video_url)
            await self._open_transcript_panel(page)

            self._advance(ExtractionState.WAIT_PANEL_READY, video_url)
            panel = await locate(page, TRANSCRIPT_PANEL, target="transcript_panel")
            if isinstance(panel, NotFound):
                raise NotFoundError("Transcript panel not found")

            self._advance(ExtractionState.SCRAPE_SEGMENTS, video_url)
            raw_text = await self._scrape_segments(page)

            self._advance(ExtractionState.CLEAN, video_url)
            cleaned = clean_transcript(raw_text)
            if not cleaned:
                raise NotFoundError("No transcript found")

            self._advance(ExtractionState.DONE, video_url)
            logger.info(
                "transcript_extracted",
                video_url=video_url,
                raw_chars=len(raw_text),
                cleaned_chars=len(cleaned),
            )
            return TranscriptText(
                video_url=video_url,
                raw_text=raw_text,
                cleaned_text=cleaned,
                title=title,
            )

        except Exception as e:
            logger.error(
                "transcript_extraction_failed",
                video_url=video_url,
                state=self.state.value,
                error_type=type(e).__name__,
                error=str(e)[:200],
            )
            await self._log_page_content(page)
            raise

        finally:
            await self.session.release_page(page)

    async def _expand_description(self, page: Page) -> None:
        button = await locate(page, DESCRIPTION_EXPAND, target="description_expand")
        if isinstance(button, NotFound):
            logger.info("description_expand_skipped")
            return
        try:
            await button.click(timeout=5000)
            await page.wait_for_timeout(1000)
        except PlaywrightError as e:
            logger.info("description_expand_failed", error=str(e)[:200])

    async def _open_transcript_panel(self, page: Page) -> None:
        button = await locate(page, TRANSCRIPT_BUTTON, target="transcript_button")
        if not isinstance(button, NotFound):
            await click_with_fallback(button, target="transcript_button")
            logger.info("transcript_opened", path="direct")
            return

        logger.info("transcript_button_missing", fallback="overflow_menu")
        more_actions = await locate(page, MORE_ACTIONS_BUTTON, target="more_actions")
        if isinstance(more_actions, NotFound):
            raise ExtractionExhaustedError(
                "Transcript control not found (direct button and overflow menu both missing)"
            )
        await click_with_fallback(more_actions, target="more_actions")

        menu_item = await locate(page, TRANSCRIPT_MENU_ITEM, target="transcript_menu_item")
        if isinstance(menu_item, NotFound):
            raise ExtractionExhaustedError(
                "Transcript control not found (no transcript entry in overflow menu)"
            )
        await click_with_fallback(menu_item, target="transcript_menu_item")
        logger.info("transcript_opened", path="overflow_menu")

    async def _scrape_segments(self, page: Page) -> str:
        fragments: list[str] = await page.evaluate(
            _SCRAPE_SEGMENTS_JS,
            {
                "segmentSelectors": list(TRANSCRIPT_SEGMENT_SELECTORS),
                "textSelectors": list(TRANSCRIPT_TEXT_SELECTORS),
                "timestampSelectors": list(TRANSCRIPT_TIMESTAMP_SELECTORS),
            },
        )
        kept = [
            f.strip() for f in fragments if f and f.strip() and not is_timestamp_only(f)
        ]
        logger.info("transcript_segments_scraped", segments=len(fragments), kept=len(kept))
        return " ".join(kept)

    async def _log_page_content(self, page: Page) -> None:
        try:
            content = await page.content()
        except PlaywrightError:
            return
        logger.debug("page_content_at_error", content=content[:1000])
