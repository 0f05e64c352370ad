"""Latest-video lookup on a channel's video listing."""

from urllib.parse import parse_qs, urlparse

from src.utils.logging import get_logger

from .backoff import BackoffPolicy
from .browser_session import BrowserSession
from .channel_service import absolute_url
from .config import VideoSummarizerConfig
from .locator import NotFound, first_attribute, first_text, locate
from .page_actions import dismiss_consent, navigate
from .rate_limiter import RateLimiter
from .schemas import VideoRef
from .selectors import VIDEO_GRID, VIDEO_GRID_ITEM, VIDEO_LINK, VIDEO_TITLE

logger = get_logger(__name__)

LAZY_LOAD_SCROLL_PX = 500


def video_id_from_url(url: str) -> str:
    """Extract the video ID from a watch, short or youtu.be URL.

    Returns:
        The video ID, or an empty string if the URL carries none.
    """
    parsed = urlparse(absolute_url(url))
    video_ids = parse_qs(parsed.query).get("v")
    if video_ids:
        return video_ids[0]

    host = parsed.netloc.lower()
    parts = [p for p in parsed.path.split("/") if p]
    if host.endswith("youtu.be") and parts:
        return parts[0]
    if len(parts) >= 2 and parts[0] in ("shorts", "live", "embed"):
        return parts[1]
    return ""


def videos_tab_url(channel_url: str) -> str:
    if urlparse(channel_url).path.rstrip("/").split("/")[-1] == "videos":
        return channel_url
    return channel_url.rstrip("/") + "/videos"


class VideoService:
    """Service reading the most recent upload from a channel."""

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

    async def latest(self, channel_url: str) -> VideoRef | None:
        """Return the first video in the channel's video grid.

        Args:
            channel_url: Absolute channel URL.

        Returns:
            VideoRef, or None if the grid is empty or the first item lacks a
            title or a link. Partial results are never returned.

        Raises:
            NavigationError: If the listing page could not be loaded.
        """
        url = videos_tab_url(channel_url)
        logger.info("latest_video_lookup_started", url=url)

        page = await self.session.acquire_page()
        try:
            await navigate(
                page,
                url,
                limiter=self.site_limiter,
                backoff=self.backoff,
                timeout_ms=self.config.navigation_timeout_ms,
            )
            await dismiss_consent(page)

            grid = await locate(page, VIDEO_GRID, target="video_grid")
            if isinstance(grid, NotFound):
                logger.warning("video_grid_not_found", url=url)
                return None

            # One scroll so lazily rendered rows are attached
            await page.wait_for_timeout(2000)
            await page.mouse.wheel(0, LAZY_LOAD_SCROLL_PX)
            await page.wait_for_timeout(1500)

            items = page.locator(VIDEO_GRID_ITEM)
            count = await items.count()
            logger.info("video_grid_loaded", url=url, items=count)
            if count == 0:
                return None

            first_item = items.first
            title = await first_text(first_item, VIDEO_TITLE, target="video_title")
            href = await first_attribute(first_item, VIDEO_LINK, "href", target="video_link")
            if not title or not href:
                logger.warning(
                    "video_details_incomplete",
                    url=url,
                    has_title=bool(title),
                    has_link=bool(href),
                )
                return None

            video_url = absolute_url(href)
            video = VideoRef(id=video_id_from_url(video_url), title=title, url=video_url)
            logger.info("latest_video_found", video_id=video.id, title=video.title)
            return video

        finally:
            await self.session.release_page(page)
