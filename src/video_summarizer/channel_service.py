"""Channel resolution via YouTube search."""

import re
from urllib.parse import quote_plus, urljoin

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.utils.logging import get_logger

from .backoff import BackoffPolicy
from .browser_session import BrowserSession
from .config import VideoSummarizerConfig
from .exceptions import NavigationError
from .locator import first_attribute, first_text
from .page_actions import dismiss_consent, navigate
from .rate_limiter import RateLimiter
from .schemas import ChannelRef
from .selectors import (
    CHANNEL_CARD_LINK,
    CHANNEL_CARD_NAME,
    CHANNEL_NAME,
    SEARCH_RESULT_CARD,
    SEARCH_RESULT_TIMEOUT_MS,
    YOUTUBE_BASE_URL,
    YOUTUBE_SEARCH_URL,
)

logger = get_logger(__name__)

CHANNEL_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.|m\.)?youtube\.com/"
    r"(?P<path>@[\w.-]+|channel/[\w-]+|c/[\w.-]+|user/[\w.-]+)",
    re.IGNORECASE,
)


def normalize_channel_url(value: str) -> str | None:
    """Canonical absolute channel URL if ``value`` is a channel URL, else None."""
    match = CHANNEL_URL_PATTERN.match(value.strip())
    if not match:
        return None
    return f"{YOUTUBE_BASE_URL}/{match.group('path')}"


def absolute_url(href: str) -> str:
    """Resolve a possibly relative YouTube link against the site origin."""
    return urljoin(YOUTUBE_BASE_URL + "/", href)


class ChannelService:
    """Service resolving free-form channel names to channel URLs.

    Uses the site search page and the resilient locator, so it keeps working
    when YouTube reshuffles its result-card markup.
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

    async def resolve(self, channel_input: str) -> ChannelRef | None:
        """Resolve a channel name or URL to a ChannelRef.

        Args:
            channel_input: Channel name, handle or URL as typed by the user.

        Returns:
            ChannelRef with an absolute URL, or None if the search produced
            neither a channel card nor a video card with a channel link.

        Raises:
            NavigationError: If the search page could not be loaded.
        """
        direct_url = normalize_channel_url(channel_input)
        if direct_url:
            logger.info("channel_input_is_url", url=direct_url)
            return ChannelRef(raw_input=channel_input, url=direct_url)

        search_url = f"{YOUTUBE_SEARCH_URL}?search_query={quote_plus(channel_input + ' channel')}"
        logger.info("channel_search_started", channel_input=channel_input, url=search_url)

        page = await self.session.acquire_page()
        try:
            await navigate(
                page,
                search_url,
                limiter=self.site_limiter,
                backoff=self.backoff,
                timeout_ms=self.config.navigation_timeout_ms,
            )
            await dismiss_consent(page)

            # Channel card or video card, whichever renders first
            try:
                await page.wait_for_selector(
                    SEARCH_RESULT_CARD, state="attached", timeout=SEARCH_RESULT_TIMEOUT_MS
                )
            except PlaywrightTimeoutError:
                logger.info("channel_search_no_results", channel_input=channel_input)
                return None

            href = await first_attribute(
                page, CHANNEL_CARD_LINK, "href", target="channel_link"
            )
            if not href:
                logger.info("channel_link_not_found", channel_input=channel_input)
                return None

            display_name = await first_text(page, CHANNEL_CARD_NAME, target="channel_card_name")
            channel = ChannelRef(
                raw_input=channel_input,
                url=absolute_url(href),
                display_name=display_name,
            )
            logger.info(
                "channel_resolved",
                channel_input=channel_input,
                url=channel.url,
                display_name=display_name,
            )
            return channel

        finally:
            await self.session.release_page(page)

    async def get_display_name(self, channel_url: str) -> str | None:
        """Read the channel's display name from its page.

        Absence of a name is not an error; callers fall back to the input.

        Args:
            channel_url: Absolute channel URL.

        Returns:
            Display name, or None if it could not be located.
        """
        page = await self.session.acquire_page()
        try:
            await navigate(
                page,
                channel_url,
                limiter=self.site_limiter,
                backoff=self.backoff,
                timeout_ms=self.config.navigation_timeout_ms,
            )
            await dismiss_consent(page)
            name = await first_text(page, CHANNEL_NAME, target="channel_name")
            logger.info("channel_name_resolved", url=channel_url, name=name)
            return name

        except (NavigationError, PlaywrightError) as e:
            logger.warning("channel_name_lookup_failed", url=channel_url, error=str(e)[:200])
            return None

        finally:
            await self.session.release_page(page)
