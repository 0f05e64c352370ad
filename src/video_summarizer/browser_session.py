"""Browser session owning the single Playwright Chromium process."""

import asyncio

from playwright.async_api import (
    Browser,
    ConsoleMessage,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError

from src.utils.logging import get_logger

from .config import VideoSummarizerConfig

logger = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
)
VIEWPORT = {"width": 1920, "height": 1080}
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--disable-gpu",
]


class BrowserSession:
    """Lazily launched browser shared by every extraction step.

    At most one browser process exists per session. Each acquired page lives
    in its own browser context so cookies and DOM state never leak between
    steps. The process is only torn down by an explicit ``close()``.
    """

    def __init__(self, config: VideoSummarizerConfig):
        """Initialize the session without launching anything.

        Args:
            config: Configuration with headless flag and navigation timeout.
        """
        self.config = config
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._pages: set[Page] = set()
        self._launch_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """Whether a browser process is currently alive."""
        return self._browser is not None

    @property
    def open_pages(self) -> int:
        return len(self._pages)

    async def _get_browser(self) -> Browser:
        async with self._launch_lock:
            if self._browser is None:
                logger.info("browser_launch_started", headless=self.config.browser_headless)
                self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.browser_headless,
                    args=LAUNCH_ARGS,
                )
                logger.info("browser_launch_completed")
            return self._browser

    async def acquire_page(self) -> Page:
        """Open a fresh, isolated page on the shared browser.

        Returns:
            A Playwright page with the default timeout, user agent and
            logging hooks applied.
        """
        browser = await self._get_browser()
        context = await browser.new_context(user_agent=USER_AGENT, viewport=VIEWPORT)
        page = await context.new_page()
        page.set_default_timeout(self.config.navigation_timeout_ms)

        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

        self._pages.add(page)
        logger.debug("page_acquired", open_pages=self.open_pages)
        return page

    @staticmethod
    def _on_console(message: ConsoleMessage) -> None:
        if message.type in ("error", "warning"):
            logger.debug("browser_console", type=message.type, text=message.text)

    @staticmethod
    def _on_page_error(error: PlaywrightError) -> None:
        logger.error("browser_page_error", error=str(error))

    async def release_page(self, page: Page) -> None:
        """Close a page together with its context. Never raises."""
        self._pages.discard(page)
        try:
            await page.context.close()
        except PlaywrightError as e:
            logger.debug("page_release_failed", error=str(e))
        logger.debug("page_released", open_pages=self.open_pages)

    async def close(self) -> None:
        """Terminate the browser process. Safe to call repeatedly."""
        if self._browser is None and self._playwright is None:
            return

        logger.info("browser_close_started", open_pages=self.open_pages)
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        self._pages.clear()

        try:
            if browser is not None:
                await browser.close()
        except PlaywrightError as e:
            logger.warning("browser_close_failed", error=str(e))
        finally:
            if playwright is not None:
                await playwright.stop()

        logger.info("browser_close_completed")
