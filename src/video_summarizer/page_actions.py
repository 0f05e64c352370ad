"""Page actions shared by the channel, video and transcript services."""

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from src.utils.logging import get_logger

from .backoff import BackoffPolicy
from .exceptions import NavigationError
from .locator import NotFound, locate
from .rate_limiter import RateLimiter
from .selectors import CONSENT_BUTTON

logger = get_logger(__name__)

NETWORK_IDLE_TIMEOUT_MS = 10000


async def _goto(page: Page, url: str, timeout_ms: int) -> None:
    try:
        await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
    except PlaywrightError as e:
        logger.warning("navigation_attempt_failed", url=url, error=str(e)[:200])
        raise NavigationError(f"Navigation to {url} failed: {e}") from e

    try:
        await page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
    except PlaywrightError:
        logger.debug("network_idle_timeout", url=url)


async def navigate(
    page: Page,
    url: str,
    *,
    limiter: RateLimiter,
    backoff: BackoffPolicy,
    timeout_ms: int,
) -> None:
    """Navigate with site throttling and retry on navigation failures.

    Args:
        page: Page to navigate.
        url: Absolute target URL.
        limiter: Site request limiter; admits every attempt.
        backoff: Retry policy for transient navigation failures.
        timeout_ms: Per-attempt navigation timeout.

    Raises:
        NavigationError: If every attempt failed.
    """
    logger.info("navigation_started", url=url)

    async def attempt() -> None:
        await limiter.admit()
        await _goto(page, url, timeout_ms)

    await backoff.run(attempt, retry_on=(NavigationError,))
    logger.debug("navigation_completed", url=url)


async def dismiss_consent(page: Page) -> bool:
    """Accept the cookie consent dialog if one is shown.

    Best-effort: a missing dialog or a failed click is logged and ignored.

    Returns:
        True if a consent button was clicked.
    """
    button = await locate(page, CONSENT_BUTTON, target="consent_button")
    if isinstance(button, NotFound):
        logger.debug("consent_dialog_absent")
        return False

    try:
        await button.click()
        await page.wait_for_timeout(1000)
    except PlaywrightError as e:
        logger.info("consent_dismiss_failed", error=str(e)[:200])
        return False

    logger.info("consent_dismissed")
    return True


async def click_with_fallback(element: Locator, *, target: str) -> None:
    """Click natively, falling back to a programmatic DOM click.

    Overlays and animations regularly make YouTube reject native clicks even
    though the element is visible.
    """
    try:
        await element.click(timeout=5000)
    except PlaywrightError as e:
        logger.debug("native_click_rejected", target=target, error=str(e)[:200])
        await element.evaluate("el => el.click()")
