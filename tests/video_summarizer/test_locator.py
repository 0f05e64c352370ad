"""Unit tests for the resilient locator and shared page actions."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.video_summarizer.backoff import BackoffPolicy
from src.video_summarizer.exceptions import NavigationError
from src.video_summarizer.locator import (
    Candidate,
    NotFound,
    first_attribute,
    first_text,
    locate,
)
from src.video_summarizer.page_actions import (
    click_with_fallback,
    dismiss_consent,
    navigate,
)


def make_page(behaviour: dict[str, Exception | None]) -> tuple[MagicMock, dict[str, MagicMock]]:
    """Build a mock page whose locators hit or miss per selector.

    Args:
        behaviour: selector -> exception raised by wait_for, or None for a hit.

    Returns:
        The page mock and the element mock per selector.
    """
    elements: dict[str, MagicMock] = {}
    for selector, error in behaviour.items():
        element = MagicMock()
        element.wait_for = AsyncMock(side_effect=error)
        element.inner_text = AsyncMock(return_value=f"  text of {selector}  ")
        element.get_attribute = AsyncMock(return_value=f"/{selector}")
        wrapper = MagicMock()
        wrapper.first = element
        elements[selector] = wrapper

    page = MagicMock()
    page.locator = MagicMock(side_effect=lambda selector: elements[selector])
    return page, {s: w.first for s, w in elements.items()}


@pytest.mark.unit
class TestLocate:
    """Test suite for locate and its helpers."""

    @pytest.mark.asyncio
    async def test_second_candidate_hits_and_third_never_tried(self) -> None:
        """Test [A miss, B hit, C] returns B without evaluating C."""
        page, elements = make_page(
            {
                "a": PlaywrightTimeoutError("Timeout 2000ms exceeded"),
                "b": None,
                "c": None,
            }
        )
        candidates = (Candidate("a"), Candidate("b", 500), Candidate("c"))

        result = await locate(page, candidates, target="thing")

        assert result is elements["b"]
        assert [call.args[0] for call in page.locator.call_args_list] == ["a", "b"]
        elements["b"].wait_for.assert_awaited_once_with(state="visible", timeout=500)
        elements["c"].wait_for.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_miss_returns_not_found_with_attempts(self) -> None:
        """Test that a total miss is a falsy NotFound value, not an exception."""
        page, _ = make_page(
            {
                "a": PlaywrightTimeoutError("timeout"),
                "b": PlaywrightError("Target closed"),
            }
        )

        result = await locate(page, (Candidate("a"), Candidate("b")), target="panel")

        assert isinstance(result, NotFound)
        assert not result
        assert result.target == "panel"
        assert [a.outcome for a in result.attempts] == ["miss", "error"]
        assert "Target closed" in result.attempts[1].error

    @pytest.mark.asyncio
    async def test_first_text_strips(self) -> None:
        """Test first_text returns stripped inner text."""
        page, _ = make_page({"title": None})

        assert await first_text(page, (Candidate("title"),), target="title") == "text of title"

    @pytest.mark.asyncio
    async def test_first_attribute_none_on_miss(self) -> None:
        """Test first_attribute returns None when nothing is visible."""
        page, _ = make_page({"link": PlaywrightTimeoutError("timeout")})

        result = await first_attribute(page, (Candidate("link"),), "href", target="link")

        assert result is None


@pytest.mark.unit
class TestPageActions:
    """Test suite for navigation, consent and click helpers."""

    @pytest.fixture
    def limiter(self) -> MagicMock:
        limiter = MagicMock()
        limiter.admit = AsyncMock(return_value=0.0)
        return limiter

    @pytest.mark.asyncio
    async def test_navigate_retries_and_admits_each_attempt(self, limiter: MagicMock) -> None:
        """Test that a failed goto is retried through the backoff policy."""
        page = MagicMock()
        page.goto = AsyncMock(side_effect=[PlaywrightError("net::ERR_ABORTED"), None])
        page.wait_for_load_state = AsyncMock()
        backoff = BackoffPolicy(max_retries=3, base_delay=2.0, sleep=AsyncMock())

        await navigate(
            page,
            "https://www.youtube.com/@veritasium/videos",
            limiter=limiter,
            backoff=backoff,
            timeout_ms=30000,
        )

        assert page.goto.await_count == 2
        assert limiter.admit.await_count == 2
        page.wait_for_load_state.assert_awaited_once_with("networkidle", timeout=10000)

    @pytest.mark.asyncio
    async def test_navigate_raises_navigation_error_after_ceiling(
        self, limiter: MagicMock
    ) -> None:
        """Test that persistent failures surface as NavigationError."""
        page = MagicMock()
        page.goto = AsyncMock(side_effect=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
        backoff = BackoffPolicy(max_retries=1, base_delay=1.0, sleep=AsyncMock())

        with pytest.raises(NavigationError):
            await navigate(
                page, "https://www.youtube.com", limiter=limiter, backoff=backoff, timeout_ms=1
            )

        assert page.goto.await_count == 2

    @pytest.mark.asyncio
    async def test_dismiss_consent_absent(self) -> None:
        """Test that a missing consent dialog is not an error."""
        page = MagicMock()
        with patch(
            "src.video_summarizer.page_actions.locate",
            AsyncMock(return_value=NotFound(target="consent_button")),
        ):
            assert await dismiss_consent(page) is False

    @pytest.mark.asyncio
    async def test_dismiss_consent_clicks(self) -> None:
        """Test that a visible consent button is clicked."""
        page = MagicMock()
        page.wait_for_timeout = AsyncMock()
        button = MagicMock()
        button.click = AsyncMock()
        with patch("src.video_summarizer.page_actions.locate", AsyncMock(return_value=button)):
            assert await dismiss_consent(page) is True

        button.click.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_click_falls_back_to_programmatic_click(self) -> None:
        """Test the programmatic click when the native click is rejected."""
        element = MagicMock()
        element.click = AsyncMock(side_effect=PlaywrightError("element is not visible"))
        element.evaluate = AsyncMock()

        await click_with_fallback(element, target="transcript_button")

        element.evaluate.assert_awaited_once_with("el => el.click()")
