"""Resilient element location over ordered selector candidates.

The target UI ships several markup variants at once, so every lookup is
expressed as "first visible match among N strategies" rather than a single
selector. A total miss is a value (``NotFound``), not an exception, so callers
decide whether it is fatal or a trigger for an alternate path.
"""

from dataclasses import dataclass, field
from typing import Literal

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.utils.logging import get_logger

logger = get_logger(__name__)

Outcome = Literal["hit", "miss", "error"]


@dataclass(frozen=True)
class Candidate:
    """One selector strategy and how long to wait for it to become visible."""

    selector: str
    timeout_ms: int = 2000


@dataclass(frozen=True)
class ExtractionAttempt:
    """Diagnostic record of one strategy trial."""

    selector: str
    outcome: Outcome
    error: str | None = None


@dataclass(frozen=True)
class NotFound:
    """Result of a lookup where every candidate missed."""

    target: str
    attempts: tuple[ExtractionAttempt, ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return False


async def locate(
    scope: Page | Locator,
    candidates: tuple[Candidate, ...] | list[Candidate],
    *,
    target: str,
) -> Locator | NotFound:
    """Return the first candidate element that becomes visible.

    Candidates are tried strictly in order; later candidates are never
    evaluated once one hits.

    Args:
        scope: Page or element to search within.
        candidates: Ordered selector strategies.
        target: Semantic name of what is being located, for logs.

    Returns:
        The matching Locator, or NotFound if every candidate missed.
    """
    attempts: list[ExtractionAttempt] = []

    for candidate in candidates:
        element = scope.locator(candidate.selector).first
        try:
            await element.wait_for(state="visible", timeout=candidate.timeout_ms)
        except PlaywrightTimeoutError:
            attempts.append(ExtractionAttempt(candidate.selector, "miss"))
            logger.debug("locator_miss", target=target, selector=candidate.selector)
            continue
        except PlaywrightError as e:
            attempts.append(ExtractionAttempt(candidate.selector, "error", str(e)[:200]))
            logger.debug(
                "locator_error",
                target=target,
                selector=candidate.selector,
                error=str(e)[:200],
            )
            continue

        logger.debug(
            "locator_hit",
            target=target,
            selector=candidate.selector,
            misses=len(attempts),
        )
        return element

    logger.info("locator_exhausted", target=target, attempts=len(attempts))
    return NotFound(target=target, attempts=tuple(attempts))


async def first_text(
    scope: Page | Locator,
    candidates: tuple[Candidate, ...] | list[Candidate],
    *,
    target: str,
) -> str | None:
    """Stripped inner text of the first visible candidate, or None."""
    element = await locate(scope, candidates, target=target)
    if isinstance(element, NotFound):
        return None
    text = (await element.inner_text()).strip()
    return text or None


async def first_attribute(
    scope: Page | Locator,
    candidates: tuple[Candidate, ...] | list[Candidate],
    attribute: str,
    *,
    target: str,
) -> str | None:
    """Attribute value of the first visible candidate, or None."""
    element = await locate(scope, candidates, target=target)
    if isinstance(element, NotFound):
        return None
    value = await element.get_attribute(attribute)
    return value.strip() if value else None
