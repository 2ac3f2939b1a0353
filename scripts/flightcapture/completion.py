"""
Completion Detection

Polls the session's capture channel until the stream of FetchFlights
responses has stabilized, the time budget runs out, or the search is
cancelled. Every few ticks it checks the page and re-clicks the search
control if the search never fired.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from .driver import PageDriver
from .errors import EmptyCaptureError
from .session import SearchSession
from .timing import CancelToken, Clock, pause

logger = logging.getLogger(__name__)

ERROR_SELECTOR = '[data-test="error-message"], .error-message, .alert-error'
SEARCH_BUTTON_SELECTOR = '[data-test-id="search-button"], button[type="submit"]'


@dataclass
class CompletionOutcome:
    captures: int
    elapsed_ms: float
    stabilized: bool


async def retrigger_search(
    page: PageDriver,
    clock: Optional[Clock] = None,
    token: Optional[CancelToken] = None,
) -> bool:
    """
    Log on-page error messages and click a still-visible search button.

    Returns True if the search button was clicked. Page errors are logged,
    never raised.
    """
    clock = clock or Clock()
    try:
        error_elements = await page.query_selector_all(ERROR_SELECTOR)
        if error_elements:
            logger.warning("Error messages detected on page")
            for element in error_elements:
                try:
                    logger.warning("   Error: %s", (await element.inner_text()).strip())
                except Exception:
                    continue

        button = await page.query_selector(SEARCH_BUTTON_SELECTOR)
        if button is None or not await button.is_visible():
            return False

        logger.info("Search button still visible, attempting to retrigger search...")
        try:
            await button.click()
        except Exception as e:
            logger.warning("Could not click search button: %s", e)
            return False
    except Exception as e:
        logger.warning("Error checking page state: %s", e)
        return False

    await pause(clock, 2000, token)
    logger.info("Search retriggered")
    return True


class CompletionDetector:
    """
    Decides when data collection for a session is complete.

    Completion is declared once at least one capture exists and the count
    has not grown for `stabilization_ms`, measured from the tick that first
    saw the latest growth.
    """

    def __init__(
        self,
        session: SearchSession,
        clock: Optional[Clock] = None,
        retrigger: Optional[Callable[[], Awaitable[object]]] = None,
        tick_ms: int = 1000,
        stabilization_ms: int = 3000,
        retrigger_every: int = 10,
    ):
        self.session = session
        self.clock = clock or Clock()
        self.retrigger = retrigger
        self.tick_ms = tick_ms
        self.stabilization_ms = stabilization_ms
        self.retrigger_every = retrigger_every

    async def wait(self, max_wait_ms: int = 60000, token: Optional[CancelToken] = None) -> CompletionOutcome:
        logger.info("Waiting for flight search results...")
        channel = self.session.captures
        start = self.clock.now_ms()
        last_count = 0
        last_growth_at = start
        ticks = 0

        while self.clock.now_ms() - start < max_wait_ms:
            now = self.clock.now_ms()
            count = len(channel)

            if count > last_count:
                last_count = count
                last_growth_at = now
                logger.info("Received %d API response(s)", count)
            elif count > 0 and now - last_growth_at >= self.stabilization_ms:
                logger.info("Flight data collection completed")
                return CompletionOutcome(count, now - start, stabilized=True)

            ticks += 1
            if self.retrigger is not None and ticks % self.retrigger_every == 0:
                await self.retrigger()

            await pause(self.clock, self.tick_ms, token)

        elapsed = self.clock.now_ms() - start
        failures = self.session.failures
        if failures:
            logger.warning("%d failed requests detected:", len(failures))
            for record in failures:
                logger.warning("   - %s: %s", record.url, record.error)

        if len(channel) == 0:
            raise EmptyCaptureError(self.session.url, elapsed, failures)

        logger.warning(
            "Capture count never stabilized within %.0fs; using %d response(s)",
            max_wait_ms / 1000, len(channel),
        )
        return CompletionOutcome(len(channel), elapsed, stabilized=False)
