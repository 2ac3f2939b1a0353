"""
Form Interaction Fallback

Fills the landing-page search form field by field with humanlike delays and
submits it. Used when URL navigation does not yield FetchFlights data; the
interception observers installed on the page capture the results as usual.
"""

from __future__ import annotations

import logging
from typing import Optional

from .driver import PageDriver
from .errors import FormInteractionError, SearchCancelledError
from .schema import SearchParams
from .timing import CancelToken, Clock, bounded_timeout, pause

logger = logging.getLogger(__name__)

FORM_READY_SELECTOR = 'input[placeholder*="From"], #origin'

FIELD_SELECTORS = {
    "origin": [
        'input[placeholder*="From"]',
        "#origin",
        '[data-test-id="origin"] input',
    ],
    "destination": [
        'input[placeholder*="To"]',
        "#destination",
        '[data-test-id="destination"] input',
    ],
    "departure date": [
        'input[placeholder*="Depart"]',
        "#departDate",
        '[data-test-id="departure-date"] input',
    ],
    "return date": [
        'input[placeholder*="Return"]',
        "#returnDate",
        '[data-test-id="return-date"] input',
    ],
}

SUBMIT_SELECTORS = [
    'button[type="submit"]',
    '[data-test-id="search-button"]',
    'button:has-text("Search")',
    ".search-button",
    "button.btn-primary",
    '[aria-label*="Search"]',
]


class FormDriver:
    """Drives the landing-page search form."""

    def __init__(
        self,
        page: PageDriver,
        base_url: str,
        clock: Optional[Clock] = None,
        navigation_timeout_ms: int = 60000,
        settle_ms: int = 3000,
        keystroke_delay_ms: int = 100,
    ):
        self.page = page
        self.base_url = base_url
        self.clock = clock or Clock()
        self.navigation_timeout_ms = navigation_timeout_ms
        self.settle_ms = settle_ms
        self.keystroke_delay_ms = keystroke_delay_ms

    async def run(self, params: SearchParams, token: Optional[CancelToken] = None) -> None:
        """Open the landing page, fill the form and submit it."""
        timeout_ms = bounded_timeout(self.navigation_timeout_ms, token)
        try:
            await self.page.goto(self.base_url, wait_until="domcontentloaded", timeout_ms=timeout_ms)
        except Exception as e:
            raise FormInteractionError("landing page", str(e)) from e
        await pause(self.clock, self.settle_ms, token)

        await self.fill(params, token)
        await self.submit(token)

    async def fill(self, params: SearchParams, token: Optional[CancelToken] = None) -> None:
        logger.info("Manually filling search form...")
        timeout_ms = bounded_timeout(10000, token)
        try:
            await self.page.wait_for_selector(FORM_READY_SELECTOR, timeout_ms=timeout_ms)
        except Exception as e:
            raise FormInteractionError("form ready", f"search form did not render: {e}") from e

        if not await self._fill_field("origin", params.origin, token):
            raise FormInteractionError("origin", "no origin input matched")
        if not await self._fill_field("destination", params.destination, token):
            raise FormInteractionError("destination", "no destination input matched")

        if params.depart_date:
            if not await self._fill_field("departure date", params.depart_date, token, clear=True):
                logger.warning("Could not fill departure date")
        if params.return_date:
            if not await self._fill_field("return date", params.return_date, token, clear=True):
                logger.warning("Could not fill return date")

        logger.info("Search form filled manually")

    async def _fill_field(
        self,
        field: str,
        value: str,
        token: Optional[CancelToken] = None,
        clear: bool = False,
    ) -> bool:
        """Try each selector candidate for `field` until one accepts the value."""
        for selector in FIELD_SELECTORS[field]:
            try:
                await self.page.wait_for_selector(selector, timeout_ms=bounded_timeout(5000, token))
                await self.page.click(selector)
                await pause(self.clock, 500, token)
                if clear:
                    await self.page.press("Control+A")
                await self.page.type(selector, value, delay_ms=self.keystroke_delay_ms)
                await pause(self.clock, 1000, token)
                await self.page.press("Tab")
                logger.info("Filled %s: %s via %s", field, value, selector)
                return True
            except SearchCancelledError:
                raise
            except Exception as e:
                logger.warning("Could not fill %s via %s: %s", field, selector, e)
                continue
        return False

    async def submit(self, token: Optional[CancelToken] = None) -> str:
        """Click the first submit control found, else press Enter. Returns the method used."""
        logger.info("Submitting search manually...")
        for selector in SUBMIT_SELECTORS:
            try:
                button = await self.page.query_selector(selector)
                if button is None:
                    continue
                await button.click()
            except Exception:
                continue
            logger.info("Search submitted using selector: %s", selector)
            await pause(self.clock, 3000, token)
            return selector

        try:
            await self.page.press("Enter")
        except Exception as e:
            raise FormInteractionError("submit", f"no submit control and Enter failed: {e}") from e
        logger.info("Search submitted via Enter key")
        await pause(self.clock, 3000, token)
        return "Enter"
