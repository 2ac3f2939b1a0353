"""
Navigation with Retry

Loads the search URL with bounded retries. The target keeps issuing API
calls long after the DOM is ready, so attempts wait for domcontentloaded
rather than network idle.
"""

from __future__ import annotations

import logging
from typing import Optional

from .driver import PageDriver
from .errors import NavigationError, SearchCancelledError
from .timing import CancelToken, Clock, bounded_timeout, pause

logger = logging.getLogger(__name__)

ERROR_TITLE_MARKER = "Error"


async def navigate_with_retry(
    page: PageDriver,
    url: str,
    max_attempts: int = 3,
    timeout_ms: int = 60000,
    settle_ms: int = 3000,
    backoff_ms: int = 2000,
    clock: Optional[Clock] = None,
    token: Optional[CancelToken] = None,
) -> str:
    """
    Navigate to `url`, retrying with linear backoff.

    An attempt fails if goto raises or the page title contains an error
    marker. Between attempts waits `backoff_ms * attempt`. Returns the page
    title on success; raises NavigationError once attempts are exhausted.
    """
    clock = clock or Clock()
    last_error = "unknown error"

    for attempt in range(1, max_attempts + 1):
        logger.info("Navigation attempt %d/%d", attempt, max_attempts)
        try:
            await page.goto(
                url, wait_until="domcontentloaded", timeout_ms=bounded_timeout(timeout_ms, token)
            )
            await pause(clock, settle_ms, token)

            title = await page.title()
            if ERROR_TITLE_MARKER not in (title or ""):
                logger.info("Page loaded successfully: %s", title)
                return title
            last_error = f"page title indicates an error: {title}"
            logger.warning("Navigation attempt %d: %s", attempt, last_error)
        except SearchCancelledError:
            raise
        except Exception as e:
            last_error = str(e) or e.__class__.__name__
            logger.warning("Navigation attempt %d failed: %s", attempt, last_error)

        if attempt < max_attempts:
            await pause(clock, backoff_ms * attempt, token)

    raise NavigationError(url, max_attempts, last_error)
