"""
Flight Search Engine

Owns the browser-session lifecycle and runs a search end to end:
stealth → interception → navigation (or form fallback) → completion →
normalization. The browser is closed on every exit path.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Optional

from .completion import CompletionDetector, retrigger_search
from .config import EngineConfig, load_engine_config
from .diagnostics import troubleshoot
from .driver import PageDriver, browser_session
from .errors import SessionBusyError
from .form import FormDriver
from .interception import InterceptionPipeline
from .navigation import navigate_with_retry
from .normalizer import normalize_session
from .schema import NormalizedResult, SearchParams
from .session import SearchSession
from .sink import CaptureSink
from .stealth import apply_stealth
from .timing import CancelToken, Clock

logger = logging.getLogger(__name__)

SessionFactory = Callable[[EngineConfig], AsyncContextManager[PageDriver]]


class FlightSearchEngine:
    """
    Search-and-capture engine for one target site.

    One search at a time per instance; a concurrent call raises
    SessionBusyError. Each search starts a fresh SearchSession, which stays
    readable through get_summary() until the next search or clear_data().
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        session_factory: Optional[SessionFactory] = None,
        clock: Optional[Clock] = None,
        sink: Optional[CaptureSink] = None,
    ):
        self.config = config or load_engine_config()
        self.session_factory = session_factory or browser_session
        self.clock = clock or Clock()
        if sink is None and self.config.save_responses:
            sink = CaptureSink(self.config.output_dir)
        self.sink = sink
        self.session = SearchSession()
        self._busy = False

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def search_by_url(
        self,
        url: str,
        log_requests: bool = False,
        filename: Optional[str] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> NormalizedResult:
        """Navigate to a search URL and return the normalized FetchFlights data."""
        logger.info("Navigating to: %s", url)
        async with self._search(url, log_requests, filename, cancel_token) as (page, token):
            await navigate_with_retry(
                page,
                url,
                max_attempts=self.config.max_attempts,
                timeout_ms=self.config.navigation_timeout_ms,
                settle_ms=self.config.settle_ms,
                backoff_ms=self.config.backoff_ms,
                clock=self.clock,
                token=token,
            )
            await self._await_completion(page, token)
        return normalize_session(self.session)

    async def search_by_form_interaction(
        self,
        params: SearchParams,
        log_requests: bool = False,
        filename: Optional[str] = None,
        cancel_token: Optional[CancelToken] = None,
    ) -> NormalizedResult:
        """Fill and submit the landing-page form, then capture as for URL search."""
        logger.info("Trying alternative form interaction method...")
        async with self._search(self.config.base_url, log_requests, filename, cancel_token) as (page, token):
            form = FormDriver(
                page,
                self.config.base_url,
                clock=self.clock,
                navigation_timeout_ms=self.config.navigation_timeout_ms,
                settle_ms=self.config.settle_ms,
            )
            await form.run(params, token)
            await self._await_completion(page, token)
        return normalize_session(self.session)

    def clear_data(self) -> None:
        """Drop captures and failures of the last search."""
        self.session = SearchSession()

    reset_session = clear_data

    def get_summary(self) -> dict:
        return self.session.summary()

    def get_troubleshooting_info(self) -> dict:
        return troubleshoot(self.get_summary())

    @property
    def is_busy(self) -> bool:
        return self._busy

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _search(
        self,
        url: str,
        log_requests: bool,
        filename: Optional[str],
        cancel_token: Optional[CancelToken],
    ) -> AsyncIterator[tuple[PageDriver, CancelToken]]:
        if self._busy:
            raise SessionBusyError("A search is already running on this engine")
        self._busy = True
        try:
            token = cancel_token or CancelToken(self.clock, self.config.search_deadline_ms)
            self.session = SearchSession(url=url)
            async with self.session_factory(self.config) as page:
                await apply_stealth(page, self.config)
                pipeline = InterceptionPipeline(
                    self.session,
                    self.config,
                    sink=self.sink,
                    log_requests=log_requests,
                    filename=filename,
                )
                await pipeline.install(page)
                yield page, token
        finally:
            self._busy = False

    async def _await_completion(self, page: PageDriver, token: CancelToken) -> None:
        detector = CompletionDetector(
            self.session,
            clock=self.clock,
            retrigger=lambda: retrigger_search(page, self.clock, token),
            tick_ms=self.config.tick_ms,
            stabilization_ms=self.config.stabilization_ms,
            retrigger_every=self.config.retrigger_every,
        )
        await detector.wait(self.config.max_wait_ms, token)
