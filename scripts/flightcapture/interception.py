"""
Interception Pipeline

Observes the page's network traffic: enriches outgoing API requests with the
headers an in-page XHR would carry, captures qualifying FetchFlights
responses into the session, and records failed API requests.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from .config import EngineConfig
from .driver import ObservedRequest, ObservedResponse, PageDriver
from .errors import PayloadParseError
from .schema import CapturedResponse, FailedRequestRecord, utc_timestamp
from .session import SearchSession
from .sink import CaptureSink

logger = logging.getLogger(__name__)


def is_qualifying_url(url: str, config: EngineConfig) -> bool:
    """True for the flight-pricing data call."""
    return config.endpoint_name in url or (
        config.api_path in url and config.target_domain in url
    )


def api_request_headers(config: EngineConfig) -> dict:
    """Headers that make an API request look like a same-origin XHR."""
    origin = config.base_url.rstrip("/")
    return {
        "Referer": f"{origin}/",
        "Origin": origin,
        "X-Requested-With": "XMLHttpRequest",
        "Accept": "application/json, text/plain, */*",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }


class InterceptionPipeline:
    """
    Network observers for one search session.

    `on_capture` / `on_failure` default to the session's recorders. The
    observers run as coroutines on the page's event loop, so captures are
    appended in response-arrival order.
    """

    def __init__(
        self,
        session: SearchSession,
        config: EngineConfig,
        sink: Optional[CaptureSink] = None,
        log_requests: bool = False,
        filename: Optional[str] = None,
        on_capture: Optional[Callable[[CapturedResponse], None]] = None,
        on_failure: Optional[Callable[[FailedRequestRecord], None]] = None,
    ):
        self.session = session
        self.config = config
        self.sink = sink
        self.log_requests = log_requests
        self.filename = filename
        self.on_capture = on_capture or session.record_capture
        self.on_failure = on_failure or session.record_failure
        self.request_count = 0
        self._extra_headers = api_request_headers(config)

    async def install(self, page: PageDriver) -> None:
        await page.route_requests(self.handle_request)
        page.on_response(self.handle_response)
        page.on_request_failed(self.handle_request_failed)

    async def handle_request(self, request: ObservedRequest) -> Optional[dict]:
        url = request.url

        if self.config.endpoint_name in url:
            self.request_count += 1
            logger.info("Request %d to %s: %s", self.request_count, self.config.endpoint_name, url)
            if self.log_requests and request.post_data:
                logger.info("Request payload: %s", request.post_data)

        if self.config.api_path in url:
            return dict(self._extra_headers)
        return None

    def handle_request_failed(self, request: ObservedRequest) -> None:
        url = request.url
        if self.config.api_path not in url and self.config.endpoint_name not in url:
            return

        reason = request.failure or "Unknown error"
        logger.warning("Request failed: %s (%s)", url, reason)
        self.on_failure(FailedRequestRecord(url=url, error=reason, timestamp=utc_timestamp()))

    async def handle_response(self, response: ObservedResponse) -> None:
        url = response.url
        status = response.status

        if self.config.api_path in url:
            logger.debug("API Response: %s - %s", status, url)

        if not is_qualifying_url(url, self.config):
            return

        if status != 200:
            logger.warning("%s returned status %s for %s", self.config.endpoint_name, status, url)
            return

        try:
            body = await response.body()
        except Exception as e:
            logger.warning("Could not read response body from %s: %s", url, e)
            return

        if not body or not body.strip():
            logger.warning("Empty response from %s: %s", self.config.endpoint_name, url)
            return

        try:
            data = json.loads(body)
        except ValueError as e:
            error = PayloadParseError(url, str(e))
            logger.warning("%s; partial response: %s...", error, body[:200])
            return

        capture = CapturedResponse(
            url=url,
            timestamp=utc_timestamp(),
            status=status,
            headers=dict(response.headers or {}),
            data=data,
            size=len(body),
        )
        self.on_capture(capture)
        logger.info(
            "Intercepted %s response: %s (%.2fKB)",
            self.config.endpoint_name, status, capture.size / 1024,
        )

        if self.sink is not None:
            self.sink.save(capture, self.filename)
