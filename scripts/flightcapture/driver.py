"""
Browser Driver

The narrow page interface the engine talks to, its Playwright implementation,
and the browser session context manager that always closes the browser.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from .config import EngineConfig


# Chromium flags. HTTP/2 is disabled because the target site answers
# automated HTTP/2 sessions with ERR_HTTP2_PROTOCOL_ERROR.
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-features=VizDisplayCompositor",
    "--disable-http2",
    "--disable-dev-shm-usage",
]


@dataclass
class ObservedRequest:
    """An outbound or failed request as seen by the observers."""

    url: str
    method: str = "GET"
    headers: dict = field(default_factory=dict)
    post_data: Optional[str] = None
    failure: Optional[str] = None


@dataclass
class ObservedResponse:
    """An inbound response; `body` reads the response text on demand."""

    url: str
    status: int
    headers: dict
    body: Callable[[], Awaitable[str]]


RequestHandler = Callable[[ObservedRequest], Awaitable[Optional[dict]]]
ResponseHandler = Callable[[ObservedResponse], Awaitable[None]]
FailureHandler = Callable[[ObservedRequest], Any]


def merge_headers(base: dict, extra: dict) -> dict:
    """Overlay `extra` on `base`, matching header names case-insensitively."""
    merged = {k.lower(): v for k, v in base.items()}
    merged.update({k.lower(): v for k, v in extra.items()})
    return merged


class PageDriver(ABC):
    """
    Capabilities the engine needs from a browser page.

    Element handles returned by query_selector / query_selector_all must
    support `await el.click()`, `await el.inner_text()` and
    `await el.is_visible()`.
    """

    @abstractmethod
    async def goto(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: int = 60000) -> None:
        ...

    @abstractmethod
    async def title(self) -> str:
        ...

    @abstractmethod
    async def set_extra_headers(self, headers: dict) -> None:
        ...

    @abstractmethod
    async def add_init_script(self, script: str) -> None:
        ...

    @abstractmethod
    async def set_viewport(self, width: int, height: int) -> None:
        ...

    @abstractmethod
    async def route_requests(self, handler: RequestHandler) -> None:
        """
        Route every outbound request through `handler`.

        The handler returns extra headers to merge into the request, or None
        to let it continue unchanged. Every request continues either way.
        """

    @abstractmethod
    def on_response(self, handler: ResponseHandler) -> None:
        ...

    @abstractmethod
    def on_request_failed(self, handler: FailureHandler) -> None:
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int = 5000) -> None:
        ...

    @abstractmethod
    async def query_selector(self, selector: str):
        ...

    @abstractmethod
    async def query_selector_all(self, selector: str) -> list:
        ...

    @abstractmethod
    async def click(self, selector: str) -> None:
        ...

    @abstractmethod
    async def type(self, selector: str, text: str, delay_ms: int = 100) -> None:
        ...

    @abstractmethod
    async def press(self, key: str) -> None:
        ...


class PlaywrightPageDriver(PageDriver):
    """PageDriver over a playwright.async_api.Page."""

    def __init__(self, page):
        self.page = page

    async def goto(self, url: str, wait_until: str = "domcontentloaded", timeout_ms: int = 60000) -> None:
        await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def title(self) -> str:
        return await self.page.title()

    async def set_extra_headers(self, headers: dict) -> None:
        await self.page.set_extra_http_headers(headers)

    async def add_init_script(self, script: str) -> None:
        await self.page.add_init_script(script)

    async def set_viewport(self, width: int, height: int) -> None:
        await self.page.set_viewport_size({"width": width, "height": height})

    async def route_requests(self, handler: RequestHandler) -> None:
        async def _route(route):
            request = route.request
            extra = await handler(ObservedRequest(
                url=request.url,
                method=request.method,
                headers=request.headers,
                post_data=request.post_data,
            ))
            if extra:
                await route.continue_(headers=merge_headers(request.headers, extra))
            else:
                await route.continue_()

        await self.page.route("**/*", _route)

    def on_response(self, handler: ResponseHandler) -> None:
        async def _on_response(response):
            await handler(ObservedResponse(
                url=response.url,
                status=response.status,
                headers=response.headers,
                body=response.text,
            ))

        self.page.on("response", _on_response)

    def on_request_failed(self, handler: FailureHandler) -> None:
        def _on_failed(request):
            handler(ObservedRequest(
                url=request.url,
                method=request.method,
                failure=request.failure,
            ))

        self.page.on("requestfailed", _on_failed)

    async def wait_for_selector(self, selector: str, timeout_ms: int = 5000) -> None:
        await self.page.wait_for_selector(selector, timeout=timeout_ms)

    async def query_selector(self, selector: str):
        return await self.page.query_selector(selector)

    async def query_selector_all(self, selector: str) -> list:
        return await self.page.query_selector_all(selector)

    async def click(self, selector: str) -> None:
        await self.page.click(selector)

    async def type(self, selector: str, text: str, delay_ms: int = 100) -> None:
        await self.page.type(selector, text, delay=delay_ms)

    async def press(self, key: str) -> None:
        await self.page.keyboard.press(key)


@asynccontextmanager
async def browser_session(config: EngineConfig) -> AsyncIterator[PageDriver]:
    """
    Launch Chromium, open one page and yield it as a PageDriver.

    The browser is closed on every exit path, including task cancellation.
    """
    from playwright.async_api import async_playwright

    launch_options: dict[str, Any] = {
        "headless": config.headless,
        "args": LAUNCH_ARGS + [f"--user-agent={config.user_agent}"],
    }
    if config.proxy:
        launch_options["proxy"] = {"server": config.proxy}

    async with async_playwright() as p:
        browser = await p.chromium.launch(**launch_options)
        try:
            context = await browser.new_context(
                viewport=config.viewport,
                user_agent=config.user_agent,
                device_scale_factor=1,
                is_mobile=False,
                has_touch=False,
            )
            page = await context.new_page()
            yield PlaywrightPageDriver(page)
        finally:
            await browser.close()
