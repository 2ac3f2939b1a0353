"""
Stealth Configuration

Anti-automation countermeasures applied to a fresh page before interception
is installed and before any navigation.
"""

from __future__ import annotations

from .config import EngineConfig
from .driver import PageDriver


STEALTH_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,"
        "image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Cache-Control": "max-age=0",
}

NAVIGATOR_OVERRIDES = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
"""


async def apply_stealth(page: PageDriver, config: EngineConfig) -> None:
    """Set user agent, header set, navigator overrides and desktop viewport."""
    await page.set_extra_headers({"User-Agent": config.user_agent, **STEALTH_HEADERS})
    await page.add_init_script(NAVIGATOR_OVERRIDES)
    await page.set_viewport(config.viewport["width"], config.viewport["height"])
