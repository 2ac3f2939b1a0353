"""
Engine Configuration

Defaults for the browser session, retry/polling timings and endpoint
matching. Overrides are read from data/engine-config.json when present.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "data" / "engine-config.json"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class EngineConfig:
    """Engine settings. All durations are milliseconds."""

    # Browser
    headless: bool = True
    user_agent: str = USER_AGENT
    viewport: dict = field(default_factory=lambda: {"width": 1920, "height": 1080})
    proxy: Optional[str] = None

    # Navigation
    navigation_timeout_ms: int = 60000
    max_attempts: int = 3
    settle_ms: int = 3000
    backoff_ms: int = 2000

    # Completion detection
    max_wait_ms: int = 60000
    tick_ms: int = 1000
    stabilization_ms: int = 3000
    retrigger_every: int = 10

    # Overall deadline per search (None = no deadline)
    search_deadline_ms: Optional[int] = None

    # Target site
    base_url: str = "https://www.united.com"
    target_domain: str = "united.com"
    endpoint_name: str = "FetchFlights"
    api_path: str = "/api/"

    # Persistence
    save_responses: bool = False
    output_dir: str = "./flight_data"

    def replace(self, **overrides) -> EngineConfig:
        return dataclasses.replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        known = {f.name for f in dataclasses.fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


_config_cache: EngineConfig | None = None


def load_engine_config(path: str | Path | None = None) -> EngineConfig:
    """
    Load engine configuration.

    With no path, reads data/engine-config.json once and caches the result.
    A missing file yields the defaults; unknown keys are ignored.
    """
    global _config_cache
    if path is None and _config_cache is not None:
        return _config_cache

    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            config = EngineConfig.from_dict(json.load(f))
    else:
        config = EngineConfig()

    if path is None:
        _config_cache = config
    return config
