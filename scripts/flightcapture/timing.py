"""
Timing and Cancellation

Every wait in the engine goes through a Clock so tests can run on virtual
time, and through pause() so a CancelToken can stop a search at the next
suspension point.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from .errors import SearchCancelledError


class Clock:
    """Monotonic clock in milliseconds backed by the event loop."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000

    async def wait(self, ms: float) -> None:
        await asyncio.sleep(max(ms, 0) / 1000)


class CancelToken:
    """
    Cooperative cancellation for one search.

    Cancelled explicitly via cancel(), or implicitly once `deadline_ms`
    (measured on `clock` from construction) has elapsed.
    """

    def __init__(self, clock: Optional[Clock] = None, deadline_ms: Optional[float] = None):
        self.clock = clock or Clock()
        self._deadline = self.clock.now_ms() + deadline_ms if deadline_ms is not None else None
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        if self._reason is not None:
            return True
        if self._deadline is not None and self.clock.now_ms() >= self._deadline:
            self._reason = "deadline exceeded"
            return True
        return False

    def remaining_ms(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(self._deadline - self.clock.now_ms(), 0)

    def check(self) -> None:
        """Raise SearchCancelledError if the token is cancelled."""
        if self.cancelled:
            raise SearchCancelledError(self._reason or "cancelled")


def bounded_timeout(timeout_ms: int, token: Optional[CancelToken] = None) -> int:
    """
    Clamp a browser-side timeout to the token's remaining time.

    Raises SearchCancelledError if the token is already cancelled. Never
    returns 0, which Playwright reads as "no timeout".
    """
    if token is None:
        return timeout_ms
    token.check()
    remaining = token.remaining_ms()
    if remaining is None:
        return timeout_ms
    return max(1, min(timeout_ms, int(remaining)))


async def pause(clock: Clock, ms: float, token: Optional[CancelToken] = None) -> None:
    """Wait `ms`, never past the token's deadline, then honour cancellation."""
    if token is not None:
        token.check()
        remaining = token.remaining_ms()
        if remaining is not None:
            ms = min(ms, remaining)
    await clock.wait(ms)
    if token is not None:
        token.check()
