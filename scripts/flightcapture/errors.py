"""
Engine Errors

Terminal conditions propagate to the caller with enough context to build
troubleshooting output; PayloadParseError is only ever logged.
"""

from __future__ import annotations

from typing import Optional

from .schema import FailedRequestRecord


class FlightCaptureError(Exception):
    """Base class for all engine errors."""


class NavigationError(FlightCaptureError):
    """All navigation attempts were exhausted."""

    def __init__(self, url: str, attempts: int, last_error: str):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed to navigate after {attempts} attempts: {last_error}")


class EmptyCaptureError(FlightCaptureError):
    """No qualifying response arrived within the time budget."""

    def __init__(
        self,
        url: str = "",
        elapsed_ms: float = 0,
        failures: Optional[list[FailedRequestRecord]] = None,
    ):
        self.url = url
        self.elapsed_ms = elapsed_ms
        self.failures = list(failures or [])
        msg = (
            f"No flight data intercepted within {elapsed_ms / 1000:.0f}s. "
            "Check for network errors or anti-bot detection."
        )
        if self.failures:
            msg += f" ({len(self.failures)} failed API requests)"
        super().__init__(msg)


class PayloadParseError(FlightCaptureError):
    """A qualifying response body could not be parsed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to parse response from {url}: {reason}")


class FormInteractionError(FlightCaptureError):
    """The form-interaction fallback could not fill or submit the search."""

    def __init__(self, step: str, reason: str):
        self.step = step
        self.reason = reason
        super().__init__(f"Form interaction failed at {step}: {reason}")


class SessionBusyError(FlightCaptureError):
    """A search is already running on this engine instance."""


class SearchCancelledError(FlightCaptureError):
    """The search was cancelled or ran past its deadline."""

    def __init__(self, reason: str = "cancelled"):
        self.reason = reason
        super().__init__(f"Search cancelled: {reason}")
