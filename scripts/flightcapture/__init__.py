"""
Flight Capture Package

Browser-driven search-and-capture engine for united.com flight searches.
Drives a Playwright session through a search and captures the site's
FetchFlights API responses instead of scraping rendered HTML.
"""

from .schema import (
    SearchParams,
    CapturedResponse,
    FailedRequestRecord,
    FlightOption,
    FareOption,
    AirportPrice,
    Equipment,
    SearchFilters,
    SearchInfo,
    ResultMetadata,
    NormalizedResult,
)
from .errors import (
    FlightCaptureError,
    NavigationError,
    EmptyCaptureError,
    PayloadParseError,
    FormInteractionError,
    SessionBusyError,
    SearchCancelledError,
)
from .config import EngineConfig, load_engine_config
from .timing import Clock, CancelToken
from .engine import FlightSearchEngine
from .normalizer import normalize, select_authoritative
from .diagnostics import troubleshoot
from .urls import build_search_url, build_oneway_url, build_roundtrip_url, parse_search_url, params_from_url

__all__ = [
    "SearchParams",
    "CapturedResponse",
    "FailedRequestRecord",
    "FlightOption",
    "FareOption",
    "AirportPrice",
    "Equipment",
    "SearchFilters",
    "SearchInfo",
    "ResultMetadata",
    "NormalizedResult",
    "FlightCaptureError",
    "NavigationError",
    "EmptyCaptureError",
    "PayloadParseError",
    "FormInteractionError",
    "SessionBusyError",
    "SearchCancelledError",
    "EngineConfig",
    "load_engine_config",
    "Clock",
    "CancelToken",
    "FlightSearchEngine",
    "normalize",
    "select_authoritative",
    "troubleshoot",
    "build_search_url",
    "build_oneway_url",
    "build_roundtrip_url",
    "parse_search_url",
    "params_from_url",
]
