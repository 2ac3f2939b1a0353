"""
Flight Capture Schema

Records produced while capturing FetchFlights responses, and the normalized
result shape returned to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Optional


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Search inputs
# ---------------------------------------------------------------------------

@dataclass
class SearchParams:
    """Human-readable search inputs for the form-interaction path."""

    origin: str
    destination: str
    depart_date: str = ""
    return_date: Optional[str] = None
    passengers: int = 1

    @property
    def is_roundtrip(self) -> bool:
        return bool(self.return_date)


# ---------------------------------------------------------------------------
# Capture records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CapturedResponse:
    """A qualifying API response, recorded once when intercepted."""

    url: str
    timestamp: str
    status: int
    headers: dict = field(default_factory=dict)
    data: Any = None
    size: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FailedRequestRecord:
    """An API request that failed at the transport level."""

    url: str
    error: str
    timestamp: str

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Normalized result
# ---------------------------------------------------------------------------

@dataclass
class FareOption:
    """One fare column (e.g. Basic Economy, Economy, First)."""

    type: str = ""
    description: str = ""
    fare_family: str = ""
    is_refundable: bool = False
    cabin_class: str = ""
    fare_content: str = ""
    marketing_text: str = ""


@dataclass
class AirportPrice:
    """Lowest price to one destination airport."""

    airport: str = ""
    description: str = ""
    price: float = 0.0
    currency: str = ""
    fare_family: str = ""


@dataclass
class Equipment:
    code: str = ""
    description: str = ""


@dataclass
class SearchFilters:
    """Filter ranges the site reports for a trip."""

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    price_currency: str = ""
    duration_min: Optional[int] = None
    duration_max: Optional[int] = None
    stops_min: Optional[int] = None
    stops_max: Optional[int] = None
    carriers_marketing: list = field(default_factory=list)
    carriers_operating: list = field(default_factory=list)

    @property
    def is_populated(self) -> bool:
        return self.price_min is not None or self.price_max is not None or bool(self.carriers_marketing)


@dataclass
class FlightOption:
    """One trip of the search (outbound or return)."""

    trip_index: Optional[int] = None
    origin: str = ""
    destination: str = ""
    origin_decoded: str = ""
    destination_decoded: str = ""
    depart_date: str = ""
    depart_time: str = ""
    fares: list[FareOption] = field(default_factory=list)
    pricing: list[AirportPrice] = field(default_factory=list)
    aircraft: list[Equipment] = field(default_factory=list)
    search_filters: SearchFilters = field(default_factory=SearchFilters)

    @property
    def cheapest_price(self) -> Optional[float]:
        prices = [p.price for p in self.pricing if p.price > 0]
        return min(prices) if prices else None


@dataclass
class SearchInfo:
    """Session-level fields of the FetchFlights payload."""

    session_id: str = ""
    last_call_date_time: str = ""
    warnings: list = field(default_factory=list)
    errors: list = field(default_factory=list)
    marketing_carriers: list = field(default_factory=list)
    operating_carriers: list = field(default_factory=list)
    status: Optional[int] = None
    version: str = ""

    @property
    def is_success(self) -> bool:
        return self.status == 1


@dataclass
class ResultMetadata:
    intercepted_responses: int = 0
    response_timestamp: str = ""
    response_size: int = 0
    api_url: str = ""
    parse_timestamp: str = ""


@dataclass
class NormalizedResult:
    """
    Normalized search output.

    `error` is set only when the authoritative payload could not be
    interpreted; `flights` is then empty.
    """

    flights: list[FlightOption] = field(default_factory=list)
    search_info: SearchInfo = field(default_factory=SearchInfo)
    metadata: ResultMetadata = field(default_factory=ResultMetadata)
    error: Optional[str] = None
    raw_data: Any = None

    def to_dict(self, include_raw: bool = False) -> dict:
        d = asdict(self)
        if not include_raw:
            d.pop("raw_data")
        if d["error"] is None:
            d.pop("error")
        return d
