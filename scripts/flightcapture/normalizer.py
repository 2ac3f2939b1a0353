"""
Result Normalizer

Maps a FetchFlights payload into NormalizedResult. Tolerates the payload
shapes the site has been seen to return (top-level Trips, nested data.Trips,
bare trip list) and PascalCase or camelCase keys. Never raises.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from .schema import (
    AirportPrice,
    CapturedResponse,
    Equipment,
    FareOption,
    FlightOption,
    NormalizedResult,
    ResultMetadata,
    SearchFilters,
    SearchInfo,
    utc_timestamp,
)
from .session import SearchSession

logger = logging.getLogger(__name__)


def _get(obj: Any, *names: str, default: Any = None) -> Any:
    """First present key among `names`, each tried as given then camelCase."""
    if not isinstance(obj, dict):
        return default
    for name in names:
        for key in (name, name[:1].lower() + name[1:]):
            if key in obj and obj[key] is not None:
                return obj[key]
    return default


def _list(obj: Any, *names: str) -> list:
    value = _get(obj, *names)
    return value if isinstance(value, list) else []


def _str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def select_authoritative(captures: Iterable[CapturedResponse]) -> Optional[CapturedResponse]:
    """Largest capture by size; the first one wins ties."""
    best = None
    for capture in captures:
        if best is None or capture.size > best.size:
            best = capture
    return best


def find_trips(payload: Any) -> list:
    if isinstance(payload, list):
        return payload
    trips = _get(payload, "Trips")
    if isinstance(trips, list):
        return trips
    trips = _get(_get(payload, "Data", default={}), "Trips")
    if isinstance(trips, list):
        return trips
    return []


def parse_fares(trip: dict) -> list[FareOption]:
    columns = _list(_get(trip, "ColumnInformation", default={}), "Columns")
    return [
        FareOption(
            type=_str(_get(col, "Type")),
            description=_str(_get(col, "Description")),
            fare_family=_str(_get(col, "FareFamily")),
            is_refundable=bool(_get(col, "IsFullyRefundable", default=False)),
            cabin_class=_str(_get(col, "DataSourceLabel")),
            fare_content=_str(_get(col, "FareContentDescription")),
            marketing_text=_str(_get(col, "MarketingText")),
        )
        for col in columns
        if isinstance(col, dict)
    ]


def parse_pricing(filters_out: dict) -> list[AirportPrice]:
    return [
        AirportPrice(
            airport=_str(_get(dest, "Code")),
            description=_str(_get(dest, "Description")),
            price=_to_float(_get(dest, "Amount")),
            currency=_str(_get(dest, "Currency")),
            fare_family=_str(_get(dest, "FareFamily")),
        )
        for dest in _list(filters_out, "AirportsDestinationList")
        if isinstance(dest, dict)
    ]


def parse_equipment(filters_out: dict) -> list[Equipment]:
    return [
        Equipment(code=_str(_get(eq, "Code")), description=_str(_get(eq, "Description")))
        for eq in _list(filters_out, "EquipmentList")
        if isinstance(eq, dict)
    ]


def parse_filters(filters_out: dict) -> SearchFilters:
    if not filters_out:
        return SearchFilters()
    price_min = _get(filters_out, "PriceMin")
    price_max = _get(filters_out, "PriceMax")
    return SearchFilters(
        price_min=_to_float(price_min) if price_min is not None else None,
        price_max=_to_float(price_max) if price_max is not None else None,
        price_currency=_str(_get(filters_out, "PriceMinCurrency")),
        duration_min=_to_int(_get(filters_out, "DurationMin")),
        duration_max=_to_int(_get(filters_out, "DurationMax")),
        stops_min=_to_int(_get(filters_out, "StopCountMin")),
        stops_max=_to_int(_get(filters_out, "StopCountMax")),
        carriers_marketing=_list(filters_out, "CarriersMarketing"),
        carriers_operating=_list(filters_out, "CarriersOperating"),
    )


def parse_trip(trip: dict) -> FlightOption:
    filters_out = _get(trip, "SearchFiltersOut", default={})
    if not isinstance(filters_out, dict):
        filters_out = {}
    return FlightOption(
        trip_index=_to_int(_get(trip, "TripIndex", "Index")),
        origin=_str(_get(trip, "Origin")),
        destination=_str(_get(trip, "Destination")),
        origin_decoded=_str(_get(trip, "OriginDecoded")),
        destination_decoded=_str(_get(trip, "DestinationDecoded")),
        depart_date=_str(_get(trip, "DepartDate")),
        depart_time=_str(_get(trip, "DepartTime")),
        fares=parse_fares(trip),
        pricing=parse_pricing(filters_out),
        aircraft=parse_equipment(filters_out),
        search_filters=parse_filters(filters_out),
    )


def parse_search_info(payload: Any) -> SearchInfo:
    return SearchInfo(
        session_id=_str(_get(payload, "SessionId")),
        last_call_date_time=_str(_get(payload, "LastCallDateTime")),
        warnings=_list(payload, "Warnings"),
        errors=_list(payload, "Errors"),
        marketing_carriers=_list(payload, "MarketingCarriers"),
        operating_carriers=_list(payload, "OperatingCarriers"),
        status=_to_int(_get(payload, "Status")),
        version=_str(_get(payload, "Version")),
    )


def normalize(payload: Any) -> NormalizedResult:
    """Normalize one FetchFlights payload."""
    if not isinstance(payload, (dict, list)):
        return NormalizedResult(error="Invalid response data", raw_data=payload)

    flights: list[FlightOption] = []
    try:
        for trip in find_trips(payload):
            if isinstance(trip, dict):
                flights.append(parse_trip(trip))
        search_info = parse_search_info(payload)
    except (AttributeError, TypeError, ValueError) as e:
        logger.error("Error parsing flight data: %s", e)
        return NormalizedResult(
            flights=flights, error=f"Failed to parse flight data: {e}", raw_data=payload
        )

    return NormalizedResult(flights=flights, search_info=search_info, raw_data=payload)


def normalize_session(session: SearchSession) -> NormalizedResult:
    """Normalize the authoritative capture of a session and attach metadata."""
    captures = session.captures.snapshot()
    authoritative = select_authoritative(captures)
    if authoritative is None:
        return NormalizedResult(
            error="No data intercepted",
            metadata=ResultMetadata(parse_timestamp=utc_timestamp()),
        )

    logger.info("Parsing %d intercepted response(s)", len(captures))
    result = normalize(authoritative.data)
    result.metadata = ResultMetadata(
        intercepted_responses=len(captures),
        response_timestamp=authoritative.timestamp,
        response_size=authoritative.size,
        api_url=authoritative.url,
        parse_timestamp=utc_timestamp(),
    )
    return result
