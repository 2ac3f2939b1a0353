"""
United Search URLs

Builds choose-flights search URLs from human-readable inputs and parses
them back, so a failed URL search can be retried through the form.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .schema import SearchParams


BASE_URL = "https://www.united.com/en/us/fsr/choose-flights"

CABIN_CLASSES = {
    "economy": 1,
    "premium-economy": 2,
    "business": 3,
    "first": 7,
    "premium": 7,
}

SORT_TYPES = ["bestmatches", "price", "duration", "departure", "arrival"]

TRIP_TYPES = {
    "roundtrip": "R",
    "oneway": "O",
    "multicity": "M",
}

# City-level destinations for airport codes that stand for a metro area
CITY_NAMES = {
    "NYC": "NEW YORK, NY, US",
    "LAX": "LOS ANGELES, CA, US",
    "CHI": "CHICAGO, IL, US",
    "WAS": "WASHINGTON, DC, US",
    "SFO": "SAN FRANCISCO, CA, US",
    "BOS": "BOSTON, MA, US",
    "MIA": "MIAMI, FL, US",
    "LAS": "LAS VEGAS, NV, US",
    "SEA": "SEATTLE, WA, US",
    "DEN": "DENVER, CO, US",
}

TIME_OF_DAY = {"morning": "M", "afternoon": "A", "evening": "E", "night": "N"}


def format_destination(destination: str, use_all_airports: bool = True) -> str:
    """Expand a bare airport code to the site's city label."""
    if re.fullmatch(r"[A-Z]{3}", destination):
        city = CITY_NAMES.get(destination, destination)
        return f"{city} (ALL AIRPORTS)" if use_all_airports else city
    return destination


def format_date(value) -> str:
    """Normalize a date to YYYY-MM-DD. Raises ValueError if unparseable."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    text = str(value).strip()
    if re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        return text
    for fmt in ("%m/%d/%Y", "%Y/%m/%d", "%Y%m%d"):
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {value}")


def _advanced_params(advanced: dict) -> dict:
    params = {}
    if advanced.get("flexible_dates"):
        params["fd"] = "1"
    if advanced.get("nonstop_only"):
        params["ns"] = "1"
    if advanced.get("time_of_day"):
        params["tod"] = TIME_OF_DAY.get(advanced["time_of_day"].lower(), "A")
    if advanced.get("award_travel"):
        params["at"] = "1"
    if advanced.get("refundable_only"):
        params["rf"] = "1"
    if advanced.get("book_with_miles"):
        params["bwm"] = "1"
    if advanced.get("corporate_code"):
        params["cc"] = advanced["corporate_code"]
    if advanced.get("promo_code"):
        params["pc"] = advanced["promo_code"]
    return params


def build_search_url(
    origin: str,
    destination: str,
    depart_date,
    return_date=None,
    passengers: int = 1,
    cabin_class: str = "economy",
    sort_by: str = "bestmatches",
    trip_type: Optional[str] = None,
    use_all_airports: bool = True,
    advanced: Optional[dict] = None,
) -> str:
    """
    Build a United choose-flights search URL.

    Args:
        origin: Origin airport code (e.g., "PHL")
        destination: Airport code or city label (e.g., "NYC")
        depart_date: Departure date (YYYY-MM-DD, MM/DD/YYYY or date)
        return_date: Return date, None for one-way
        passengers: Number of passengers
        cabin_class: economy, premium-economy, business, first
        sort_by: bestmatches, price, duration, departure, arrival
        trip_type: roundtrip, oneway, multicity (inferred when omitted)
        use_all_airports: Append "(ALL AIRPORTS)" to metro destinations
        advanced: flexible_dates, nonstop_only, time_of_day, award_travel,
            refundable_only, book_with_miles, corporate_code, promo_code
    """
    if not origin or not destination or not depart_date:
        raise ValueError("Required parameters: origin, destination, depart_date")

    params = {
        "f": origin.upper(),
        "t": format_destination(destination.upper() if len(destination) == 3 else destination, use_all_airports),
        "d": format_date(depart_date),
    }
    if return_date:
        params["r"] = format_date(return_date)

    trip_type = trip_type or ("roundtrip" if return_date else "oneway")
    cabin = CABIN_CLASSES.get((cabin_class or "").lower(), 1)

    params.update({
        "tqp": TRIP_TYPES.get(trip_type, "O"),
        "px": str(passengers or 1),
        "ct": str(cabin),
        "clm": str(cabin),
        "sc": f"{cabin},{cabin}",
        "st": sort_by if sort_by in SORT_TYPES else "bestmatches",
        "taxng": "1",
        "newHP": "True",
    })
    if advanced:
        params.update(_advanced_params(advanced))

    return f"{BASE_URL}?{urlencode(params)}"


def build_oneway_url(origin: str, destination: str, depart_date, **options) -> str:
    return build_search_url(origin, destination, depart_date, trip_type="oneway", **options)


def build_roundtrip_url(origin: str, destination: str, depart_date, return_date, **options) -> str:
    return build_search_url(
        origin, destination, depart_date, return_date=return_date, trip_type="roundtrip", **options
    )


def _reverse(mapping: dict, value):
    for key, mapped in mapping.items():
        if mapped == value:
            return key
    return None


def parse_search_url(url: str) -> dict:
    """Extract search parameters from a choose-flights URL."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid URL: {url}")
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}

    try:
        passengers = int(query.get("px", 1))
    except ValueError:
        passengers = 1
    try:
        cabin = _reverse(CABIN_CLASSES, int(query.get("ct", "")))
    except ValueError:
        cabin = None

    st = query.get("st")
    return {
        "origin": query.get("f"),
        "destination": query.get("t"),
        "depart_date": query.get("d"),
        "return_date": query.get("r"),
        "passengers": passengers,
        "trip_type": _reverse(TRIP_TYPES, query.get("tqp")),
        "sort_by": st if st in SORT_TYPES else None,
        "cabin_class": cabin,
    }


def params_from_url(url: str) -> SearchParams:
    """SearchParams for the form fallback. Raises ValueError without origin/destination."""
    parsed = parse_search_url(url)
    if not parsed["origin"] or not parsed["destination"]:
        raise ValueError(f"URL has no origin/destination: {url}")
    return SearchParams(
        origin=parsed["origin"],
        destination=parsed["destination"],
        depart_date=parsed["depart_date"] or "",
        return_date=parsed["return_date"],
        passengers=parsed["passengers"],
    )
