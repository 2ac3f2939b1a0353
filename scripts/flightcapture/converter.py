"""
API Output Converter

Converts engine output (snake_case dataclasses and dicts) to the camelCase
JSON shape consumers of the search API expect.
"""

from __future__ import annotations

from typing import Any

from .schema import FlightOption, NormalizedResult


def to_camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def camelize(obj: Any) -> Any:
    """Recursively camelCase the keys of dicts (lists are walked)."""
    if isinstance(obj, dict):
        return {to_camel_case(k) if isinstance(k, str) else k: camelize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [camelize(v) for v in obj]
    return obj


def convert_flight(flight: FlightOption) -> dict:
    """Convert one FlightOption to the API trip shape."""
    filters = flight.search_filters
    search_filters = {}
    if filters.is_populated:
        search_filters = {
            "priceRange": {
                "min": filters.price_min,
                "max": filters.price_max,
                "currency": filters.price_currency,
            },
            "duration": {"min": filters.duration_min, "max": filters.duration_max},
            "stops": {"min": filters.stops_min, "max": filters.stops_max},
            "carriers": {
                "marketing": filters.carriers_marketing,
                "operating": filters.carriers_operating,
            },
        }

    return {
        "tripIndex": flight.trip_index,
        "origin": flight.origin,
        "destination": flight.destination,
        "originDecoded": flight.origin_decoded,
        "destinationDecoded": flight.destination_decoded,
        "departDate": flight.depart_date,
        "departTime": flight.depart_time,
        "fares": [
            {
                "type": fare.type,
                "description": fare.description,
                "fareFamily": fare.fare_family,
                "isRefundable": fare.is_refundable,
                "cabinClass": fare.cabin_class,
                "fareContent": fare.fare_content,
                "marketingText": fare.marketing_text,
            }
            for fare in flight.fares
        ],
        "pricing": [
            {
                "airport": price.airport,
                "description": price.description,
                "price": price.price,
                "currency": price.currency,
                "fareFamily": price.fare_family,
            }
            for price in flight.pricing
        ],
        "aircraft": [{"code": eq.code, "description": eq.description} for eq in flight.aircraft],
        "searchFilters": search_filters,
    }


def convert_result(result: NormalizedResult, include_raw: bool = False) -> dict:
    """Convert a NormalizedResult to the API result shape."""
    d = result.to_dict()
    output = {
        "flights": [convert_flight(f) for f in result.flights],
        "searchInfo": camelize(d["search_info"]),
        "metadata": camelize(d["metadata"]),
    }
    if result.error:
        output["error"] = result.error
    if include_raw:
        output["rawData"] = result.raw_data
    return output


def convert_summary(summary: dict) -> dict:
    return camelize(summary)


def convert_troubleshooting(info: dict) -> dict:
    return camelize(info)
