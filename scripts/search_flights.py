#!/usr/bin/env python3
"""
United Flight Search

Search united.com flights by capturing the site's FetchFlights API responses.
Tries URL navigation first; if that fails, retries through the landing-page
search form.

Usage:
    python scripts/search_flights.py --origin PHL --dest NYC --date 2026-08-15 --return-date 2026-08-17
    python scripts/search_flights.py --url "https://www.united.com/en/us/fsr/choose-flights?f=PHL&t=..." -o data/united.json

Options:
    --url            Search URL (overrides origin/dest/date options)
    --origin         Departure airport code
    --dest           Destination airport code or city label
    --date           Departure date YYYY-MM-DD
    --return-date    Return date YYYY-MM-DD (omit for one-way)
    --pax            Number of passengers (default: 1)
    --cabin          economy, premium-economy, business, first (default: economy)
    --sort           bestmatches, price, duration, departure, arrival
    --headed         Show the browser window
    --save-responses Save every captured response under --output-dir
    --deadline       Overall time limit per search in seconds
    --no-fallback    Do not retry through the search form
    -o, --output     Output JSON file path
    --verbose        Print engine log messages

Requirements:
    pip install playwright
    playwright install chromium
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

try:
    from playwright.async_api import async_playwright  # noqa: F401
except ImportError:
    print("Playwright not installed. Run: pip install playwright && playwright install chromium")
    sys.exit(1)

sys.path.insert(0, str(Path(__file__).parent))
from flightcapture import (
    CancelToken,
    FlightCaptureError,
    FlightSearchEngine,
    NormalizedResult,
    build_search_url,
    load_engine_config,
    params_from_url,
)
from flightcapture.converter import convert_result, convert_summary, convert_troubleshooting


def display_results(result: NormalizedResult) -> None:
    """Print a readable summary of a normalized result."""
    if not result.flights:
        print(f"No flights found or error occurred: {result.error}")
        return

    for index, flight in enumerate(result.flights):
        print(f"\nTrip {flight.trip_index or index + 1}:")
        print(f"  Route: {flight.origin_decoded or flight.origin} → {flight.destination_decoded or flight.destination}")
        when = f" at {flight.depart_time}" if flight.depart_time else ""
        print(f"  Date: {flight.depart_date}{when}")

        if flight.fares:
            print("  Available Fares:")
            for fare in flight.fares:
                refundable = " (Refundable)" if fare.is_refundable else ""
                print(f"    - {fare.cabin_class} ({fare.type}){refundable}: {fare.description}")

        if flight.pricing:
            print("  Pricing by Airport:")
            for price in flight.pricing:
                print(f"    - {price.airport}: {price.price:,.2f} {price.currency} ({price.fare_family})")

        filters = flight.search_filters
        if filters.is_populated:
            print(f"  Price Range: {filters.price_min} - {filters.price_max}")

    info = result.search_info
    print(f"\nSearch Status: {'Success' if info.is_success else 'Warning/Error'}")
    if info.warnings:
        print("Warnings: " + ", ".join(str(w.get("Message", w)) if isinstance(w, dict) else str(w) for w in info.warnings))
    if info.errors:
        print("Errors: " + ", ".join(str(e.get("Message", e)) if isinstance(e, dict) else str(e) for e in info.errors))

    meta = result.metadata
    print("\nMetadata:")
    print(f"  Intercepted Responses: {meta.intercepted_responses}")
    print(f"  Response Timestamp: {meta.response_timestamp}")
    print(f"  API URL: {meta.api_url}")


def print_troubleshooting(info: dict) -> None:
    print("\nTroubleshooting Information:")
    print("=" * 50)
    print(f"Possible Issues: {info['possible_issues']}")
    print(f"Recommendations: {info['recommendations']}")


def _token(args: argparse.Namespace):
    return CancelToken(deadline_ms=args.deadline * 1000) if args.deadline else None


async def search(args: argparse.Namespace) -> dict:
    """Run URL search, falling back to form interaction."""
    config = load_engine_config()
    overrides = {"headless": not args.headed}
    if args.save_responses:
        overrides.update(save_responses=True, output_dir=args.output_dir)
    engine = FlightSearchEngine(config.replace(**overrides))

    url = args.url or build_search_url(
        args.origin,
        args.dest,
        args.date,
        return_date=args.return_date,
        passengers=args.pax,
        cabin_class=args.cabin,
        sort_by=args.sort,
    )

    output = {
        "source": "united",
        "searched_at": datetime.now().isoformat(),
        "url": url,
        "method": None,
    }

    print("Method 1: URL Navigation")
    print("=" * 40)
    try:
        result = await engine.search_by_url(
            url, log_requests=True, filename=args.filename, cancel_token=_token(args)
        )
        output["method"] = "url"
    except FlightCaptureError as e:
        print(f"URL Navigation Error: {e}")
        print_troubleshooting(engine.get_troubleshooting_info())

        if args.no_fallback:
            output["error"] = str(e)
            output["troubleshooting"] = convert_troubleshooting(engine.get_troubleshooting_info())
            return output

        print("\nMethod 2: Form Interaction (Fallback)")
        print("=" * 40)
        try:
            params = params_from_url(url)
            result = await engine.search_by_form_interaction(
                params, log_requests=True, filename=args.filename, cancel_token=_token(args)
            )
            output["method"] = "form"
        except (FlightCaptureError, ValueError) as form_error:
            print(f"Form Interaction Error: {form_error}")
            output["error"] = "Both URL navigation and form interaction methods failed"
            output["troubleshooting"] = convert_troubleshooting(engine.get_troubleshooting_info())
            return output

    print("\nFlight Search Results:")
    print("=" * 50)
    display_results(result)

    output["results"] = convert_result(result)
    output["summary"] = convert_summary(engine.get_summary())
    return output


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Search United flights via API capture")
    parser.add_argument("--url", default=None, help="United choose-flights search URL")
    parser.add_argument("--origin", default=None, help="Departure airport (e.g., PHL)")
    parser.add_argument("--dest", default=None, help="Destination airport or city (e.g., NYC)")
    parser.add_argument("--date", default=None, help="Departure date (YYYY-MM-DD)")
    parser.add_argument("--return-date", default=None, help="Return date (YYYY-MM-DD, omit for one-way)")
    parser.add_argument("--pax", type=int, default=1, help="Number of passengers (default: 1)")
    parser.add_argument("--cabin", default="economy", help="Cabin class (default: economy)")
    parser.add_argument("--sort", default="bestmatches", help="Sort order (default: bestmatches)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--save-responses", action="store_true", help="Save captured responses")
    parser.add_argument("--output-dir", default="./flight_data", help="Directory for saved responses")
    parser.add_argument("--filename", default=None, help="File name for saved responses")
    parser.add_argument("--deadline", type=float, default=None, help="Time limit per search (seconds)")
    parser.add_argument("--no-fallback", action="store_true", help="Skip the form interaction fallback")
    parser.add_argument("-o", "--output", default=None, help="Output JSON file")
    parser.add_argument("--verbose", action="store_true", help="Print engine log messages")
    args = parser.parse_args()

    if not args.url and not (args.origin and args.dest and args.date):
        parser.error("either --url or --origin, --dest and --date are required")
    return args


async def main():
    args = parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.url:
        print(f"United Search: {args.url}")
    else:
        print(f"United Search: {args.origin} → {args.dest}")
        print(f"Date: {args.date}" + (f" → {args.return_date}" if args.return_date else " (one-way)"))
        print(f"Pax: {args.pax}")
    print()

    output = await search(args)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, ensure_ascii=False, indent=2)
        print(f"\nSaved to: {output_path}")

    if output.get("error"):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
