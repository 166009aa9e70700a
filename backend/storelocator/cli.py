"""Print nearby stores from a running store locator server.

Usage:
    storelocator-nearby --lat=40.7487 --lng=-73.9853 [--radius=5000]
        [--keyword=jewelry] [--host=http://localhost:8000] [--json]
"""
from __future__ import annotations

import argparse
import json
import sys

import httpx

DEFAULT_HOST = "http://localhost:8000"
TABLE_HEADER = "Name | Rating | Phone | Vicinity"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storelocator-nearby",
        description="Query /api/nearby on a store locator server and print the results.",
    )
    parser.add_argument("--lat", required=True, help="Latitude of the search center")
    parser.add_argument("--lng", required=True, help="Longitude of the search center")
    parser.add_argument("--radius", default="5000", help="Search radius in meters (default: 5000)")
    parser.add_argument("--keyword", default="jewelry", help="Search keyword (default: jewelry)")
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"Server base URL (default: {DEFAULT_HOST})")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON response")
    return parser


def format_row(place: dict) -> str:
    name = place.get("name") or ""
    rating = place.get("rating", "")
    phone = place.get("international_phone_number") or place.get("formatted_phone_number") or ""
    vicinity = place.get("vicinity") or place.get("formatted_address") or ""
    return f"{name} | {rating} | {phone} | {vicinity}"


def format_table(places: list[dict]) -> list[str]:
    """Render nearby results as pipe-separated lines with a header."""
    lines = [TABLE_HEADER, "-" * 37]
    lines.extend(format_row(place) for place in places)
    return lines


def fetch_nearby(host: str, lat: str, lng: str, radius: str, keyword: str) -> dict:
    response = httpx.get(
        f"{host.rstrip('/')}/api/nearby",
        params={"lat": lat, "lng": lng, "radius": radius, "keyword": keyword},
        timeout=30.0,
    )
    response.raise_for_status()
    return response.json()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        data = fetch_nearby(args.host, args.lat, args.lng, args.radius, args.keyword)
    except (httpx.HTTPError, ValueError) as e:
        print(f"Error calling nearby: {e}", file=sys.stderr)
        return 2

    results = data.get("results") if isinstance(data, dict) else None
    if not results:
        print("No results")
        return 0

    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    for line in format_table(results):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
