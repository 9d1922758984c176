"""Command-line tools for the trip pipeline.

    travel-globe import <input.csv> [output.json]
    travel-globe compress <trips.json>
    travel-globe decode <token>
    travel-globe check <trips.json>
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from travel_globe.api import codec
from travel_globe.api.config import GeocoderConfig
from travel_globe.api.diagnostics import check
from travel_globe.api.errors import DecodeFailure, TravelGlobeError, TripFileError
from travel_globe.api.geocoding import create_geocoder
from travel_globe.api.importer import import_trips, read_rows, write_trips
from travel_globe.api.sanitizer import sanitize

logger = logging.getLogger("travel_globe.cli")


def read_trips_file(path: str) -> List[Any]:
    """Load a trips JSON file.

    Raises:
        TripFileError: unreadable file, invalid JSON, or not an array.
    """
    absolute = os.path.abspath(path)
    try:
        with open(absolute, encoding="utf-8") as fh:
            raw = fh.read()
    except OSError as e:
        raise TripFileError(f"Failed to read file at {absolute}: {e.strerror or e}") from e
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        raise TripFileError(f"Provided file does not contain valid JSON: {e}") from e
    if not isinstance(parsed, list):
        raise TripFileError("Trips file must hold a JSON array of trip objects.")
    return parsed


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #

def cmd_import(args) -> int:
    absolute_input = os.path.abspath(args.input)
    try:
        with open(absolute_input, encoding="utf-8-sig", newline="") as fh:
            text = fh.read()
    except OSError as e:
        raise TripFileError(f"Failed to read file at {absolute_input}: {e.strerror or e}") from e

    config = GeocoderConfig.from_env()
    geocoder = create_geocoder(config)
    result = import_trips(read_rows(text), geocoder, config)

    destination = write_trips(args.output, result.trips)
    print(f"Wrote {len(result.trips)} trips to {destination}")
    return 0


def cmd_compress(args) -> int:
    trips = read_trips_file(args.trips)
    token = codec.encode(trips)
    print(token)
    print("\nShareable query string:")
    print(codec.share_query(token))
    return 0


def cmd_decode(args) -> int:
    try:
        trips = codec.decode(args.token)
    except DecodeFailure as e:
        print(f"Token could not be decoded: {e}", file=sys.stderr)
        return 1
    print(json.dumps(sanitize(trips), indent=2, ensure_ascii=False))
    return 0


def cmd_check(args) -> int:
    trips = read_trips_file(args.trips)
    violations = check(trips)
    if violations:
        print("Sanity check failures:")
        for violation in violations:
            print(f" - {violation}")
        return 1
    print(f"Sanity checks passed ({len(trips)} trips)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="travel-globe",
        description="Import, share and check travel-log trip collections.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_import = sub.add_parser("import", help="Geocode a CSV of visited places into trips JSON")
    p_import.add_argument("input", help="CSV with Date and Location columns")
    p_import.add_argument("output", nargs="?", default="trips.json", help="Output JSON (default: trips.json)")
    p_import.set_defaults(func=cmd_import)

    p_compress = sub.add_parser("compress", help="Compress trips JSON into a share token")
    p_compress.add_argument("trips", help="Trips JSON array")
    p_compress.set_defaults(func=cmd_compress)

    p_decode = sub.add_parser("decode", help="Decode a share token and print sanitized trips")
    p_decode.add_argument("token")
    p_decode.set_defaults(func=cmd_decode)

    p_check = sub.add_parser("check", help="Report trips that break the record rules")
    p_check.add_argument("trips", help="Trips JSON array")
    p_check.set_defaults(func=cmd_check)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        return args.func(args)
    except TravelGlobeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception:
        logger.exception(f"{args.command} failed")
        return 1


if __name__ == "__main__":
    sys.exit(main())
