# travel_globe/api/importer.py
"""CSV -> trips import.

Rows are processed strictly one at a time: dates are normalized, place names
geocoded through a per-run cache, colors checked, and one Trip emitted per
surviving row in input order.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from travel_globe.api.config import GeocoderConfig
from travel_globe.api.errors import GeocodingError, InvalidDate
from travel_globe.api.geocoding import GeocodeCache, Geocoder, RateLimiter, geocode_cached
from travel_globe.api.models import DEFAULT_COLOR, Trip, is_hex_color, parse_iso_date

logger = logging.getLogger(__name__)

# Accepted column names, compared case-insensitively
COLUMN_ALIASES: Dict[str, Sequence[str]] = {
    "date": ("date",),
    "location": ("location", "place"),
    "comments": ("comments", "comment", "notes"),
    "color": ("color", "colour"),
}

DATE_FORMATS = (
    "%Y-%m-%d",  # unpadded ISO, e.g. 2023-9-5
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d %B %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%b %d, %Y",
)


@dataclass
class ImportReport:
    """What an import run produced."""

    trips: List[Trip] = field(default_factory=list)
    rows: int = 0
    skipped: int = 0
    lookups: int = 0
    cache_hits: int = 0


def normalize_date(value: Optional[str]) -> str:
    """Normalize a CSV date cell to ``YYYY-MM-DD``.

    Raises:
        InvalidDate: the value is missing or matches no known format.
    """
    if value is None or not str(value).strip():
        raise InvalidDate("Missing date")
    text = str(value).strip()

    parsed = parse_iso_date(text)
    if parsed is not None:
        return parsed.isoformat()

    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise InvalidDate(f"Invalid date: {value}")


def pick_field(row: Mapping[str, Optional[str]], name: str) -> str:
    """Return the first non-empty cell among the aliases of ``name``."""
    lowered = {
        (key or "").strip().lower(): value
        for key, value in row.items()
    }
    for alias in COLUMN_ALIASES[name]:
        value = lowered.get(alias)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def read_rows(text: str) -> List[Dict[str, Optional[str]]]:
    """Parse CSV text with a header row, dropping blank lines."""
    reader = csv.DictReader(io.StringIO(text), skipinitialspace=True)
    rows = []
    for row in reader:
        if not any((value or "").strip() for value in row.values() if isinstance(value, str)):
            continue
        rows.append(row)
    return rows


def import_trips(rows: Iterable[Mapping[str, Optional[str]]],
                 geocoder: Geocoder,
                 config: Optional[GeocoderConfig] = None,
                 cache: Optional[GeocodeCache] = None,
                 limiter: Optional[RateLimiter] = None) -> ImportReport:
    """Convert CSV rows into trips.

    ``cache`` and ``limiter`` default to fresh instances, so nothing is shared
    between runs unless the caller passes them in.

    Raises:
        InvalidDate: a row has no usable date. Nothing is returned in that case.
    """
    config = config or GeocoderConfig()
    cache = cache if cache is not None else GeocodeCache()
    limiter = limiter or RateLimiter(config.delay_s)
    report = ImportReport()

    for row in rows:
        report.rows += 1
        trip_date = normalize_date(pick_field(row, "date"))

        location = pick_field(row, "location")
        if not location:
            logger.warning(f"Skipping row with missing location: {dict(row)}")
            report.skipped += 1
            continue

        raw_color = pick_field(row, "color")
        color = raw_color if is_hex_color(raw_color) else DEFAULT_COLOR
        if raw_color and not is_hex_color(raw_color):
            logger.warning(f"Color \"{raw_color}\" invalid, using default for {location}")

        try:
            lat, lng = geocode_cached(location, geocoder, cache, limiter)
        except GeocodingError as exc:
            logger.warning(f"Skipping {location}: {exc}")
            report.skipped += 1
            continue

        report.trips.append(Trip(
            label=location,
            lat=lat,
            lng=lng,
            date=trip_date,
            comments=pick_field(row, "comments"),
            color=color,
        ))

    report.lookups = cache.misses
    report.cache_hits = cache.hits
    logger.info(
        f"Imported {len(report.trips)}/{report.rows} rows "
        f"({report.lookups} lookups, {report.cache_hits} cache hits)"
    )
    return report


def write_trips(path: str, trips: Sequence[Trip]) -> str:
    """Write trips as a pretty-printed UTF-8 JSON array; returns the absolute path."""
    absolute = os.path.abspath(path)
    payload = [t.to_dict() if isinstance(t, Trip) else t for t in trips]
    with open(absolute, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)
        fh.write("\n")
    return absolute


__all__ = [
    "COLUMN_ALIASES",
    "ImportReport",
    "normalize_date",
    "pick_field",
    "read_rows",
    "import_trips",
    "write_trips",
]
