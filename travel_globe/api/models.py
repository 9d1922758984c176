"""Trip record model and the validation predicate shared by the pipeline.

A trip collection is a plain list of Trip objects (or, once it has crossed a
JSON boundary, a list of dicts with the same field names). The predicate in
``find_violations`` is used both to reject data and to explain why it was
rejected, so the two paths can never disagree.
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, List, Mapping, NamedTuple, Optional, Union

DEFAULT_COLOR = "#38bdf8"
HEX_COLOR_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

LAT_RANGE = (-90.0, 90.0)
LNG_RANGE = (-180.0, 180.0)


class NumberParse(NamedTuple):
    """Outcome of ``parse_number``; ``value`` is only meaningful when ``ok``."""

    ok: bool
    value: float = math.nan


@dataclass(frozen=True)
class Trip:
    """One visited place on the travel log."""

    label: str
    lat: float
    lng: float
    date: str  # YYYY-MM-DD
    comments: str = ""
    color: str = DEFAULT_COLOR

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trip":
        """Build a Trip from a mapping, normalizing color and comments.

        Raises ValueError if a coordinate is not numeric.
        """
        lat = parse_number(data.get("lat"))
        lng = parse_number(data.get("lng"))
        if not (lat.ok and lng.ok):
            raise ValueError(f"Non-numeric coordinates for {data.get('label')!r}")
        comments = data.get("comments")
        return cls(
            label=data.get("label"),
            lat=lat.value,
            lng=lng.value,
            date=data.get("date"),
            comments="" if comments is None else comments,
            color=normalize_color(data.get("color")),
        )


TripLike = Union[Trip, Mapping[str, Any]]


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None


def normalize_color(value: Any) -> str:
    """Return ``value`` if it is a hex color, otherwise DEFAULT_COLOR."""
    return value if is_hex_color(value) else DEFAULT_COLOR


def parse_number(value: Any) -> NumberParse:
    """Parse a coordinate-like value into a finite float.

    ints and floats are accepted as-is, strings are parsed after stripping
    whitespace. ``None``, booleans, blank strings, containers and anything
    that is not finite (nan, inf) are failures.
    """
    if isinstance(value, bool) or value is None:
        return NumberParse(False)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return NumberParse(False)
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return NumberParse(False)
        try:
            number = float(text)
        except ValueError:
            return NumberParse(False)
    else:
        return NumberParse(False)

    if not math.isfinite(number):
        return NumberParse(False)
    # Keep ints as ints so JSON output matches the input ("lat": 10 stays 10)
    if isinstance(value, int):
        return NumberParse(True, value)
    return NumberParse(True, number)


def parse_iso_date(value: Any) -> Optional[date]:
    """Return the calendar date for a ``YYYY-MM-DD`` string, else None."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def is_iso_date(value: Any) -> bool:
    return parse_iso_date(value) is not None


def _in_range(value: Any, bounds: tuple) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if not math.isfinite(value):
        return False
    low, high = bounds
    return low <= value <= high


def _as_mapping(trip: TripLike) -> Mapping[str, Any]:
    if isinstance(trip, Trip):
        return trip.to_dict()
    return trip


# ---------------------------------------------------------------------------
# Validation predicate
# ---------------------------------------------------------------------------

def find_violations(trip: TripLike, include_color: bool = True) -> List[str]:
    """List every field of ``trip`` that breaks the Trip constraints.

    Color problems are reported only when ``include_color`` is set; they are
    a normalization concern and never make a trip invalid.
    """
    if not isinstance(trip, (Trip, Mapping)):
        return ["is not an object"]

    data = _as_mapping(trip)
    failures: List[str] = []

    label = data.get("label")
    if not isinstance(label, str) or not label:
        failures.append("invalid label")
    if not _in_range(data.get("lat"), LAT_RANGE):
        failures.append("invalid lat")
    if not _in_range(data.get("lng"), LNG_RANGE):
        failures.append("invalid lng")

    trip_date = data.get("date")
    if not isinstance(trip_date, str) or not ISO_DATE_PATTERN.match(trip_date):
        failures.append("invalid date format (YYYY-MM-DD)")
    if parse_iso_date(trip_date) is None:
        failures.append("invalid date value")

    if not isinstance(data.get("comments"), str):
        failures.append("invalid comments")
    if include_color and not is_hex_color(data.get("color")):
        failures.append("invalid color")

    return failures


def validate(trip: TripLike) -> bool:
    """True when every field except color satisfies its constraint."""
    return not find_violations(trip, include_color=False)


__all__ = [
    "DEFAULT_COLOR",
    "HEX_COLOR_PATTERN",
    "NumberParse",
    "Trip",
    "TripLike",
    "is_hex_color",
    "normalize_color",
    "parse_number",
    "parse_iso_date",
    "is_iso_date",
    "find_violations",
    "validate",
]
