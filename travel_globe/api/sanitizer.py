# travel_globe/api/sanitizer.py
"""Defensive normalization for trip collections from outside the process.

Anything decoded from a share token or loaded from a hand-edited JSON file
passes through ``sanitize`` before it reaches the globe.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from travel_globe.api.models import Trip, parse_iso_date

logger = logging.getLogger(__name__)


def _sort_date(value: Any) -> Optional[date]:
    """Best-effort date for ordering; None sorts last."""
    parsed = parse_iso_date(value)
    if parsed is not None:
        return parsed
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError:
            return None
    return None


def _sort_key(item: Any):
    day = _sort_date(item.get("date")) if isinstance(item, Mapping) else None
    if day is None:
        return (1, 0)
    return (0, -day.toordinal())


def sanitize(raw: Any) -> List[Dict[str, Any]]:
    """Turn an untrusted trip collection into render-ready records.

    Records are ordered by date, most recent first (ties keep input order,
    unparsable dates go last). Records whose ``lat`` or ``lng`` is not
    numeric are dropped. Colors fall back to the default, missing comments
    become ``""`` and each record gets a 1-based ``id``.

    Out-of-range coordinates that are still numbers are kept; only the CSV
    importer enforces the ±90/±180 bounds.
    """
    if not isinstance(raw, list):
        logger.warning(f"Expected a list of trips, got {type(raw).__name__}; using none")
        return []

    ordered = sorted(raw, key=_sort_key)

    cleaned: List[Dict[str, Any]] = []
    for item in ordered:
        if not isinstance(item, Mapping):
            logger.warning(f"Dropping trip that is not an object: {item!r}")
            continue

        try:
            trip = Trip.from_dict(item)
        except ValueError:
            logger.warning(
                f"Dropping trip {item.get('label')!r}: non-numeric coordinates "
                f"(lat={item.get('lat')!r}, lng={item.get('lng')!r})"
            )
            continue

        cleaned.append(trip.to_dict())

    return [{"id": index, **trip} for index, trip in enumerate(cleaned, 1)]


__all__ = ["sanitize"]
