# travel_globe/api/services/trip_service.py
"""Service layer between the trip pipeline and the globe page."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from travel_globe.api import codec
from travel_globe.api.diagnostics import check, report
from travel_globe.api.models import parse_iso_date
from travel_globe.api.sanitizer import sanitize

logger = logging.getLogger(__name__)

DEFAULT_TRIPS: List[Dict[str, Any]] = [
    {
        "label": "Kyoto, Japan",
        "lat": 35.0116,
        "lng": 135.7681,
        "date": "2025-03-17",
        "comments": "Cherry blossoms at Maruyama Park; matcha overload.",
        "color": "#0EA5E9",
    },
    {
        "label": "Seoul, South Korea",
        "lat": 37.5665,
        "lng": 126.978,
        "date": "2024-12-02",
        "comments": "Bibimbap + late night shopping in Myeongdong.",
        "color": "#22C55E",
    },
    {
        "label": "Barcelona, Spain",
        "lat": 41.3874,
        "lng": 2.1686,
        "date": "2023-09-05",
        "comments": "Gaudí tour: Sagrada Família and Park Güell.",
        "color": "#F59E0B",
    },
    {
        "label": "San Francisco, USA",
        "lat": 37.7749,
        "lng": -122.4194,
        "date": "2022-06-11",
        "comments": "Foggy Golden Gate, perfect clam chowder at Fisherman's Wharf.",
        "color": "#EF4444",
    },
]

LABEL_FALLBACK_COLOR = "#111827"
POINT_ALTITUDE = 0.02
POINT_SIZE = 0.7
LABEL_ALTITUDE = 0.03
LABEL_SIZE = 1.1


@dataclass
class TripSelection:
    """Trips ready for the renderer plus where they came from."""

    trips: List[Dict[str, Any]]
    source: str  # "token" or "default"
    diagnostics: List[str] = field(default_factory=list)


def _year(value: Any) -> str:
    parsed = parse_iso_date(value)
    return str(parsed.year) if parsed else "?"


class TripService:
    """Handles trip selection, search and the derived globe layers."""

    @staticmethod
    def load_default_trips(path: Optional[str] = None) -> List[Any]:
        """Load the fallback trip collection.

        Args:
            path: Optional JSON file holding a trip array

        Returns:
            Trips from ``path`` when it is readable and holds an array,
            otherwise the built-in sample log
        """
        if not path:
            return list(DEFAULT_TRIPS)
        try:
            with open(path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load trips from {path}: {e}; using built-in trips")
            return list(DEFAULT_TRIPS)
        if not isinstance(data, list):
            logger.warning(f"Trips file {path} is not a JSON array; using built-in trips")
            return list(DEFAULT_TRIPS)
        return data

    @staticmethod
    def resolve_trips(token: Optional[str], fallback: List[Any]) -> TripSelection:
        """Pick the collection to show: the token's trips, or the fallback.

        Args:
            token: Value of the ``trips`` query parameter, if any
            fallback: Collection kept when the token is absent or bad

        Returns:
            Sanitized trips with their diagnostics
        """
        source = "default"
        raw = fallback
        if token:
            raw, decoded = codec.try_decode(token, fallback)
            if decoded:
                source = "token"

        trips = sanitize(raw)
        violations = check(trips)
        report(trips, violations, logger)
        return TripSelection(trips=trips, source=source, diagnostics=violations)

    @staticmethod
    def filter_trips(trips: List[Dict[str, Any]], query: Optional[str]) -> List[Dict[str, Any]]:
        """Case-insensitive search on label and comments."""
        q = (query or "").strip().lower()
        if not q:
            return trips
        return [
            t for t in trips
            if q in str(t.get("label") or "").lower()
            or q in str(t.get("comments") or "").lower()
        ]

    @staticmethod
    def build_points(trips: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Point layer for the globe, one marker per trip."""
        return [
            {
                **t,
                "altitude": POINT_ALTITUDE,
                "size": POINT_SIZE,
                "pointLabel": f"{t.get('label')} — {_year(t.get('date'))}",
            }
            for t in trips
        ]

    @staticmethod
    def build_labels(trips: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Text label layer floating just above the points."""
        return [
            {
                "lat": t.get("lat"),
                "lng": t.get("lng"),
                "altitude": LABEL_ALTITUDE,
                "text": f"{_year(t.get('date'))} • {t.get('label')}",
                "color": t.get("color") or LABEL_FALLBACK_COLOR,
                "size": LABEL_SIZE,
            }
            for t in trips
        ]

    @staticmethod
    def summarize(trips: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Headline numbers for the side panel.

        Args:
            trips: Sanitized trips, most recent first

        Returns:
            Count plus the latest and earliest trip (None when empty)
        """
        return {
            "count": len(trips),
            "latest": trips[0] if trips else None,
            "earliest": trips[-1] if trips else None,
        }


# Export for use in other modules
__all__ = ['TripService', 'TripSelection', 'DEFAULT_TRIPS']
