# travel_globe/api/geocoding.py
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple, Union

import googlemaps
import requests
from googlemaps import exceptions as gmaps_exceptions

from travel_globe.api.config import GeocoderConfig
from travel_globe.api.errors import ConfigError, GeocodingError
from travel_globe.api.models import LAT_RANGE, LNG_RANGE, parse_number

logger = logging.getLogger(__name__)

Coordinates = Tuple[float, float]


class Geocoder(Protocol):
    def geocode(self, place: str) -> Coordinates:
        """Resolve ``place`` to (lat, lng) or raise GeocodingError."""


def _checked_coordinates(place: str, lat_raw, lng_raw) -> Coordinates:
    """Parse a provider's lat/lng pair and enforce the valid ranges."""
    lat = parse_number(lat_raw)
    lng = parse_number(lng_raw)
    if not lat.ok or not lng.ok:
        raise GeocodingError(f"Non-numeric coordinates for \"{place}\": {lat_raw!r}, {lng_raw!r}")
    if not LAT_RANGE[0] <= lat.value <= LAT_RANGE[1]:
        raise GeocodingError(f"Latitude {lat.value} out of bounds for \"{place}\"")
    if not LNG_RANGE[0] <= lng.value <= LNG_RANGE[1]:
        raise GeocodingError(f"Longitude {lng.value} out of bounds for \"{place}\"")
    return float(lat.value), float(lng.value)


# ─── providers ─────────────────────────────────────────────────────────────────

class NominatimGeocoder:
    """Geocoder for OpenStreetMap Nominatim or any endpoint speaking its search API."""

    def __init__(self, config: GeocoderConfig, session: Optional[requests.Session] = None):
        self.endpoint = config.endpoint
        self.timeout = config.timeout_s
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        })

    def geocode(self, place: str) -> Coordinates:
        params = {"format": "json", "limit": "1", "q": place}
        try:
            response = self.session.get(self.endpoint, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise GeocodingError(f"Geocode request failed: {exc}") from exc

        if not response.ok:
            raise GeocodingError(
                f"Geocode request failed ({response.status_code} {response.reason})"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise GeocodingError("Geocode response is not JSON") from exc

        if not isinstance(data, list) or not data:
            raise GeocodingError("No results returned")
        first = data[0]
        if not isinstance(first, dict):
            raise GeocodingError("Unexpected result shape")
        return _checked_coordinates(place, first.get("lat"), first.get("lon"))


class GoogleGeocoder:
    """Geocoder backed by the Google Maps Geocoding API."""

    def __init__(self, config: GeocoderConfig, client: Optional[googlemaps.Client] = None):
        if client is None:
            if not config.google_api_key:
                raise ConfigError("GOOGLE_MAPS_API_KEY is required for the google provider")
            logger.info(f"Initializing Google Maps client with key: {config.google_api_key[:10]}...")
            try:
                client = googlemaps.Client(key=config.google_api_key, timeout=config.timeout_s)
            except ValueError as exc:
                raise ConfigError(f"Invalid Google Maps configuration: {exc}") from exc
        self.client = client

    def geocode(self, place: str) -> Coordinates:
        try:
            results = self.client.geocode(place, language="en")
        except (gmaps_exceptions.ApiError,
                gmaps_exceptions.TransportError,
                gmaps_exceptions.Timeout) as exc:
            raise GeocodingError(f"Geocode request failed: {exc}") from exc

        if not isinstance(results, list) or not results:
            raise GeocodingError("No results returned")
        try:
            loc = results[0]["geometry"]["location"]
        except (KeyError, TypeError) as exc:
            raise GeocodingError("Unexpected result shape") from exc
        return _checked_coordinates(place, loc.get("lat"), loc.get("lng"))


def create_geocoder(config: GeocoderConfig) -> Geocoder:
    """Build the geocoder selected by ``config.provider``."""
    if config.provider == "google":
        return GoogleGeocoder(config)
    if config.provider == "nominatim":
        return NominatimGeocoder(config)
    raise ConfigError(f"Unknown geocoder provider: {config.provider}")


# ─── per-run memoization and pacing ────────────────────────────────────────────

class GeocodeCache:
    """Results of one import run, keyed by the exact place string.

    Failures are remembered too, so a name that could not be resolved is not
    looked up again in the same run.
    """

    def __init__(self):
        self._entries: Dict[str, Union[Coordinates, GeocodingError]] = {}
        self.hits = 0
        self.misses = 0

    def __contains__(self, place: str) -> bool:
        return place in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, place: str) -> Coordinates:
        """Return cached coordinates or re-raise the cached failure."""
        entry = self._entries[place]
        self.hits += 1
        if isinstance(entry, GeocodingError):
            raise entry
        return entry

    def store(self, place: str, entry: Union[Coordinates, GeocodingError]) -> None:
        self.misses += 1
        self._entries[place] = entry


class RateLimiter:
    """Enforce a minimum gap between the end of one lookup and the start of the next.

    Call ``wait`` before a request and ``mark`` once it has finished.
    """

    def __init__(self, interval_s: float,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.interval_s = interval_s
        self._sleep = sleep
        self._clock = clock
        self._last: Optional[float] = None

    def wait(self) -> None:
        if self._last is not None and self.interval_s > 0:
            remaining = self.interval_s - (self._clock() - self._last)
            if remaining > 0:
                logger.debug(f"Rate limit: sleeping {remaining:.2f}s")
                self._sleep(remaining)

    def mark(self) -> None:
        self._last = self._clock()


def geocode_cached(place: str, geocoder: Geocoder, cache: GeocodeCache,
                   limiter: Optional[RateLimiter] = None) -> Coordinates:
    """Resolve ``place`` through ``cache``, calling ``geocoder`` only on a miss.

    Raises:
        GeocodingError: the lookup (now or earlier in this run) failed.
    """
    if place in cache:
        return cache.get(place)

    if limiter is not None:
        limiter.wait()

    logger.debug(f"Geocoding place: {place}")
    try:
        coords = geocoder.geocode(place)
    except GeocodingError as exc:
        cache.store(place, exc)
        raise
    finally:
        if limiter is not None:
            limiter.mark()
    cache.store(place, coords)
    logger.debug(f"Geocoded {place} to {coords[0]}, {coords[1]}")
    return coords


__all__ = [
    "Coordinates",
    "Geocoder",
    "NominatimGeocoder",
    "GoogleGeocoder",
    "create_geocoder",
    "GeocodeCache",
    "RateLimiter",
    "geocode_cached",
]
