"""
Shared fixtures for the trip pipeline tests.

No test touches the network: geocoding goes through FakeGeocoder or a
mocked HTTP session.
"""

import copy

import pytest

from travel_globe.api.errors import GeocodingError
from travel_globe.api.services.trip_service import DEFAULT_TRIPS


class FakeGeocoder:
    """Geocoder stand-in that records every lookup it receives."""

    def __init__(self, places=None):
        self.places = places or {}
        self.calls = []

    def geocode(self, place):
        self.calls.append(place)
        if place not in self.places:
            raise GeocodingError("No results returned")
        return self.places[place]


@pytest.fixture
def sample_trips():
    """The built-in travel log, safe to mutate."""
    return copy.deepcopy(DEFAULT_TRIPS)


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder({
        "Paris, France": (48.8566, 2.3522),
        "Rome, Italy": (41.9028, 12.4964),
        "Kyoto, Japan": (35.0116, 135.7681),
    })


@pytest.fixture
def geocoder_env(monkeypatch):
    """Deterministic geocoder settings regardless of the developer's .env."""
    for name in ("GEOCODER_PROVIDER", "GEOCODER_ENDPOINT", "GEOCODER_USER_AGENT",
                 "GEOCODER_TIMEOUT_S", "GOOGLE_MAPS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEOCODER_DELAY_MS", "0")
