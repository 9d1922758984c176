"""
Tests for geocoding providers, the per-run cache and the rate limiter.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
from googlemaps import exceptions as gmaps_exceptions

from travel_globe.api.config import GeocoderConfig
from travel_globe.api.errors import ConfigError, GeocodingError
from travel_globe.api.geocoding import (
    GeocodeCache,
    GoogleGeocoder,
    NominatimGeocoder,
    RateLimiter,
    create_geocoder,
    geocode_cached,
)
from tests.conftest import FakeGeocoder


def fake_response(payload=None, status=200, reason="OK", json_error=False):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.reason = reason
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def nominatim():
    config = GeocoderConfig(endpoint="https://geo.example/search", user_agent="tests/1.0", timeout_s=3)
    return NominatimGeocoder(config, session=requests.Session())


class TestNominatimGeocoder:
    def test_first_result(self, nominatim):
        payload = [{"lat": "48.8566", "lon": "2.3522"}, {"lat": "0", "lon": "0"}]
        with patch.object(nominatim.session, "get", return_value=fake_response(payload)) as get:
            assert nominatim.geocode("Paris, France") == (48.8566, 2.3522)

        get.assert_called_once_with(
            "https://geo.example/search",
            params={"format": "json", "limit": "1", "q": "Paris, France"},
            timeout=3,
        )

    def test_identifying_headers(self, nominatim):
        assert nominatim.session.headers["User-Agent"] == "tests/1.0"
        assert nominatim.session.headers["Accept"] == "application/json"

    @pytest.mark.parametrize("response, message", [
        (fake_response(status=503, reason="Service Unavailable"), "503 Service Unavailable"),
        (fake_response([]), "No results"),
        (fake_response({"lat": "1", "lon": "2"}), "No results"),
        (fake_response(["oops"]), "Unexpected result shape"),
        (fake_response(json_error=True), "not JSON"),
        (fake_response([{"lat": "95.0", "lon": "2"}]), "Latitude 95.0 out of bounds"),
        (fake_response([{"lat": "45", "lon": "-181"}]), "Longitude -181.0 out of bounds"),
        (fake_response([{"lat": "abc", "lon": "2"}]), "Non-numeric"),
        (fake_response([{"lon": "2"}]), "Non-numeric"),
    ])
    def test_lookup_failures(self, nominatim, response, message):
        with patch.object(nominatim.session, "get", return_value=response):
            with pytest.raises(GeocodingError, match=message):
                nominatim.geocode("Nowhere")

    def test_network_error(self, nominatim):
        with patch.object(nominatim.session, "get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(GeocodingError, match="request failed"):
                nominatim.geocode("Paris")


class TestGoogleGeocoder:
    def test_first_result(self):
        client = MagicMock()
        client.geocode.return_value = [{"geometry": {"location": {"lat": 41.9028, "lng": 12.4964}}}]
        geocoder = GoogleGeocoder(GeocoderConfig(provider="google"), client=client)

        assert geocoder.geocode("Rome, Italy") == (41.9028, 12.4964)
        client.geocode.assert_called_once_with("Rome, Italy", language="en")

    def test_empty_results(self):
        client = MagicMock()
        client.geocode.return_value = []
        with pytest.raises(GeocodingError, match="No results"):
            GoogleGeocoder(GeocoderConfig(), client=client).geocode("Atlantis")

    def test_api_error(self):
        client = MagicMock()
        client.geocode.side_effect = gmaps_exceptions.ApiError("OVER_QUERY_LIMIT")
        with pytest.raises(GeocodingError):
            GoogleGeocoder(GeocoderConfig(), client=client).geocode("Rome")

    def test_bad_shape(self):
        client = MagicMock()
        client.geocode.return_value = [{"formatted_address": "Rome"}]
        with pytest.raises(GeocodingError, match="Unexpected result shape"):
            GoogleGeocoder(GeocoderConfig(), client=client).geocode("Rome")

    def test_requires_api_key(self):
        with pytest.raises(ConfigError, match="GOOGLE_MAPS_API_KEY"):
            GoogleGeocoder(GeocoderConfig(provider="google", google_api_key=""))


class TestCreateGeocoder:
    def test_default_is_nominatim(self):
        assert isinstance(create_geocoder(GeocoderConfig()), NominatimGeocoder)

    def test_google_without_key(self):
        with pytest.raises(ConfigError):
            create_geocoder(GeocoderConfig(provider="google"))

    def test_unknown_provider(self):
        with pytest.raises(ConfigError):
            create_geocoder(GeocoderConfig(provider="bing"))


class TestGeocodeCached:
    def test_one_lookup_per_place(self, fake_geocoder):
        cache = GeocodeCache()
        first = geocode_cached("Paris, France", fake_geocoder, cache)
        second = geocode_cached("Paris, France", fake_geocoder, cache)

        assert first == second
        assert fake_geocoder.calls == ["Paris, France"]
        assert (cache.misses, cache.hits) == (1, 1)

    def test_exact_string_key(self, fake_geocoder):
        cache = GeocodeCache()
        geocode_cached("Paris, France", fake_geocoder, cache)
        with pytest.raises(GeocodingError):
            geocode_cached("paris, france", fake_geocoder, cache)
        assert fake_geocoder.calls == ["Paris, France", "paris, france"]

    def test_failures_are_memoized(self):
        geocoder = FakeGeocoder()
        cache = GeocodeCache()
        for _ in range(3):
            with pytest.raises(GeocodingError):
                geocode_cached("Atlantis", geocoder, cache)
        assert geocoder.calls == ["Atlantis"]

    def test_cache_hits_skip_rate_limit(self, fake_geocoder):
        limiter = MagicMock()
        cache = GeocodeCache()
        geocode_cached("Rome, Italy", fake_geocoder, cache, limiter)
        geocode_cached("Rome, Italy", fake_geocoder, cache, limiter)
        assert limiter.wait.call_count == 1


class TestRateLimiter:
    def test_first_call_does_not_wait(self):
        sleeps = []
        RateLimiter(1.2, sleep=sleeps.append, clock=lambda: 0.0).wait()
        assert sleeps == []

    def test_waits_for_remaining_interval(self):
        sleeps = []
        now = [100.0]
        limiter = RateLimiter(1.2, sleep=sleeps.append, clock=lambda: now[0])
        limiter.wait()
        limiter.mark()
        now[0] = 100.5
        limiter.wait()
        assert sleeps == [pytest.approx(0.7)]

    def test_no_wait_when_interval_elapsed(self):
        sleeps = []
        now = [0.0]
        limiter = RateLimiter(1.2, sleep=sleeps.append, clock=lambda: now[0])
        limiter.wait()
        limiter.mark()
        now[0] = 5.0
        limiter.wait()
        assert sleeps == []

    def test_zero_interval(self):
        sleeps = []
        limiter = RateLimiter(0, sleep=sleeps.append, clock=lambda: 0.0)
        limiter.wait()
        limiter.mark()
        limiter.wait()
        assert sleeps == []

    def test_interval_counts_from_end_of_slow_lookup(self):
        now = [0.0]
        sleeps = []

        def sleep(seconds):
            sleeps.append(seconds)
            now[0] += seconds

        class SlowGeocoder(FakeGeocoder):
            def geocode(self, place):
                now[0] += 1.0
                return super().geocode(place)

        geocoder = SlowGeocoder({"A": (1.0, 1.0), "B": (2.0, 2.0)})
        limiter = RateLimiter(1.2, sleep=sleep, clock=lambda: now[0])
        cache = GeocodeCache()

        geocode_cached("A", geocoder, cache, limiter)
        geocode_cached("B", geocoder, cache, limiter)
        assert sleeps == [pytest.approx(1.2)]

    def test_failed_lookup_still_paces(self):
        sleeps = []
        limiter = RateLimiter(1.2, sleep=sleeps.append, clock=lambda: 0.0)
        cache = GeocodeCache()
        geocoder = FakeGeocoder({"B": (2.0, 2.0)})

        with pytest.raises(GeocodingError):
            geocode_cached("Atlantis", geocoder, cache, limiter)
        geocode_cached("B", geocoder, cache, limiter)
        assert sleeps == [1.2]
