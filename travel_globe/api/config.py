# api/config.py
"""Configuration management for the trip pipeline.

Values come from the environment (optionally a ``.env`` file). Library code
never reads the environment itself: entry points build a config object here
and pass it down.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from travel_globe.api.errors import ConfigError

load_dotenv()

DEFAULT_ENDPOINT = "https://nominatim.openstreetmap.org/search"
DEFAULT_DELAY_MS = 1200
DEFAULT_USER_AGENT = "travel-globe-csv-import/1.0"
DEFAULT_TIMEOUT_S = 10.0

PROVIDERS = ("nominatim", "google")


def _env_number(name, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class GeocoderConfig:
    """Settings for the geocoding step of a CSV import."""

    provider: str = "nominatim"
    endpoint: str = DEFAULT_ENDPOINT
    delay_ms: int = DEFAULT_DELAY_MS  # minimum gap between external lookups
    user_agent: str = DEFAULT_USER_AGENT
    timeout_s: float = DEFAULT_TIMEOUT_S
    google_api_key: str = ""

    @property
    def delay_s(self) -> float:
        return self.delay_ms / 1000.0

    @classmethod
    def from_env(cls) -> "GeocoderConfig":
        """Read GEOCODER_* / GOOGLE_MAPS_API_KEY from the environment."""
        provider = os.getenv("GEOCODER_PROVIDER", "nominatim").strip().lower()
        if provider not in PROVIDERS:
            raise ConfigError(
                f"GEOCODER_PROVIDER must be one of: {', '.join(PROVIDERS)}"
            )
        return cls(
            provider=provider,
            endpoint=os.getenv("GEOCODER_ENDPOINT") or DEFAULT_ENDPOINT,
            delay_ms=_env_number("GEOCODER_DELAY_MS", DEFAULT_DELAY_MS, int),
            user_agent=os.getenv("GEOCODER_USER_AGENT") or DEFAULT_USER_AGENT,
            timeout_s=_env_number("GEOCODER_TIMEOUT_S", DEFAULT_TIMEOUT_S, float),
            google_api_key=os.getenv("GOOGLE_MAPS_API_KEY", ""),
        )


def get_trips_file() -> Optional[str]:
    """Path of a JSON file that replaces the built-in default trips, if any."""
    return os.getenv("TRAVEL_GLOBE_TRIPS_FILE") or None


def get_port():
    """Get port configuration."""
    return _env_number("PORT", 5000, int)
