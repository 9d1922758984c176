# travel_globe/api/errors.py
"""Exception hierarchy shared by the importer, codec and CLI."""


class TravelGlobeError(Exception):
    """Base class for every error raised by travel_globe."""


class ConfigError(TravelGlobeError):
    """Environment configuration could not be parsed."""


class InvalidDate(TravelGlobeError, ValueError):
    """A CSV row has a missing or unparsable date. Aborts the import run."""


class GeocodingError(TravelGlobeError):
    """A place name could not be resolved to usable coordinates."""


class DecodeFailure(TravelGlobeError, ValueError):
    """A share token did not decode to a JSON array."""


class TripFileError(TravelGlobeError):
    """A trips JSON file is unreadable, not JSON, or not an array."""


__all__ = [
    "TravelGlobeError",
    "ConfigError",
    "InvalidDate",
    "GeocodingError",
    "DecodeFailure",
    "TripFileError",
]
