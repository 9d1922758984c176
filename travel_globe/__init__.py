"""Travel Globe – trip-data pipeline behind the interactive travel log globe."""

__version__ = "1.0.0"
