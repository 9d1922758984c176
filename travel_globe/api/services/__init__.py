from .trip_service import TripService, TripSelection

__all__ = ['TripService', 'TripSelection']
