# travel_globe/routes/trips.py
"""Trip routes and blueprint configuration."""

from flask import Blueprint, jsonify, request

from travel_globe.api import codec
from travel_globe.api.services.trip_service import TripService


def create_trips_blueprint(default_trips):
    """Create and configure the trips blueprint.

    Args:
        default_trips: Fallback trip collection used when no valid
            ``trips`` token is supplied

    Returns:
        Configured Flask Blueprint
    """
    trips_bp = Blueprint("trips", __name__, url_prefix="/globe")

    def _selection():
        return TripService.resolve_trips(request.args.get(codec.QUERY_PARAM), default_trips)

    @trips_bp.route("/api/trips")
    def api_trips():
        """Sanitized trips for the globe, optionally filtered by ``q``."""
        selection = _selection()
        return jsonify({
            "source": selection.source,
            "trips": TripService.filter_trips(selection.trips, request.args.get("q")),
            "summary": TripService.summarize(selection.trips),
            "diagnostics": selection.diagnostics,
        })

    @trips_bp.route("/api/layers")
    def api_layers():
        """Point and label layers for the globe renderer."""
        selection = _selection()
        return jsonify({
            "source": selection.source,
            "points": TripService.build_points(selection.trips),
            "labels": TripService.build_labels(selection.trips),
        })

    @trips_bp.route("/api/share", methods=["POST"])
    def api_share():
        """Compress a posted trip array into a share token."""
        data = request.get_json(silent=True)
        if not isinstance(data, list):
            return jsonify({"error": "Request body must be a JSON array of trips"}), 400
        token = codec.encode(data)
        return jsonify({"token": token, "query": codec.share_query(token)})

    @trips_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "travel-globe"})

    return trips_bp


__all__ = ['create_trips_blueprint']
