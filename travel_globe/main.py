"""
Travel Globe – web entry point

* Flask app serving the trip pipeline to the globe front end.
* The page reads `?trips=<token>`; `/globe/api/trips` decodes, sanitizes and
  checks it, falling back to the default log when the token is bad.
* Run locally with `python -m travel_globe.main`.
"""

import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

from travel_globe.api.config import get_port, get_trips_file
from travel_globe.api.services.trip_service import TripService
from travel_globe.routes import create_trips_blueprint

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logger = logging.getLogger(__name__)


def create_app(default_trips=None):
    """Build the Flask app.

    Args:
        default_trips: Fallback collection; loaded from TRAVEL_GLOBE_TRIPS_FILE
            or the built-in sample log when omitted
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    # CORS so the static globe page can be hosted elsewhere
    CORS(app, origins="*")

    if default_trips is None:
        default_trips = TripService.load_default_trips(get_trips_file())
    app.register_blueprint(create_trips_blueprint(default_trips))
    logger.info(f"Travel globe app ready with {len(default_trips)} default trips")
    return app


# --------------------------------------------------------------------------- #
# Local development runner ( `python -m travel_globe.main` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    port = get_port()
    logger.info("Starting travel globe on http://localhost:%d", port)
    create_app().run(host="0.0.0.0", port=port, debug=False)


__all__ = ["create_app"]
