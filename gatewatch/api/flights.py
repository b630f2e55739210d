"""
Flight tracking API endpoints.

Provides endpoints for:
- POST /api/flights/track - Start tracking a flight
- GET /api/flights - List the caller's tracked flights
- GET /api/flights/status/<flight_number>/<date> - Current status with countdowns
- DELETE /api/flights/<id> - Stop tracking a flight
"""

import logging

from flask import Blueprint, jsonify

from gatewatch.api.common import current_user_id, get_services, json_body

logger = logging.getLogger(__name__)

flights_bp = Blueprint('flights', __name__, url_prefix='/api/flights')


@flights_bp.route('/track', methods=['POST'])
def track_flight():
    """
    Start tracking a flight.

    Body: flight_number, departure_date (YYYY-MM-DD), departure_airport,
    arrival_airport. The flight is checked against the provider first.
    """
    user_id = current_user_id()
    body = json_body()

    tracked = get_services().tracker.track_flight(
        user_id,
        body.get('flight_number'),
        body.get('departure_date'),
        body.get('departure_airport'),
        body.get('arrival_airport'),
    )
    return jsonify(tracked.to_dict()), 201


@flights_bp.route('', methods=['GET'])
def list_flights():
    """List the caller's active tracked flights."""
    flights = get_services().tracker.list_flights(current_user_id())
    return jsonify({
        'flights': [f.to_dict() for f in flights],
        'count': len(flights),
    })


@flights_bp.route('/status/<flight_number>/<date>', methods=['GET'])
def get_flight_status(flight_number: str, date: str):
    """
    Current status of a flight.

    Served from cache or database when possible; only a cold flight
    reaches the provider.
    """
    view = get_services().tracker.flight_status(flight_number, date)
    return jsonify(view.to_dict())


@flights_bp.route('/<int:flight_id>', methods=['DELETE'])
def untrack_flight(flight_id: int):
    get_services().tracker.untrack_flight(current_user_id(), flight_id)
    return jsonify({'message': 'Flight untracked', 'id': flight_id})
