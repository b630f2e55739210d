"""
Location and airport API endpoints.

Provides endpoints for:
- POST /api/location - Report the caller's current position
- GET /api/location/walk-time/<flight_id> - Walk time and urgency for a flight
- GET /api/airports/<code> - Airport reference data
- GET /api/airports/<code>/security-wait - Typical security wait
"""

import logging

from flask import Blueprint, jsonify

from gatewatch.api.common import current_user_id, get_services, json_body
from gatewatch.errors import AirportNotFoundError
from gatewatch.validation import validate_airport_code

logger = logging.getLogger(__name__)

location_bp = Blueprint('location', __name__, url_prefix='/api/location')

airports_bp = Blueprint('airports', __name__, url_prefix='/api/airports')


@location_bp.route('', methods=['POST'])
def update_location():
    """Body: latitude, longitude. Kept for 10 minutes."""
    user_id = current_user_id()
    body = json_body()
    location = get_services().proximity.update_location(
        user_id,
        body.get('latitude'),
        body.get('longitude'),
    )
    return jsonify(location)


@location_bp.route('/walk-time/<int:flight_id>', methods=['GET'])
def get_walk_time(flight_id: int):
    estimate = get_services().proximity.walk_time(current_user_id(), flight_id)
    return jsonify(estimate.to_dict())


@airports_bp.route('/<code>', methods=['GET'])
def get_airport(code: str):
    code = validate_airport_code(code)
    airport = get_services().airports.get(code)
    if airport is None:
        raise AirportNotFoundError(f'Airport {code} not found')
    return jsonify(airport.to_dict())


@airports_bp.route('/<code>/security-wait', methods=['GET'])
def get_security_wait(code: str):
    return jsonify(get_services().proximity.security_wait(code))
