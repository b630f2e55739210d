"""
Proximity engine - walk-time and security-wait estimates.

Features:
- Last known user location, kept in the TTL cache (10 min)
- Great-circle distance from the user to the departure airport
- Walk time at a fixed pace, tiered against time left before boarding
- Average security wait per airport, cached for 15 min
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from gatewatch.cache import TTLCache, location_cache_key, security_wait_cache_key
from gatewatch.clock import Clock, utc_now
from gatewatch.config import config
from gatewatch.errors import (
    AirportNotFoundError,
    FlightNotFoundError,
    LocationNotFoundError,
)
from gatewatch.repositories import AirportRepository, TrackedFlightRepository
from gatewatch.sync.resolver import StatusResolver
from gatewatch.urgency import UrgencyLevel, classify_walk_urgency, minutes_until
from gatewatch.validation import validate_airport_code, validate_coordinates

logger = logging.getLogger(__name__)

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """Great-circle distance between two points in meters."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def walk_minutes(distance_m: float, walking_speed_mps: float = 1.4) -> int:
    """Whole minutes to walk ``distance_m``, truncated."""
    return int(distance_m / walking_speed_mps / 60)


@dataclass
class WalkTimeEstimate:
    """Walk-time answer for one tracked flight."""
    flight_id: int
    distance_meters: float
    walk_time_minutes: int
    minutes_until_boarding: int
    urgency_level: UrgencyLevel
    recommended_action: str

    def to_dict(self) -> dict:
        return {
            'flight_id': self.flight_id,
            'distance_meters': round(self.distance_meters, 1),
            'walk_time_minutes': self.walk_time_minutes,
            'minutes_until_boarding': self.minutes_until_boarding,
            'urgency_level': self.urgency_level.value,
            'recommended_action': self.recommended_action,
        }


class ProximityEngine:
    """Location-aware estimates for travellers heading to their gate."""

    def __init__(
        self,
        cache: TTLCache,
        flights: TrackedFlightRepository,
        airports: AirportRepository,
        resolver: StatusResolver,
        clock: Clock = utc_now,
        walking_speed_mps: Optional[float] = None,
        location_ttl_seconds: Optional[float] = None,
        security_wait_ttl_seconds: Optional[float] = None,
    ):
        self.cache = cache
        self.flights = flights
        self.airports = airports
        self.resolver = resolver
        self.clock = clock
        self.walking_speed_mps = walking_speed_mps or config.proximity.walking_speed_mps
        self.location_ttl_seconds = location_ttl_seconds or config.cache.location_ttl_seconds
        self.security_wait_ttl_seconds = security_wait_ttl_seconds or config.cache.security_wait_ttl_seconds

    def update_location(self, user_id: int, latitude: Any, longitude: Any) -> dict:
        """Record the user's current position. Overwrites any previous one."""
        latitude, longitude = validate_coordinates(latitude, longitude)
        location = {
            'user_id': user_id,
            'latitude': latitude,
            'longitude': longitude,
            'timestamp': self.clock().isoformat(),
        }
        self.cache.set_json(location_cache_key(user_id), location, self.location_ttl_seconds)
        logger.debug(f'Location updated for user {user_id}')
        return location

    def location(self, user_id: int) -> dict:
        location = self.cache.get_json(location_cache_key(user_id))
        if location is None:
            raise LocationNotFoundError(f'No recent location for user {user_id}')
        return location

    def walk_time(self, user_id: int, flight_id: int) -> WalkTimeEstimate:
        """
        Estimate the walk to the departure airport for one of the user's flights.

        Raises LocationNotFoundError, FlightNotFoundError or
        AirportNotFoundError when an input is missing.
        """
        location = self.location(user_id)

        flight = self.flights.get(flight_id)
        if flight is None or flight.user_id != user_id:
            raise FlightNotFoundError(f'Tracked flight {flight_id} not found')

        airport = self.airports.get(flight.departure_airport)
        if airport is None:
            raise AirportNotFoundError(f'Airport {flight.departure_airport} not found')

        distance = haversine_distance_m(
            location['latitude'], location['longitude'],
            airport.latitude, airport.longitude,
        )
        walk = walk_minutes(distance, self.walking_speed_mps)

        status = self.resolver.resolve(flight.flight_number, flight.departure_date)
        remaining = minutes_until(status.boarding_time, self.clock())
        if remaining is None:
            raise FlightNotFoundError(f'No departure time known yet for {flight.flight_key}')

        urgency = classify_walk_urgency(walk, remaining)

        return WalkTimeEstimate(
            flight_id=flight.id,
            distance_meters=distance,
            walk_time_minutes=walk,
            minutes_until_boarding=remaining,
            urgency_level=urgency.level,
            recommended_action=urgency.recommended_action,
        )

    def security_wait(self, airport_code: str) -> dict:
        """Typical security wait for an airport, served from cache when fresh."""
        airport_code = validate_airport_code(airport_code)
        key = security_wait_cache_key(airport_code)

        cached = self.cache.get_json(key)
        if cached is not None:
            return cached

        airport = self.airports.get(airport_code)
        if airport is None:
            raise AirportNotFoundError(f'Airport {airport_code} not found')

        wait = {
            'airport_code': airport_code,
            'current_wait_time': airport.security_wait_avg,
            'timestamp': self.clock().isoformat(),
        }
        self.cache.set_json(key, wait, self.security_wait_ttl_seconds)
        return wait
