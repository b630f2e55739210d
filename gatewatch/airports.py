"""
Airport reference data.

Embedded data for major airports, loaded into the airports table at
startup. Coordinates are the terminal-area reference point used for
walk-time estimates; security waits are typical averages in minutes.

Usage:
    from gatewatch.airports import seed_airports

    seed_airports()
"""

import logging
from typing import Dict, Iterator, Optional

from gatewatch.repositories import AirportRepository

logger = logging.getLogger(__name__)


# (Name, City, Country, Timezone, Security wait avg, Latitude, Longitude)
AIRPORT_INFO: Dict[str, tuple] = {
    'ATL': ('Hartsfield-Jackson Atlanta International', 'Atlanta', 'United States', 'America/New_York', 25, 33.6407, -84.4277),
    'BOS': ('Logan International', 'Boston', 'United States', 'America/New_York', 20, 42.3656, -71.0096),
    'DEN': ('Denver International', 'Denver', 'United States', 'America/Denver', 25, 39.8561, -104.6737),
    'DFW': ('Dallas/Fort Worth International', 'Dallas', 'United States', 'America/Chicago', 20, 32.8998, -97.0403),
    'EWR': ('Newark Liberty International', 'Newark', 'United States', 'America/New_York', 25, 40.6895, -74.1745),
    'IAH': ('George Bush Intercontinental', 'Houston', 'United States', 'America/Chicago', 20, 29.9902, -95.3368),
    'JFK': ('John F. Kennedy International', 'New York', 'United States', 'America/New_York', 30, 40.6413, -73.7781),
    'LAS': ('Harry Reid International', 'Las Vegas', 'United States', 'America/Los_Angeles', 25, 36.0840, -115.1537),
    'LAX': ('Los Angeles International', 'Los Angeles', 'United States', 'America/Los_Angeles', 30, 33.9416, -118.4085),
    'MCO': ('Orlando International', 'Orlando', 'United States', 'America/New_York', 30, 28.4312, -81.3081),
    'MIA': ('Miami International', 'Miami', 'United States', 'America/New_York', 25, 25.7959, -80.2870),
    'ORD': ("O'Hare International", 'Chicago', 'United States', 'America/Chicago', 25, 41.9742, -87.9073),
    'PHX': ('Phoenix Sky Harbor International', 'Phoenix', 'United States', 'America/Phoenix', 15, 33.4342, -112.0116),
    'SEA': ('Seattle-Tacoma International', 'Seattle', 'United States', 'America/Los_Angeles', 25, 47.4502, -122.3088),
    'SFO': ('San Francisco International', 'San Francisco', 'United States', 'America/Los_Angeles', 20, 37.6213, -122.3790),
    'YYZ': ('Toronto Pearson International', 'Toronto', 'Canada', 'America/Toronto', 20, 43.6777, -79.6248),
    'LHR': ('Heathrow', 'London', 'United Kingdom', 'Europe/London', 15, 51.4700, -0.4543),
    'CDG': ('Paris Charles de Gaulle', 'Paris', 'France', 'Europe/Paris', 20, 49.0097, 2.5479),
    'FRA': ('Frankfurt', 'Frankfurt', 'Germany', 'Europe/Berlin', 15, 50.0379, 8.5622),
    'AMS': ('Amsterdam Schiphol', 'Amsterdam', 'Netherlands', 'Europe/Amsterdam', 20, 52.3105, 4.7683),
    'DXB': ('Dubai International', 'Dubai', 'United Arab Emirates', 'Asia/Dubai', 15, 25.2532, 55.3657),
    'HND': ('Tokyo Haneda', 'Tokyo', 'Japan', 'Asia/Tokyo', 10, 35.5494, 139.7798),
    'SIN': ('Singapore Changi', 'Singapore', 'Singapore', 'Asia/Singapore', 10, 1.3644, 103.9915),
    'SYD': ('Sydney Kingsford Smith', 'Sydney', 'Australia', 'Australia/Sydney', 15, -33.9399, 151.1753),
}


def airport_records() -> Iterator[dict]:
    """Embedded airport data as airports table rows."""
    for code, (name, city, country, tz, wait, lat, lon) in AIRPORT_INFO.items():
        yield {
            'code': code,
            'name': name,
            'city': city,
            'country': country,
            'timezone': tz,
            'security_wait_avg': wait,
            'latitude': lat,
            'longitude': lon,
        }


def seed_airports(repository: Optional[AirportRepository] = None) -> int:
    """
    Upsert the embedded airport data.

    Safe to run on every startup. Returns count of records written.
    """
    repository = repository or AirportRepository()
    loaded = repository.upsert_many(airport_records())
    logger.info(f'Seeded {loaded} airports')
    return loaded
