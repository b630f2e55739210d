"""
AviationStack adapter - real-time flight status over HTTP.

Endpoint: GET {base_url}/flights?access_key=...&flight_iata=...&flight_date=...

Response shape (only the parts we read):
    {
      "data": [{
        "flight_date": "2025-06-01",
        "flight_status": "scheduled",
        "departure": {"iata": "JFK", "terminal": "8", "gate": "A1",
                      "delay": 15, "scheduled": "2025-06-01T10:00:00+00:00"},
        "arrival":   {"iata": "LAX", "scheduled": "2025-06-01T13:30:00+00:00"},
        "airline":   {"name": "American Airlines", "iata": "AA"},
        "flight":    {"number": "123", "iata": "AA123"}
      }]
    }

Errors come back either as a non-200 status or as a 200 with an
``error`` object instead of ``data``.
"""

import logging
from datetime import date, datetime
from typing import Optional

import requests

from gatewatch.clock import as_utc
from gatewatch.errors import FlightNotFoundError, ProviderError
from gatewatch.models import FlightLifecycle, FlightStatus, make_flight_key
from gatewatch.models.flight_status import AIRLINE_CODE_LENGTH, GATE_LENGTH, TERMINAL_LENGTH
from gatewatch.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

# AviationStack flight_status -> lifecycle shown to travellers
STATUS_MAP = {
    'scheduled': FlightLifecycle.ON_TIME,
    'active': FlightLifecycle.BOARDING_SOON,
    'landed': FlightLifecycle.ARRIVED,
    'cancelled': FlightLifecycle.CANCELLED,
    'incident': FlightLifecycle.DELAYED,
    'diverted': FlightLifecycle.DIVERTED,
}


def map_status(api_status: Optional[str]) -> FlightLifecycle:
    """Map a provider status string; unrecognized values become UNKNOWN."""
    if not api_status:
        return FlightLifecycle.UNKNOWN
    return STATUS_MAP.get(api_status.strip().lower(), FlightLifecycle.UNKNOWN)


class AviationStackProvider(ProviderAdapter):
    """
    Client for the AviationStack flights API.

    Uses a persistent requests session and a per-call timeout so a
    stalled provider can't hang a scheduler cycle.
    """

    name = 'aviationstack'

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = 'http://api.aviationstack.com/v1',
        session: Optional[requests.Session] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()

        if not self.api_key:
            logger.warning('AviationStack API key not configured - lookups will fail')

    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        if not self.api_key:
            raise ProviderError('AviationStack API key not configured')

        date_str = departure_date.isoformat()
        params = {
            'access_key': self.api_key,
            'flight_iata': flight_number,
            'flight_date': date_str,
        }

        logger.debug(f'Fetching AviationStack status for {flight_number} on {date_str}')

        try:
            response = self.session.get(
                f'{self.base_url}/flights',
                params=params,
                timeout=self.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f'AviationStack timeout for {flight_number}')
            raise ProviderError(f'AviationStack timed out after {self.timeout_seconds}s') from e
        except requests.RequestException as e:
            logger.error(f'AviationStack request failed: {e}')
            raise ProviderError(f'AviationStack request failed: {e}') from e

        if response.status_code != 200:
            logger.warning(f'AviationStack API error: {response.status_code}')
            raise ProviderError(f'AviationStack returned HTTP {response.status_code}')

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError('AviationStack returned invalid JSON') from e

        if not isinstance(data, dict):
            raise ProviderError('AviationStack returned an unexpected payload')

        if data.get('error'):
            logger.warning(f'AviationStack API error: {data["error"]}')
            raise ProviderError(f'AviationStack error: {data["error"]}')

        flights = data.get('data') or []
        if not flights:
            raise FlightNotFoundError(f'Flight {flight_number} not found on {date_str}')

        if not isinstance(flights, list) or not isinstance(flights[0], dict):
            raise ProviderError(f'AviationStack returned a malformed record for {flight_number}')

        # Use first matching flight
        try:
            return self._to_status(flight_number, date_str, flights[0])
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f'Malformed AviationStack record for {flight_number}: {e}')
            raise ProviderError(f'AviationStack returned a malformed record for {flight_number}') from e

    def _to_status(self, flight_number: str, date_str: str, flight: dict) -> FlightStatus:
        """Canonicalize one AviationStack flight record."""
        departure = flight.get('departure') or {}
        arrival = flight.get('arrival') or {}
        airline = flight.get('airline') or {}

        return FlightStatus(
            flight_key=make_flight_key(flight_number, date_str),
            flight_number=flight_number,
            airline_code=self._text(airline.get('iata'), AIRLINE_CODE_LENGTH),
            status=map_status(flight.get('flight_status')),
            gate=self._text(departure.get('gate'), GATE_LENGTH),
            terminal=self._text(departure.get('terminal'), TERMINAL_LENGTH),
            departure_time=self._parse_datetime(departure.get('scheduled')),
            arrival_time=self._parse_datetime(arrival.get('scheduled')),
            delay_minutes=self._parse_delay(departure.get('delay')),
            last_updated=self.clock(),
            raw_data=flight,
            boarding_offset_minutes=self.boarding_offset_minutes,
        )

    def _parse_datetime(self, dt_str: Optional[str]) -> Optional[datetime]:
        """Parse datetime string from API."""
        if not dt_str:
            return None
        if not isinstance(dt_str, str):
            logger.warning(f'Unparseable AviationStack timestamp: {dt_str!r}')
            return None
        try:
            # AviationStack uses ISO format
            return as_utc(datetime.fromisoformat(dt_str.replace('Z', '+00:00')))
        except ValueError:
            logger.warning(f'Unparseable AviationStack timestamp: {dt_str!r}')
            return None

    @staticmethod
    def _text(value, max_length: int) -> str:
        """Provider text clamped to its column width."""
        if value is None:
            return ''
        return str(value).strip()[:max_length]

    @staticmethod
    def _parse_delay(value) -> int:
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0
