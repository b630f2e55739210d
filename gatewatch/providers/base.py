"""
Provider adapter contract.

Every aviation data source implements ``fetch_status`` and returns the
canonical ``FlightStatus``. Adapters raise:

- FlightNotFoundError  the provider has no such flight on that date
- ProviderError        timeout, HTTP failure, malformed response
- ProviderNotImplementedError  adapter is a placeholder
"""

from abc import ABC, abstractmethod
from datetime import date

from gatewatch.clock import Clock, utc_now
from gatewatch.models import FlightStatus
from gatewatch.models.flight_status import DEFAULT_BOARDING_OFFSET_MINUTES


class ProviderAdapter(ABC):
    """Base class for aviation data provider adapters."""

    #: Configuration value that selects this adapter
    name: str = ''

    def __init__(
        self,
        timeout_seconds: float = 10.0,
        boarding_offset_minutes: int = DEFAULT_BOARDING_OFFSET_MINUTES,
        clock: Clock = utc_now,
    ):
        self.timeout_seconds = timeout_seconds
        self.boarding_offset_minutes = boarding_offset_minutes
        self.clock = clock

    @abstractmethod
    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        """Fetch and canonicalize one flight's status snapshot."""
