"""
Provider adapters that are selectable but not integrated yet.

They fail closed so a misconfigured deployment surfaces a provider
error on every lookup instead of silently serving nothing.
"""

from datetime import date
from typing import Optional

from gatewatch.errors import ProviderNotImplementedError
from gatewatch.models import FlightStatus
from gatewatch.providers.base import ProviderAdapter


class FlightAwareProvider(ProviderAdapter):
    name = 'flightaware'

    def __init__(self, api_key: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key

    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        raise ProviderNotImplementedError('FlightAware integration not implemented yet')


class AmadeusProvider(ProviderAdapter):
    name = 'amadeus'

    def __init__(self, client_id: Optional[str] = None, client_secret: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.client_id = client_id
        self.client_secret = client_secret

    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        raise ProviderNotImplementedError('Amadeus integration not implemented yet')
