"""
Provider gateway - the single entry point for flight status lookups.

The configured provider name selects one adapter from a closed registry
when the gateway is built. An unknown name fails at startup rather than
on the first lookup.
"""

import logging
from datetime import date
from typing import Dict, Type

from gatewatch.clock import Clock, utc_now
from gatewatch.config import AviationConfig
from gatewatch.errors import UnsupportedProviderError
from gatewatch.models import FlightStatus
from gatewatch.providers.aviationstack import AviationStackProvider
from gatewatch.providers.base import ProviderAdapter
from gatewatch.providers.placeholders import AmadeusProvider, FlightAwareProvider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[ProviderAdapter]] = {
    AviationStackProvider.name: AviationStackProvider,
    FlightAwareProvider.name: FlightAwareProvider,
    AmadeusProvider.name: AmadeusProvider,
}


class ProviderGateway:
    """Wraps the active adapter and logs every lookup outcome."""

    def __init__(self, adapter: ProviderAdapter):
        self.adapter = adapter
        self._calls = 0
        self._errors = 0

    @property
    def provider_name(self) -> str:
        return self.adapter.name

    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        """
        Fetch one flight's canonical status from the active provider.

        Raises FlightNotFoundError or ProviderError (including
        ProviderNotImplementedError) from the adapter.
        """
        self._calls += 1
        try:
            status = self.adapter.fetch_status(flight_number, departure_date)
        except Exception:
            self._errors += 1
            raise

        logger.info(
            f'{self.provider_name}: {status.flight_key} '
            f'status={status.status.value} gate={status.gate or "-"} delay={status.delay_minutes}m'
        )
        return status

    @property
    def stats(self) -> dict:
        return {
            'provider': self.provider_name,
            'calls': self._calls,
            'errors': self._errors,
        }


def create_gateway(aviation: AviationConfig, clock: Clock = utc_now) -> ProviderGateway:
    """Build the gateway for the configured provider."""
    adapter_cls = PROVIDERS.get(aviation.provider)
    if adapter_cls is None:
        raise UnsupportedProviderError(
            f'Unsupported aviation API provider: {aviation.provider!r} '
            f'(expected one of {", ".join(sorted(PROVIDERS))})'
        )

    common = {
        'timeout_seconds': aviation.timeout_seconds,
        'boarding_offset_minutes': aviation.boarding_offset_minutes,
        'clock': clock,
    }

    if adapter_cls is AviationStackProvider:
        adapter = AviationStackProvider(
            api_key=aviation.aviationstack_key,
            base_url=aviation.aviationstack_url,
            **common,
        )
    elif adapter_cls is FlightAwareProvider:
        adapter = FlightAwareProvider(api_key=aviation.flightaware_key, **common)
    else:
        adapter = AmadeusProvider(
            client_id=aviation.amadeus_client_id,
            client_secret=aviation.amadeus_client_secret,
            **common,
        )

    logger.info(f'Aviation provider: {adapter.name}')
    return ProviderGateway(adapter)
