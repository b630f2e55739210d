"""
Aviation data providers.

Adapters normalize each provider's response into the canonical
FlightStatus; the gateway picks one adapter from configuration.
"""

from gatewatch.providers.aviationstack import AviationStackProvider, map_status
from gatewatch.providers.base import ProviderAdapter
from gatewatch.providers.gateway import PROVIDERS, ProviderGateway, create_gateway
from gatewatch.providers.placeholders import AmadeusProvider, FlightAwareProvider

__all__ = [
    'AviationStackProvider',
    'AmadeusProvider',
    'FlightAwareProvider',
    'PROVIDERS',
    'ProviderAdapter',
    'ProviderGateway',
    'create_gateway',
    'map_status',
]
