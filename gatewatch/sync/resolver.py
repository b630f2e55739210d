"""
Status resolver - layered flight status lookup.

Lookup order:
1. TTL cache     hit -> return as is
2. Database      hit -> write back to cache, return
3. Provider      hit -> upsert to database, write back to cache, return

The provider is the slowest and most rate-limited dependency, so the cache
and the database absorb almost all reads. A snapshot always comes whole
from one source; fields are never merged across tiers.

Cache trouble is never fatal (the database stays authoritative): a broken
cache read counts as a miss and a failed write-back is only logged.
"""

import logging
from datetime import date
from typing import Optional

from gatewatch.cache import TTLCache, status_cache_key
from gatewatch.config import config
from gatewatch.models import FlightStatus, make_flight_key
from gatewatch.providers import ProviderGateway
from gatewatch.repositories import FlightStatusRepository

logger = logging.getLogger(__name__)


class StatusResolver:
    """Cache -> database -> provider resolution for one flight key."""

    def __init__(
        self,
        provider: ProviderGateway,
        statuses: FlightStatusRepository,
        cache: TTLCache,
        cache_ttl_seconds: Optional[float] = None,
    ):
        self.provider = provider
        self.statuses = statuses
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds or config.cache.status_ttl_seconds

        # Statistics
        self._cache_hits = 0
        self._store_hits = 0
        self._provider_fetches = 0

    def resolve(self, flight_number: str, departure_date: date) -> FlightStatus:
        """
        Return the current status for a flight.

        Raises FlightNotFoundError / ProviderError when the provider has to
        be consulted and fails, PersistenceError when the database does.
        """
        flight_key = make_flight_key(flight_number, departure_date)

        cached = self.cached(flight_key)
        if cached is not None:
            self._cache_hits += 1
            logger.debug(f'Status cache hit for {flight_key}')
            return cached

        stored = self.stored(flight_key)
        if stored is not None:
            self._store_hits += 1
            logger.debug(f'Status store hit for {flight_key}')
            self.cache_status(stored)
            return stored

        logger.info(f'Status miss for {flight_key}, fetching from provider')
        status = self.fetch_fresh(flight_number, departure_date)
        self.statuses.upsert(status)
        self.cache_status(status)
        return status

    def cached(self, flight_key: str) -> Optional[FlightStatus]:
        """Status from the cache only, or None."""
        try:
            data = self.cache.get_json(status_cache_key(flight_key))
            return FlightStatus.from_dict(data) if data else None
        except Exception as e:
            logger.warning(f'Ignoring unreadable cache entry for {flight_key}: {e}')
            return None

    def stored(self, flight_key: str) -> Optional[FlightStatus]:
        """Status from the database only, or None. No provider call."""
        return self.statuses.find_by_key(flight_key)

    def fetch_fresh(self, flight_number: str, departure_date: date) -> FlightStatus:
        """Status straight from the provider, bypassing cache and database."""
        self._provider_fetches += 1
        return self.provider.fetch_status(flight_number, departure_date)

    def save(self, status: FlightStatus) -> None:
        """Upsert ``status`` and refresh its cache entry."""
        self.statuses.upsert(status)
        self.cache_status(status)

    def cache_status(self, status: FlightStatus) -> bool:
        """Write ``status`` to the cache. Failures are logged, not raised."""
        try:
            self.cache.set_json(
                status_cache_key(status.flight_key),
                status.to_dict(),
                self.cache_ttl_seconds,
            )
            return True
        except Exception as e:
            logger.error(f'Failed to cache status for {status.flight_key}: {e}')
            return False

    @property
    def stats(self) -> dict:
        return {
            'cache_hits': self._cache_hits,
            'store_hits': self._store_hits,
            'provider_fetches': self._provider_fetches,
        }
