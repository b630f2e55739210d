"""Tests for cache -> database -> provider status resolution."""

from datetime import date

import pytest

from gatewatch.cache import status_cache_key
from gatewatch.errors import FlightNotFoundError
from gatewatch.providers import ProviderGateway
from gatewatch.repositories import FlightStatusRepository
from gatewatch.sync import StatusResolver

from conftest import make_status

DAY = date(2025, 6, 1)
KEY = 'AA123_2025-06-01'


@pytest.fixture
def statuses(session_factory, clock):
    return FlightStatusRepository(session_factory, clock)


@pytest.fixture
def resolver(provider, statuses, cache):
    return StatusResolver(ProviderGateway(provider), statuses, cache, cache_ttl_seconds=300)


def test_cold_key_fetches_once_and_fills_both_tiers(resolver, provider, statuses, cache):
    provider.script(make_status(gate='B7'))

    status = resolver.resolve('AA123', DAY)

    assert status.gate == 'B7'
    assert provider.calls == [KEY]
    assert statuses.find_by_key(KEY).gate == 'B7'
    assert cache.get_json(status_cache_key(KEY))['gate'] == 'B7'


def test_cache_hit_never_calls_provider(resolver, provider, cache):
    cache.set_json(status_cache_key(KEY), make_status(gate='C2').to_dict(), 300)

    status = resolver.resolve('AA123', DAY)

    assert status.gate == 'C2'
    assert provider.calls == []
    assert resolver.stats['cache_hits'] == 1


def test_store_hit_writes_back_to_cache(resolver, provider, statuses, cache):
    statuses.upsert(make_status(gate='D9'))

    status = resolver.resolve('AA123', DAY)

    assert status.gate == 'D9'
    assert provider.calls == []
    assert cache.get_json(status_cache_key(KEY))['gate'] == 'D9'
    assert resolver.stats == {'cache_hits': 0, 'store_hits': 1, 'provider_fetches': 0}


def test_second_lookup_is_served_from_cache(resolver, provider):
    provider.script(make_status())

    resolver.resolve('AA123', DAY)
    resolver.resolve('AA123', DAY)

    assert provider.calls == [KEY]
    assert resolver.stats['cache_hits'] == 1


def test_provider_miss_propagates_and_stores_nothing(resolver, statuses):
    with pytest.raises(FlightNotFoundError):
        resolver.resolve('AA123', DAY)

    assert statuses.find_by_key(KEY) is None


def test_unreadable_cache_entry_counts_as_miss(resolver, statuses, cache, caplog):
    statuses.upsert(make_status(gate='E1'))
    cache.set(status_cache_key(KEY), b'not json', 300)

    status = resolver.resolve('AA123', DAY)

    assert status.gate == 'E1'
    assert 'unreadable cache entry' in caplog.text


def test_stored_status_round_trips_derived_boarding_time(resolver, statuses):
    saved = make_status()
    statuses.upsert(saved)

    stored = resolver.stored(KEY)

    assert stored.departure_time == saved.departure_time
    assert stored.boarding_time == saved.boarding_time
