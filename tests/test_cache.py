"""Tests for the in-memory TTL cache."""

import pytest

from gatewatch.cache import TTLCache


@pytest.fixture
def clock():
    return [0.0]


@pytest.fixture
def ttl_cache(clock):
    return TTLCache(max_entries=10, timer=lambda: clock[0])


def test_entries_expire_after_ttl(ttl_cache, clock):
    ttl_cache.set('flight:AA1_2025-06-01', b'payload', 300)

    clock[0] = 299.9
    assert ttl_cache.get('flight:AA1_2025-06-01') == b'payload'

    clock[0] = 300
    assert ttl_cache.get('flight:AA1_2025-06-01') is None


def test_values_must_be_bytes(ttl_cache):
    with pytest.raises(TypeError):
        ttl_cache.set('key', 'not bytes', 10)


def test_json_helpers(ttl_cache):
    ttl_cache.set_json('user:location:1', {'latitude': 1.5}, 60)

    assert ttl_cache.get_json('user:location:1') == {'latitude': 1.5}
    assert ttl_cache.get_json('missing') is None


def test_over_capacity_evicts_soonest_to_expire(ttl_cache):
    for i in range(11):
        ttl_cache.set(f'k{i}', b'x', 100 + i)

    assert ttl_cache.get('k0') is None
    assert ttl_cache.get('k10') == b'x'
    assert ttl_cache.stats['entries'] == 10


def test_delete_and_stats(ttl_cache):
    ttl_cache.set('a', b'1', 10)
    ttl_cache.get('a')
    ttl_cache.delete('a')
    ttl_cache.get('a')

    assert ttl_cache.stats['hits'] == 1
    assert ttl_cache.stats['misses'] == 1
    assert ttl_cache.stats['hit_rate'] == 0.5
