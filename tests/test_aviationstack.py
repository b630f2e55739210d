"""Tests for the AviationStack adapter and the provider gateway."""

from datetime import date, datetime, timezone

import pytest
import requests

from gatewatch.config import AviationConfig
from gatewatch.errors import (
    FlightNotFoundError,
    ProviderError,
    ProviderNotImplementedError,
    UnsupportedProviderError,
)
from gatewatch.models import FlightLifecycle
from gatewatch.providers import AviationStackProvider, create_gateway, map_status

from conftest import START

DAY = date(2025, 6, 1)

FLIGHT = {
    'flight_date': '2025-06-01',
    'flight_status': 'scheduled',
    'departure': {
        'iata': 'JFK',
        'terminal': '8',
        'gate': 'A1',
        'delay': 15,
        'scheduled': '2025-06-01T15:00:00+00:00',
    },
    'arrival': {'iata': 'LAX', 'scheduled': '2025-06-01T18:30:00+00:00'},
    'airline': {'name': 'American Airlines', 'iata': 'AA'},
    'flight': {'number': '123', 'iata': 'AA123'},
}


class _Response:
    def __init__(self, payload=None, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def adapter():
    return AviationStackProvider(api_key='test-key', clock=lambda: START)


def _respond(monkeypatch, adapter, response=None, error=None):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({'url': url, 'params': params, 'timeout': timeout})
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(adapter.session, 'get', fake_get)
    return calls


def test_fetch_status_canonicalizes_record(monkeypatch, adapter):
    calls = _respond(monkeypatch, adapter, _Response({'data': [FLIGHT]}))

    status = adapter.fetch_status('AA123', DAY)

    assert calls[0]['url'] == 'http://api.aviationstack.com/v1/flights'
    assert calls[0]['params'] == {'access_key': 'test-key', 'flight_iata': 'AA123', 'flight_date': '2025-06-01'}
    assert calls[0]['timeout'] == 10.0

    assert status.flight_key == 'AA123_2025-06-01'
    assert status.airline_code == 'AA'
    assert status.status is FlightLifecycle.ON_TIME
    assert status.gate == 'A1'
    assert status.terminal == '8'
    assert status.delay_minutes == 15
    assert status.departure_time == datetime(2025, 6, 1, 15, 0, tzinfo=timezone.utc)
    assert status.boarding_time == datetime(2025, 6, 1, 14, 20, tzinfo=timezone.utc)
    assert status.last_updated == START
    assert status.raw_data == FLIGHT


def test_empty_data_is_flight_not_found(monkeypatch, adapter):
    _respond(monkeypatch, adapter, _Response({'data': []}))

    with pytest.raises(FlightNotFoundError):
        adapter.fetch_status('AA123', DAY)


@pytest.mark.parametrize(
    "response",
    [
        _Response({'error': {'code': 'usage_limit_reached'}}),
        _Response(None, status_code=500),
        _Response(ValueError('no json')),
        _Response(['not', 'a', 'dict']),
    ],
)
def test_bad_responses_raise_provider_error(monkeypatch, adapter, response):
    _respond(monkeypatch, adapter, response)

    with pytest.raises(ProviderError):
        adapter.fetch_status('AA123', DAY)


def test_timeout_raises_provider_error(monkeypatch, adapter):
    _respond(monkeypatch, adapter, error=requests.exceptions.Timeout('slow'))

    with pytest.raises(ProviderError, match='timed out'):
        adapter.fetch_status('AA123', DAY)


def test_missing_api_key_fails_without_request(monkeypatch):
    adapter = AviationStackProvider(api_key=None)
    calls = _respond(monkeypatch, adapter, _Response({'data': [FLIGHT]}))

    with pytest.raises(ProviderError):
        adapter.fetch_status('AA123', DAY)
    assert calls == []


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('scheduled', FlightLifecycle.ON_TIME),
        ('active', FlightLifecycle.BOARDING_SOON),
        ('landed', FlightLifecycle.ARRIVED),
        ('cancelled', FlightLifecycle.CANCELLED),
        ('incident', FlightLifecycle.DELAYED),
        ('diverted', FlightLifecycle.DIVERTED),
        ('teleported', FlightLifecycle.UNKNOWN),
        (None, FlightLifecycle.UNKNOWN),
    ],
)
def test_map_status(raw, expected):
    assert map_status(raw) is expected


def test_unknown_provider_fails_at_build_time():
    with pytest.raises(UnsupportedProviderError):
        create_gateway(AviationConfig(provider='carrier-pigeon'))


@pytest.mark.parametrize("name", ['flightaware', 'amadeus'])
def test_placeholder_providers_raise_not_implemented(name):
    gateway = create_gateway(AviationConfig(provider=name))

    with pytest.raises(ProviderNotImplementedError):
        gateway.fetch_status('AA123', DAY)
    assert gateway.stats['errors'] == 1


@pytest.mark.parametrize(
    "payload",
    [
        {'data': ['garbage']},
        {'data': {'flight': 'AA123'}},
        {'data': [{**FLIGHT, 'departure': 'JFK'}]},
        {'data': [{**FLIGHT, 'airline': ['AA']}]},
        {'data': [{**FLIGHT, 'arrival': 7}]},
    ],
)
def test_malformed_record_raises_provider_error(monkeypatch, adapter, payload):
    _respond(monkeypatch, adapter, _Response(payload))

    with pytest.raises(ProviderError, match='malformed record'):
        adapter.fetch_status('AA123', DAY)


def test_non_string_timestamp_is_treated_as_missing(monkeypatch, adapter):
    record = {**FLIGHT, 'departure': {**FLIGHT['departure'], 'scheduled': 1748790000}}
    _respond(monkeypatch, adapter, _Response({'data': [record]}))

    status = adapter.fetch_status('AA123', DAY)

    assert status.departure_time is None
    assert status.boarding_time is None


def test_provider_text_is_clamped_to_column_width(monkeypatch, adapter):
    record = {
        **FLIGHT,
        'departure': {**FLIGHT['departure'], 'gate': 'Gate 42 (temporary remote stand)', 'terminal': 8},
        'airline': {'iata': 'AAL1'},
    }
    _respond(monkeypatch, adapter, _Response({'data': [record]}))

    status = adapter.fetch_status('AA123', DAY)

    assert status.gate == 'Gate 42 (tempora'
    assert status.terminal == '8'
    assert status.airline_code == 'AAL'
