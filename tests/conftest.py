"""Shared fixtures: in-memory database, pinned clock, scripted provider, recording push."""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Union

import pytest
from sqlalchemy.pool import StaticPool

from gatewatch.airports import seed_airports
from gatewatch.cache import TTLCache
from gatewatch.errors import FlightNotFoundError, PushError
from gatewatch.models import (
    FlightLifecycle,
    FlightStatus,
    build_engine,
    build_session_factory,
    init_db,
    make_flight_key,
)
from gatewatch.notifications import PushTransport
from gatewatch.providers import ProviderAdapter
from gatewatch.services import build_services

START = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 0, seconds: float = 0) -> None:
        self.now += timedelta(minutes=minutes, seconds=seconds)


class FakeProvider(ProviderAdapter):
    """Returns scripted statuses per flight key and records every call."""

    name = 'fake'

    def __init__(self):
        super().__init__()
        self.responses: Dict[str, Union[FlightStatus, Exception]] = {}
        self.calls: List[str] = []

    def script(self, response: Union[FlightStatus, Exception], flight_key: Optional[str] = None) -> None:
        key = flight_key or response.flight_key
        self.responses[key] = response

    def fetch_status(self, flight_number: str, departure_date: date) -> FlightStatus:
        flight_key = make_flight_key(flight_number, departure_date)
        self.calls.append(flight_key)
        response = self.responses.get(flight_key)
        if response is None:
            raise FlightNotFoundError(f'No flight found for {flight_number} on {departure_date}')
        if isinstance(response, Exception):
            raise response
        return replace(response)


class RecordingPush(PushTransport):
    """Keeps every message instead of sending it; can be told to fail."""

    def __init__(self):
        self.sent: List[dict] = []
        self.fail = False

    def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> None:
        if self.fail:
            raise PushError('push service unavailable')
        self.sent.append({'token': token, 'title': title, 'body': body, 'data': data})


def make_status(
    flight_number: str = 'AA123',
    departure_date: str = '2025-06-01',
    gate: str = 'A1',
    status: FlightLifecycle = FlightLifecycle.ON_TIME,
    delay_minutes: int = 0,
    departure_time: Optional[datetime] = None,
    terminal: str = '1',
) -> FlightStatus:
    return FlightStatus(
        flight_key=make_flight_key(flight_number, departure_date),
        flight_number=flight_number,
        airline_code=flight_number[:2],
        status=status,
        gate=gate,
        terminal=terminal,
        departure_time=departure_time or START + timedelta(hours=3),
        delay_minutes=delay_minutes,
        last_updated=START,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def push() -> RecordingPush:
    return RecordingPush()


@pytest.fixture
def engine():
    engine = build_engine('sqlite://', poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def services(session_factory, provider, push, clock):
    services = build_services(
        session_factory=session_factory,
        provider=provider,
        push=push,
        clock=clock,
    )
    seed_airports(services.airports)
    return services


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache(max_entries=100)


@pytest.fixture
def user(services):
    return services.users.create(email='traveller@example.com', push_token='device-token-1')


@pytest.fixture
def tracked(services, provider, user):
    """AA123 on 2025-06-01 at gate A1, tracked by ``user``, snapshot stored."""
    provider.script(make_status())
    return services.tracker.track_flight(user.id, 'AA123', '2025-06-01', 'JFK', 'LAX')
