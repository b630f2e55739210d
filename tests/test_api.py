"""Tests for the HTTP surface, through Flask's test client."""

import pytest

from gatewatch.app import create_app
from gatewatch.errors import ProviderError

from conftest import make_status


@pytest.fixture
def client(services):
    app = create_app(services=services, start_schedulers=False)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def headers(user):
    return {'X-User-ID': str(user.id)}


def _track(client, headers, **overrides):
    body = {
        'flight_number': 'AA123',
        'departure_date': '2025-06-01',
        'departure_airport': 'JFK',
        'arrival_airport': 'LAX',
    }
    body.update(overrides)
    return client.post('/api/flights/track', json=body, headers=headers)


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}


def test_track_list_and_untrack(client, headers, provider):
    provider.script(make_status())

    created = _track(client, headers)
    assert created.status_code == 201
    flight = created.get_json()
    assert flight['flight_key'] == 'AA123_2025-06-01'
    assert flight['airline_code'] == 'AA'

    listed = client.get('/api/flights', headers=headers).get_json()
    assert listed['count'] == 1

    deleted = client.delete(f'/api/flights/{flight["id"]}', headers=headers)
    assert deleted.status_code == 200
    assert client.get('/api/flights', headers=headers).get_json()['count'] == 0

    again = client.delete(f'/api/flights/{flight["id"]}', headers={'X-User-ID': '999'})
    assert again.status_code == 404


@pytest.mark.parametrize(
    "overrides",
    [
        {'flight_number': 'A123'},
        {'flight_number': 'aa123'},
        {'departure_date': '06/01/2025'},
        {'departure_airport': 'JF'},
        {'arrival_airport': 'lax'},
    ],
)
def test_invalid_track_request_never_reaches_provider(client, headers, provider, overrides):
    response = _track(client, headers, **overrides)

    assert response.status_code == 400
    assert 'error' in response.get_json()
    assert provider.calls == []


def test_missing_user_header_is_rejected(client):
    response = client.get('/api/flights')

    assert response.status_code == 400


def test_unknown_flight_is_404(client, headers):
    response = _track(client, headers, flight_number='ZZ999')

    assert response.status_code == 404


def test_provider_failure_is_502(client, headers, provider):
    provider.script(ProviderError('upstream timeout'), flight_key='AA123_2025-06-01')

    response = client.get('/api/flights/status/AA123/2025-06-01')

    assert response.status_code == 502
    assert response.get_json() == {'error': 'upstream timeout'}


def test_flight_status_includes_countdowns(client, provider):
    provider.script(make_status(gate='B22'))

    body = client.get('/api/flights/status/AA123/2025-06-01').get_json()

    assert body['flight']['gate'] == 'B22'
    assert body['flight']['boarding_time'] == '2025-06-01T14:20:00+00:00'
    assert body['time_until'] == {'boarding_minutes': 140, 'departure_minutes': 180}
    assert body['urgency_level'] == 'calm'
    assert 'raw_data' not in body['flight']


def test_location_and_walk_time(client, headers, provider):
    provider.script(make_status())
    flight_id = _track(client, headers).get_json()['id']

    updated = client.post('/api/location', json={'latitude': 40.6413, 'longitude': -73.7781}, headers=headers)
    assert updated.status_code == 200

    walk = client.get(f'/api/location/walk-time/{flight_id}', headers=headers).get_json()
    assert walk['walk_time_minutes'] == 0
    assert walk['urgency_level'] == 'calm'


def test_walk_time_without_location_is_404(client, headers, provider):
    provider.script(make_status())
    flight_id = _track(client, headers).get_json()['id']

    response = client.get(f'/api/location/walk-time/{flight_id}', headers=headers)

    assert response.status_code == 404


def test_airport_and_security_wait(client):
    airport = client.get('/api/airports/LHR').get_json()
    wait = client.get('/api/airports/LHR/security-wait').get_json()

    assert airport['city'] == 'London'
    assert wait['airport_code'] == 'LHR'
    assert wait['current_wait_time'] == airport['security_wait_avg']
    assert client.get('/api/airports/ZZZ').status_code == 404


def test_preferences_and_notification_history(client, headers, services, provider, user):
    response = client.put(
        '/api/notifications/preferences',
        json={'notify_delay': False},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.get_json()['preferences']['notify_delay'] is False

    provider.script(make_status())
    _track(client, headers)
    provider.script(make_status(gate='A2', delay_minutes=10))
    services.polling.run_once()

    history = client.get('/api/notifications', headers=headers).get_json()
    assert [n['type'] for n in history['notifications']] == ['gate_change']


def test_unknown_preference_is_rejected(client, headers):
    response = client.put('/api/notifications/preferences', json={'notify_sms': True}, headers=headers)

    assert response.status_code == 400


def test_register_user_and_push_token(client):
    created = client.post('/api/users', json={'email': 'New@Example.com'})
    assert created.status_code == 201
    user = created.get_json()
    assert user['email'] == 'new@example.com'
    assert user['has_push_token'] is False

    duplicate = client.post('/api/users', json={'email': 'new@example.com'})
    assert duplicate.status_code == 400

    updated = client.put(
        '/api/users/push-token',
        json={'push_token': 'device-token-9'},
        headers={'X-User-ID': str(user['id'])},
    )
    assert updated.status_code == 200


def test_status_reports_component_counters(client):
    body = client.get('/api/status').get_json()

    assert body['provider']['provider'] == 'fake'
    assert set(body) == {'provider', 'resolver', 'cache', 'notifications', 'polling', 'reminders'}
