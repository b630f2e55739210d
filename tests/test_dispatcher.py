"""Tests for preference-filtered notification dispatch."""

import pytest

from gatewatch.changes import detect_changes
from gatewatch.errors import PersistenceError
from gatewatch.models import FlightLifecycle, NotificationCategory

from conftest import make_status


@pytest.fixture
def dispatcher(services):
    return services.dispatcher


def _categories(notifications):
    return [n.category for n in notifications]


def test_each_changed_category_is_persisted_and_pushed(dispatcher, services, user, push):
    old = make_status(gate='A1')
    new = make_status(gate='B2', status=FlightLifecycle.DELAYED, delay_minutes=20)

    sent = dispatcher.dispatch_changes(user.id, new, detect_changes(old, new))

    assert _categories(sent) == ['gate_change', 'status_change', 'delay']
    assert len(services.notifications.find(user_id=user.id)) == 3

    titles = [m['title'] for m in push.sent]
    assert titles == ['⚡ Gate Changed', 'Flight Delayed', '⏰ Flight Delayed']
    assert push.sent[0]['body'] == 'AA123 moved from Gate A1 to Gate B2'
    assert push.sent[0]['data'] == {
        'type': 'gate_change',
        'flight_key': 'AA123_2025-06-01',
        'old_gate': 'A1',
        'new_gate': 'B2',
    }
    assert push.sent[2]['body'] == 'AA123 is delayed by 20 minutes'
    assert all(m['token'] == 'device-token-1' for m in push.sent)


def test_disabled_preference_skips_only_that_category(dispatcher, services, user, push):
    services.users.update_preferences(user.id, {'notify_delay': False})
    old = make_status(gate='A1', delay_minutes=0)
    new = make_status(gate='A2', delay_minutes=15)

    sent = dispatcher.dispatch_changes(user.id, new, detect_changes(old, new))

    assert _categories(sent) == ['gate_change']
    assert services.notifications.find(user_id=user.id, category=NotificationCategory.DELAY) == []


def test_status_change_follows_boarding_preference(dispatcher, services, user):
    services.users.update_preferences(user.id, {'notify_boarding': False})
    old = make_status()
    new = make_status(status=FlightLifecycle.CANCELLED)

    assert dispatcher.dispatch_changes(user.id, new, detect_changes(old, new)) == []


def test_user_without_push_token_is_a_no_op(dispatcher, services, push):
    user = services.users.create(email='quiet@example.com')
    old, new = make_status(gate='A1'), make_status(gate='A2')

    assert dispatcher.dispatch_changes(user.id, new, detect_changes(old, new)) == []
    assert services.notifications.find(user_id=user.id) == []
    assert push.sent == []


def test_missing_user_is_logged_and_skipped(dispatcher, caplog):
    old, new = make_status(gate='A1'), make_status(gate='A2')

    assert dispatcher.dispatch_changes(999, new, detect_changes(old, new)) == []
    assert 'User 999 not found' in caplog.text


def test_push_failure_keeps_record_and_other_categories(dispatcher, services, user, push, caplog):
    push.fail = True
    old = make_status(gate='A1', delay_minutes=0)
    new = make_status(gate='A2', delay_minutes=5)

    sent = dispatcher.dispatch_changes(user.id, new, detect_changes(old, new))

    assert _categories(sent) == ['gate_change', 'delay']
    assert len(services.notifications.find(user_id=user.id)) == 2
    assert dispatcher.stats == {'pushes_sent': 0, 'push_failures': 2}
    assert 'Push failed for gate_change' in caplog.text


def test_insert_failure_does_not_block_remaining_categories(dispatcher, user, push, monkeypatch):
    real_insert = dispatcher.notifications.insert

    def flaky_insert(**kwargs):
        if kwargs['category'] is NotificationCategory.GATE_CHANGE:
            raise PersistenceError('disk full')
        return real_insert(**kwargs)

    monkeypatch.setattr(dispatcher.notifications, 'insert', flaky_insert)
    old = make_status(gate='A1', delay_minutes=0)
    new = make_status(gate='A2', delay_minutes=5)

    sent = dispatcher.dispatch_changes(user.id, new, detect_changes(old, new))

    assert _categories(sent) == ['delay']
    assert [m['title'] for m in push.sent] == ['⏰ Flight Delayed']


@pytest.mark.parametrize(
    ("minutes", "title", "priority"),
    [
        (40, '⏰ Start Heading to Gate', 'normal'),
        (20, '🚨 Boarding Soon', 'high'),
        (10, '🔴 FINAL CALL', 'high'),
    ],
)
def test_boarding_reminder_messages(dispatcher, user, push, minutes, title, priority):
    notification = dispatcher.send_boarding_reminder(user, make_status(gate='C5'), minutes)

    assert notification.category == f'boarding_{minutes}'
    assert notification.priority == priority
    assert push.sent[0]['title'] == title
    assert push.sent[0]['body'] == f'AA123 boards in {minutes} minutes - Gate C5'


def test_boarding_reminder_without_gate_says_tba(dispatcher, user, push):
    dispatcher.send_boarding_reminder(user, make_status(gate=''), 20)

    assert push.sent[0]['body'] == 'AA123 boards in 20 minutes - Gate TBA'
