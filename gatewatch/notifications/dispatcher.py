"""
Notification dispatcher - turns detected changes and boarding thresholds
into persisted notifications and pushes.

For each change the user has opted into:
1. Build the category-specific title/body/payload
2. Persist the Notification row
3. Hand the message to the push transport

Step 3 is best-effort. Its failures are logged and swallowed, never undo
step 2, and never stop the remaining categories.
"""

import logging
from typing import Dict, List, NamedTuple, Optional

from gatewatch.changes import ChangeSet, DelayChanged, GateChanged, StatusChanged
from gatewatch.errors import PersistenceError
from gatewatch.models import (
    FlightStatus,
    Notification,
    NotificationCategory,
    NotificationPriority,
    User,
)
from gatewatch.notifications.push import PushTransport
from gatewatch.repositories import NotificationRepository, UserRepository

logger = logging.getLogger(__name__)

# Reminder threshold -> (title, priority)
REMINDER_MESSAGES = {
    40: ('⏰ Start Heading to Gate', NotificationPriority.NORMAL),
    20: ('🚨 Boarding Soon', NotificationPriority.HIGH),
    10: ('🔴 FINAL CALL', NotificationPriority.HIGH),
}


class Message(NamedTuple):
    category: NotificationCategory
    preference: str
    title: str
    body: str
    priority: NotificationPriority
    data: Dict[str, str]


def gate_change_message(status: FlightStatus, change: GateChanged) -> Message:
    return Message(
        category=NotificationCategory.GATE_CHANGE,
        preference='notify_gate_change',
        title='⚡ Gate Changed',
        body=f'{status.flight_number} moved from Gate {change.old} to Gate {change.new}',
        priority=NotificationPriority.HIGH,
        data={
            'type': NotificationCategory.GATE_CHANGE.value,
            'flight_key': status.flight_key,
            'old_gate': change.old,
            'new_gate': change.new,
        },
    )


def status_change_message(status: FlightStatus, change: StatusChanged) -> Message:
    return Message(
        category=NotificationCategory.STATUS_CHANGE,
        preference='notify_boarding',
        title=f'Flight {change.new.value}',
        body=f'{status.flight_number} status changed to {change.new.value}',
        priority=NotificationPriority.NORMAL,
        data={
            'type': NotificationCategory.STATUS_CHANGE.value,
            'flight_key': status.flight_key,
            'status': change.new.value,
        },
    )


def delay_message(status: FlightStatus, change: DelayChanged) -> Message:
    return Message(
        category=NotificationCategory.DELAY,
        preference='notify_delay',
        title='⏰ Flight Delayed',
        body=f'{status.flight_number} is delayed by {change.new} minutes',
        priority=NotificationPriority.HIGH,
        data={
            'type': NotificationCategory.DELAY.value,
            'flight_key': status.flight_key,
            'delay': str(change.new),
        },
    )


def boarding_reminder_message(status: FlightStatus, minutes: int) -> Message:
    if minutes not in REMINDER_MESSAGES:
        raise ValueError(f'No boarding reminder for {minutes} minutes')
    title, priority = REMINDER_MESSAGES[minutes]
    category = NotificationCategory.boarding(minutes)
    return Message(
        category=category,
        preference=f'boarding_reminder_{minutes}',
        title=title,
        body=f'{status.flight_number} boards in {minutes} minutes - Gate {status.gate or "TBA"}',
        priority=priority,
        data={
            'type': category.value,
            'flight_key': status.flight_key,
            'gate': status.gate,
        },
    )


class NotificationDispatcher:
    """Preference-filtered persistence and delivery of notifications."""

    def __init__(
        self,
        users: UserRepository,
        notifications: NotificationRepository,
        push: PushTransport,
    ):
        self.users = users
        self.notifications = notifications
        self.push = push

        # Statistics
        self._sent = 0
        self._push_failures = 0

    def dispatch_changes(self, user_id: int, status: FlightStatus, changes: ChangeSet) -> List[Notification]:
        """
        Notify ``user_id`` about ``changes`` to ``status``.

        Returns the notifications persisted (possibly empty).
        """
        if not changes:
            return []

        user = self.users.get(user_id)
        if user is None:
            logger.warning(f'User {user_id} not found, dropping {len(changes)} change(s) for {status.flight_key}')
            return []

        if not user.push_token:
            logger.debug(f'User {user_id} has no push token, skipping notifications')
            return []

        messages = []
        if changes.gate:
            messages.append(gate_change_message(status, changes.gate))
        if changes.status:
            messages.append(status_change_message(status, changes.status))
        if changes.delay:
            messages.append(delay_message(status, changes.delay))

        sent = []
        for message in messages:
            notification = self._deliver_if_enabled(user, status, message)
            if notification is not None:
                sent.append(notification)
        return sent

    def send_boarding_reminder(self, user: User, status: FlightStatus, minutes: int) -> Optional[Notification]:
        """Send the ``boarding_{minutes}`` reminder if the user wants it."""
        if not user.push_token:
            return None
        return self._deliver_if_enabled(user, status, boarding_reminder_message(status, minutes))

    def _deliver_if_enabled(self, user: User, status: FlightStatus, message: Message) -> Optional[Notification]:
        if not getattr(user, message.preference):
            logger.debug(f'User {user.id} disabled {message.category.value}, skipping')
            return None

        try:
            notification = self.notifications.insert(
                user_id=user.id,
                flight_key=status.flight_key,
                category=message.category,
                title=message.title,
                body=message.body,
                priority=message.priority,
            )
        except PersistenceError as e:
            logger.error(f'Could not record {message.category.value} for user {user.id}: {e}')
            return None

        try:
            self.push.send(user.push_token, message.title, message.body, message.data)
        except Exception as e:
            self._push_failures += 1
            logger.error(f'Push failed for {message.category.value} to user {user.id}: {e}')
        else:
            self._sent += 1

        logger.info(f'Notified user {user.id}: {message.category.value} for {status.flight_key}')
        return notification

    @property
    def stats(self) -> dict:
        return {
            'pushes_sent': self._sent,
            'push_failures': self._push_failures,
        }
