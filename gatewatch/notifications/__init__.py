"""
Notification delivery.

The dispatcher persists every notification before pushing it; push
transports are swappable (FCM in production, logging when unconfigured).
"""

from gatewatch.notifications.dispatcher import NotificationDispatcher
from gatewatch.notifications.push import (
    FCMPushTransport,
    LoggingPushTransport,
    PushTransport,
    create_push_transport,
)

__all__ = [
    'NotificationDispatcher',
    'FCMPushTransport',
    'LoggingPushTransport',
    'PushTransport',
    'create_push_transport',
]
