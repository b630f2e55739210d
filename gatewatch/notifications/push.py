"""
Push transports.

``send`` either returns normally or raises PushError. Delivery is
best-effort: callers log failures and move on, the persisted
Notification row is the record of what was sent.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import requests

from gatewatch.config import PushConfig
from gatewatch.errors import PushError

logger = logging.getLogger(__name__)


class PushTransport(ABC):
    """Delivers one notification to one device token."""

    @abstractmethod
    def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> None:
        """Send a push. Raises PushError on failure."""


class LoggingPushTransport(PushTransport):
    """Used when no push service is configured; just logs the message."""

    def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> None:
        logger.info(f'Push (not delivered, no transport configured): {title!r} - {body!r} {data}')


class FCMPushTransport(PushTransport):
    """
    Firebase Cloud Messaging over the HTTP API.

    Sends high priority on both Android and APNs so gate and boarding
    alerts wake the device.
    """

    def __init__(
        self,
        server_key: str,
        url: str = 'https://fcm.googleapis.com/fcm/send',
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.server_key = server_key
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _payload(self, token: str, title: str, body: str, data: Dict[str, str]) -> dict:
        return {
            'to': token,
            'notification': {'title': title, 'body': body},
            # FCM data values must be strings
            'data': {key: str(value) for key, value in data.items()},
            'priority': 'high',
            'apns': {'headers': {'apns-priority': '10'}},
        }

    def send(self, token: str, title: str, body: str, data: Dict[str, str]) -> None:
        try:
            response = self.session.post(
                self.url,
                json=self._payload(token, title, body, data),
                headers={'Authorization': f'key={self.server_key}'},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise PushError(f'FCM request failed: {e}') from e

        if response.status_code != 200:
            raise PushError(f'FCM returned HTTP {response.status_code}')

        try:
            result = response.json()
        except ValueError as e:
            raise PushError('FCM returned invalid JSON') from e

        if result.get('failure'):
            errors = [r.get('error') for r in result.get('results', []) if r.get('error')]
            raise PushError(f'FCM rejected message: {", ".join(errors) or "unknown error"}')

        logger.debug(f'FCM message sent: {result.get("multicast_id")}')


def create_push_transport(push: PushConfig) -> PushTransport:
    """FCM when a server key is configured, otherwise log-only."""
    if push.is_configured:
        logger.info('Push notifications via Firebase Cloud Messaging')
        return FCMPushTransport(
            server_key=push.fcm_server_key,
            url=push.fcm_url,
            timeout_seconds=push.timeout_seconds,
        )
    logger.warning('FCM_SERVER_KEY not set - push notifications will only be logged')
    return LoggingPushTransport()
