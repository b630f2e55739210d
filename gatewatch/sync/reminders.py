"""
Reminder scheduler - boarding reminders at fixed minutes before boarding.

Reads the stored status only; reminders never cost a provider call.

A reminder fires on the tick where minutes-until-boarding is exactly 40,
20 or 10. With a one-minute interval each threshold is hit once; if the
process is down during that minute the reminder is missed for good
(no catch-up).
"""

import logging
from datetime import datetime
from typing import Optional

from gatewatch.clock import Clock, utc_now
from gatewatch.config import config
from gatewatch.errors import PersistenceError
from gatewatch.models import BOARDING_REMINDER_MINUTES, Notification, TrackedFlight
from gatewatch.notifications import NotificationDispatcher
from gatewatch.repositories import TrackedFlightRepository, UserRepository
from gatewatch.sync.loop import RecurringTask
from gatewatch.sync.resolver import StatusResolver
from gatewatch.urgency import minutes_until

logger = logging.getLogger(__name__)


def reminder_threshold(minutes_until_boarding: Optional[int]) -> Optional[int]:
    """The reminder threshold matched exactly by this minute count, if any."""
    if minutes_until_boarding in BOARDING_REMINDER_MINUTES:
        return minutes_until_boarding
    return None


class ReminderScheduler(RecurringTask):
    """Sends boarding_40/20/10 reminders for active flights."""

    name = 'boarding-reminders'

    def __init__(
        self,
        flights: TrackedFlightRepository,
        users: UserRepository,
        resolver: StatusResolver,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
        interval_seconds: Optional[float] = None,
        shutdown_grace_seconds: Optional[float] = None,
    ):
        super().__init__(
            interval_seconds=interval_seconds or config.scheduler.reminder_interval_seconds,
            shutdown_grace_seconds=(
                config.scheduler.shutdown_grace_seconds
                if shutdown_grace_seconds is None else shutdown_grace_seconds
            ),
        )
        self.flights = flights
        self.users = users
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.clock = clock

    def run_cycle(self) -> int:
        """Check every active flight once. Returns count of reminders sent."""
        now = self.clock()
        sent = 0
        seen = set()
        for flight in self.flights.find_active():
            if self.stopping:
                logger.info('Stop requested, abandoning reminder cycle')
                break
            # One reminder per user and flight, however many rows track it
            subscription = (flight.user_id, flight.flight_key)
            if subscription in seen:
                continue
            seen.add(subscription)
            try:
                if self.check_flight(flight, now) is not None:
                    sent += 1
            except PersistenceError as e:
                logger.error(f'Reminder check failed for {flight.flight_key}: {e}')

        if sent:
            logger.info(f'Sent {sent} boarding reminder(s)')
        return sent

    def check_flight(self, flight: TrackedFlight, now: datetime) -> Optional[Notification]:
        status = self.resolver.stored(flight.flight_key)
        if status is None:
            return None

        threshold = reminder_threshold(minutes_until(status.boarding_time, now))
        if threshold is None:
            return None

        user = self.users.get(flight.user_id)
        if user is None:
            logger.warning(f'User {flight.user_id} not found for tracked flight {flight.id}')
            return None

        return self.dispatcher.send_boarding_reminder(user, status, threshold)
