"""
Flight tracking service - the synchronous operations behind the API.

Validation runs first, so malformed input never costs a provider call or a
database round trip.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from gatewatch.clock import Clock, utc_now
from gatewatch.errors import FlightNotFoundError, PersistenceError, UserNotFoundError, ValidationError
from gatewatch.models import FlightStatus, Notification, PREFERENCE_FIELDS, TrackedFlight, User
from gatewatch.repositories import NotificationRepository, TrackedFlightRepository, UserRepository
from gatewatch.sync.resolver import StatusResolver
from gatewatch.urgency import UrgencyLevel, classify_urgency, minutes_until
from gatewatch.validation import (
    airline_code_of,
    parse_date,
    validate_airport_code,
    validate_flight_number,
)

logger = logging.getLogger(__name__)


@dataclass
class TimeUntil:
    boarding_minutes: Optional[int]
    departure_minutes: Optional[int]


@dataclass
class FlightStatusView:
    """A flight status plus countdowns relative to 'now'."""
    flight: FlightStatus
    time_until: TimeUntil
    urgency_level: Optional[UrgencyLevel]

    @classmethod
    def build(cls, status: FlightStatus, now: datetime) -> 'FlightStatusView':
        boarding = minutes_until(status.boarding_time, now)
        departure = minutes_until(status.departure_time, now)
        return cls(
            flight=status,
            time_until=TimeUntil(boarding_minutes=boarding, departure_minutes=departure),
            urgency_level=classify_urgency(boarding) if boarding is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            'flight': self.flight.to_dict(include_raw=False),
            'time_until': {
                'boarding_minutes': self.time_until.boarding_minutes,
                'departure_minutes': self.time_until.departure_minutes,
            },
            'urgency_level': self.urgency_level.value if self.urgency_level else None,
        }


class FlightTracker:
    """Track, list, untrack and look up flights on behalf of users."""

    def __init__(
        self,
        resolver: StatusResolver,
        flights: TrackedFlightRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        clock: Clock = utc_now,
    ):
        self.resolver = resolver
        self.flights = flights
        self.users = users
        self.notifications = notifications
        self.clock = clock

    def register_user(self, email: Any, push_token: Optional[str] = None) -> User:
        if not isinstance(email, str) or '@' not in email:
            raise ValidationError(f'Invalid email: {email!r}')
        email = email.strip().lower()
        if self.users.find_by_email(email) is not None:
            raise ValidationError(f'{email} is already registered')
        user = self.users.create(email=email, push_token=push_token)
        logger.info(f'Registered user {user.id}')
        return user

    def update_push_token(self, user_id: int, push_token: Optional[str]) -> None:
        if push_token is not None and not isinstance(push_token, str):
            raise ValidationError('push_token must be a string')
        if not self.users.set_push_token(user_id, push_token or None):
            raise UserNotFoundError(f'User {user_id} not found')

    def track_flight(
        self,
        user_id: int,
        flight_number: Any,
        departure_date: Any,
        departure_airport: Any,
        arrival_airport: Any,
    ) -> TrackedFlight:
        """
        Start tracking a flight for ``user_id``.

        The provider is asked first so that unknown flights are rejected
        (FlightNotFoundError / ProviderError) before anything is written.
        Tracking a flight the user already follows returns the existing row.
        """
        flight_number = validate_flight_number(flight_number)
        day = parse_date(departure_date)
        departure_airport = validate_airport_code(departure_airport)
        arrival_airport = validate_airport_code(arrival_airport)

        if self.users.get(user_id) is None:
            raise UserNotFoundError(f'User {user_id} not found')

        existing = self.flights.find_active_for_user(user_id, flight_number, day)
        if existing is not None:
            logger.info(f'User {user_id} already tracking {existing.flight_key} (id={existing.id})')
            return existing

        status = self.resolver.fetch_fresh(flight_number, day)

        tracked = self.flights.insert(
            user_id=user_id,
            flight_number=flight_number,
            airline_code=status.airline_code or airline_code_of(flight_number),
            departure_date=day,
            departure_airport=departure_airport,
            arrival_airport=arrival_airport,
        )
        logger.info(f'User {user_id} now tracking {tracked.flight_key} (id={tracked.id})')

        # An existing snapshot is left for the poller to diff, so other
        # trackers of this flight still hear about the change.
        try:
            if self.resolver.stored(status.flight_key) is None:
                self.resolver.save(status)
        except PersistenceError as e:
            logger.warning(f'Failed to save flight status for {status.flight_key}: {e}')

        return tracked

    def list_flights(self, user_id: int) -> List[TrackedFlight]:
        return self.flights.find_for_user(user_id)

    def untrack_flight(self, user_id: int, flight_id: int) -> None:
        if not self.flights.deactivate(flight_id, user_id):
            raise FlightNotFoundError(f'Tracked flight {flight_id} not found')
        logger.info(f'User {user_id} stopped tracking flight {flight_id}')

    def flight_status(self, flight_number: Any, departure_date: Any) -> FlightStatusView:
        flight_number = validate_flight_number(flight_number)
        day = parse_date(departure_date)
        status = self.resolver.resolve(flight_number, day)
        return FlightStatusView.build(status, self.clock())

    def notifications_for(self, user_id: int, limit: int = 100) -> List[Notification]:
        return self.notifications.list_for_user(user_id, limit=limit)

    def update_preferences(self, user_id: int, preferences: Any) -> User:
        """Set any subset of the notification preference flags."""
        if not isinstance(preferences, dict):
            raise ValidationError('Preferences must be an object')

        unknown = sorted(set(preferences) - set(PREFERENCE_FIELDS))
        if unknown:
            raise ValidationError(f'Unknown preference(s): {", ".join(unknown)}')

        values: Dict[str, bool] = {}
        for name, value in preferences.items():
            if not isinstance(value, bool):
                raise ValidationError(f'{name} must be true or false')
            values[name] = value

        user = self.users.update_preferences(user_id, values)
        if user is None:
            raise UserNotFoundError(f'User {user_id} not found')
        return user
