"""
Database models for GateWatch.

Schema priorities:
1. One atomic upsert target per flight key (flight_statuses)
2. Cheap sweep of active tracked flights for the schedulers
3. Append-only notification log per user
"""

from gatewatch.models.base import (
    Base,
    engine,
    SessionLocal,
    build_engine,
    build_session_factory,
    init_db,
)
from gatewatch.models.airport import Airport
from gatewatch.models.flight_status import (
    FlightLifecycle,
    FlightStatus,
    FlightStatusRecord,
    GateChange,
    GateImpact,
    make_flight_key,
)
from gatewatch.models.notification import (
    BOARDING_REMINDER_MINUTES,
    Notification,
    NotificationCategory,
    NotificationPriority,
)
from gatewatch.models.tracked_flight import TrackedFlight
from gatewatch.models.user import PREFERENCE_FIELDS, User

__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'build_engine',
    'build_session_factory',
    'init_db',
    'Airport',
    'FlightLifecycle',
    'FlightStatus',
    'FlightStatusRecord',
    'GateChange',
    'GateImpact',
    'make_flight_key',
    'BOARDING_REMINDER_MINUTES',
    'Notification',
    'NotificationCategory',
    'NotificationPriority',
    'TrackedFlight',
    'PREFERENCE_FIELDS',
    'User',
]
