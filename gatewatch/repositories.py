"""
Repositories - the document-store operations the sync pipeline relies on.

Each method is one short session doing a single-key read or a single
atomic write (insert, update or upsert). No multi-key transactions; when
two writers race on the same flight key the last upsert wins.

Every SQLAlchemy failure is re-raised as PersistenceError so callers only
deal with the GateWatch error taxonomy.
"""

import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from gatewatch.clock import Clock, utc_now
from gatewatch.errors import PersistenceError
from gatewatch.models import (
    Airport,
    FlightStatus,
    FlightStatusRecord,
    Notification,
    NotificationCategory,
    NotificationPriority,
    PREFERENCE_FIELDS,
    SessionLocal,
    TrackedFlight,
    User,
)

logger = logging.getLogger(__name__)


def _dialect_insert(session: Session):
    """INSERT construct that supports ON CONFLICT for the bound database."""
    dialect = session.get_bind().dialect.name
    if dialect == 'sqlite':
        return sqlite_insert
    if dialect == 'postgresql':
        return pg_insert
    raise PersistenceError(f'Upsert not supported for dialect {dialect!r}')


class _Repository:
    """Shared session handling."""

    def __init__(self, session_factory: Optional[sessionmaker] = None, clock: Clock = utc_now):
        self._session_factory = session_factory or SessionLocal
        self._clock = clock

    @contextmanager
    def _session(self, write: bool = False):
        session = self._session_factory()
        try:
            yield session
            if write:
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f'{type(self).__name__} database error: {e}')
            raise PersistenceError(str(e)) from e
        finally:
            session.close()


class FlightStatusRepository(_Repository):
    """Durable flight status, keyed by flight key."""

    def find_by_key(self, flight_key: str) -> Optional[FlightStatus]:
        with self._session() as session:
            record = session.get(FlightStatusRecord, flight_key)
            return record.to_status() if record else None

    def upsert(self, status: FlightStatus) -> None:
        """Insert or fully replace the row for ``status.flight_key``."""
        with self._session(write=True) as session:
            insert = _dialect_insert(session)
            values = FlightStatusRecord.row_values(status)
            stmt = insert(FlightStatusRecord).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=['flight_key'],
                set_={
                    column: getattr(stmt.excluded, column)
                    for column in values
                    if column != 'flight_key'
                },
            )
            session.execute(stmt)


class TrackedFlightRepository(_Repository):
    """User flight subscriptions."""

    def insert(
        self,
        user_id: int,
        flight_number: str,
        airline_code: str,
        departure_date: date,
        departure_airport: str,
        arrival_airport: str,
    ) -> TrackedFlight:
        now = self._clock()
        flight = TrackedFlight(
            user_id=user_id,
            flight_number=flight_number,
            airline_code=airline_code,
            departure_date=departure_date,
            departure_airport=departure_airport,
            arrival_airport=arrival_airport,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        with self._session(write=True) as session:
            session.add(flight)
        return flight

    def get(self, flight_id: int) -> Optional[TrackedFlight]:
        with self._session() as session:
            return session.get(TrackedFlight, flight_id)

    def find_active(self) -> List[TrackedFlight]:
        """Every active tracked flight, across all users."""
        with self._session() as session:
            stmt = select(TrackedFlight).where(TrackedFlight.is_active.is_(True)).order_by(TrackedFlight.id)
            return list(session.scalars(stmt))

    def find_active_for_user(self, user_id: int, flight_number: str, departure_date: date) -> Optional[TrackedFlight]:
        with self._session() as session:
            stmt = select(TrackedFlight).where(
                TrackedFlight.user_id == user_id,
                TrackedFlight.flight_number == flight_number,
                TrackedFlight.departure_date == departure_date,
                TrackedFlight.is_active.is_(True),
            )
            return session.scalars(stmt).first()

    def find_for_user(self, user_id: int) -> List[TrackedFlight]:
        with self._session() as session:
            stmt = (
                select(TrackedFlight)
                .where(TrackedFlight.user_id == user_id, TrackedFlight.is_active.is_(True))
                .order_by(TrackedFlight.departure_date, TrackedFlight.id)
            )
            return list(session.scalars(stmt))

    def deactivate(self, flight_id: int, user_id: int) -> bool:
        """
        Soft-delete a tracked flight owned by ``user_id``.

        Returns False when no row matched (wrong id or not the owner).
        """
        with self._session(write=True) as session:
            result = session.execute(
                update(TrackedFlight)
                .where(TrackedFlight.id == flight_id, TrackedFlight.user_id == user_id)
                .values(is_active=False, updated_at=self._clock())
            )
            return result.rowcount > 0


class UserRepository(_Repository):
    """Read access to users, plus the few writes the API exposes."""

    def get(self, user_id: int) -> Optional[User]:
        with self._session() as session:
            return session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        with self._session() as session:
            return session.scalars(select(User).where(User.email == email)).first()

    def create(self, email: str, push_token: Optional[str] = None, **preferences) -> User:
        unknown = set(preferences) - set(PREFERENCE_FIELDS)
        if unknown:
            raise ValueError(f'Unknown preference fields: {sorted(unknown)}')
        values = dict.fromkeys(PREFERENCE_FIELDS, True)
        values.update(preferences)
        now = self._clock()
        user = User(email=email, push_token=push_token, created_at=now, updated_at=now, **values)
        with self._session(write=True) as session:
            session.add(user)
        return user

    def set_push_token(self, user_id: int, push_token: Optional[str]) -> bool:
        with self._session(write=True) as session:
            result = session.execute(
                update(User)
                .where(User.id == user_id)
                .values(push_token=push_token, updated_at=self._clock())
            )
            return result.rowcount > 0

    def update_preferences(self, user_id: int, preferences: dict) -> Optional[User]:
        values = {name: bool(preferences[name]) for name in PREFERENCE_FIELDS if name in preferences}
        with self._session(write=True) as session:
            user = session.get(User, user_id)
            if user is None:
                return None
            for name, value in values.items():
                setattr(user, name, value)
            user.updated_at = self._clock()
        return user


class NotificationRepository(_Repository):
    """Append-only notification log."""

    def insert(
        self,
        user_id: int,
        flight_key: str,
        category: NotificationCategory,
        title: str,
        body: str,
        priority: NotificationPriority,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            flight_key=flight_key,
            category=category.value,
            title=title,
            body=body,
            priority=priority.value,
            sent_at=self._clock(),
        )
        with self._session(write=True) as session:
            session.add(notification)
        return notification

    def list_for_user(self, user_id: int, limit: int = 100) -> List[Notification]:
        with self._session() as session:
            stmt = (
                select(Notification)
                .where(Notification.user_id == user_id)
                .order_by(Notification.sent_at.desc(), Notification.id.desc())
                .limit(limit)
            )
            return list(session.scalars(stmt))

    def find(self, user_id: Optional[int] = None, flight_key: Optional[str] = None,
             category: Optional[NotificationCategory] = None) -> List[Notification]:
        """Equality-filtered scan, oldest first."""
        with self._session() as session:
            stmt = select(Notification).order_by(Notification.id)
            if user_id is not None:
                stmt = stmt.where(Notification.user_id == user_id)
            if flight_key is not None:
                stmt = stmt.where(Notification.flight_key == flight_key)
            if category is not None:
                stmt = stmt.where(Notification.category == category.value)
            return list(session.scalars(stmt))


class AirportRepository(_Repository):
    """Airport reference data."""

    def get(self, code: str) -> Optional[Airport]:
        with self._session() as session:
            return session.get(Airport, code.upper())

    def upsert_many(self, records: Iterable[dict]) -> int:
        """Batch insert/update airport records. Returns count written."""
        count = 0
        with self._session(write=True) as session:
            insert = _dialect_insert(session)
            for record in records:
                stmt = insert(Airport).values(**record)
                stmt = stmt.on_conflict_do_update(
                    index_elements=['code'],
                    set_={
                        column: getattr(stmt.excluded, column)
                        for column in record
                        if column != 'code'
                    },
                )
                session.execute(stmt)
                count += 1
        return count
