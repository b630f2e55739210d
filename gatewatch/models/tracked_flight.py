"""
TrackedFlight model - a user's subscription to one flight on one day.

Rows are never hard-deleted: untracking flips ``is_active`` off so the
schedulers stop picking the flight up.
"""

from datetime import date, datetime

from sqlalchemy import String, Integer, Boolean, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from gatewatch.clock import utc_now
from gatewatch.models.base import Base
from gatewatch.models.flight_status import make_flight_key


class TrackedFlight(Base):
    """A flight a user asked to follow."""

    __tablename__ = 'tracked_flights'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('users.id'),
        index=True,
        comment='Owning user'
    )

    flight_number: Mapped[str] = mapped_column(String(10), comment='IATA flight number, e.g. AA123')

    airline_code: Mapped[str] = mapped_column(String(3), default='')

    departure_date: Mapped[date] = mapped_column(Date, comment='Calendar date, not a timestamp')

    departure_airport: Mapped[str] = mapped_column(String(3))

    arrival_airport: Mapped[str] = mapped_column(String(3))

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        # Scheduler sweep and per-user listing
        Index('ix_tracked_flights_active', 'is_active'),
        Index('ix_tracked_flights_user_active', 'user_id', 'is_active'),
    )

    def __repr__(self) -> str:
        return f'<TrackedFlight {self.id} {self.flight_key} user={self.user_id}>'

    @property
    def flight_key(self) -> str:
        return make_flight_key(self.flight_number, self.departure_date)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'flight_number': self.flight_number,
            'airline_code': self.airline_code,
            'departure_date': self.departure_date.isoformat(),
            'departure_airport': self.departure_airport,
            'arrival_airport': self.arrival_airport,
            'flight_key': self.flight_key,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
