"""
FlightStatus - the canonical, provider-agnostic status of one flight on one day.

Two shapes live here:

- ``FlightStatus`` dataclass: what providers produce, what the cache stores
  (as JSON) and what the sync pipeline compares.
- ``FlightStatusRecord`` ORM model: the durable copy, one row per flight key,
  written only through an atomic upsert.

Design notes:
- Flight numbers are reused daily, so the key is number + departure date.
- Boarding time is never stored. It is always departure time minus the
  boarding offset, so a departure change moves boarding with it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional, Union

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from gatewatch.clock import as_utc
from gatewatch.models.base import Base

DEFAULT_BOARDING_OFFSET_MINUTES = 40

# Widths of the provider-fed text columns
AIRLINE_CODE_LENGTH = 3
GATE_LENGTH = 16
TERMINAL_LENGTH = 16


def make_flight_key(flight_number: str, departure_date: Union[date, str]) -> str:
    """Build the composite key, e.g. 'AA123_2025-06-01'."""
    if isinstance(departure_date, date):
        departure_date = departure_date.isoformat()
    return f'{flight_number}_{departure_date}'


class FlightLifecycle(str, Enum):
    """
    Lifecycle status shown to travellers.

    Values are the persisted strings; provider adapters map their own
    vocabulary onto these.
    """
    ON_TIME = 'On Time'
    BOARDING_SOON = 'Boarding Soon'
    ARRIVED = 'Arrived'
    CANCELLED = 'Cancelled'
    DELAYED = 'Delayed'
    DIVERTED = 'Diverted'
    UNKNOWN = 'Unknown'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'FlightLifecycle':
        """Parse a stored value; anything unrecognized becomes UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class GateImpact(str, Enum):
    """How much a gate change is likely to cost the traveller."""
    NONE = 'none'
    MINOR = 'minor'
    MAJOR = 'major'


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return as_utc(datetime.fromisoformat(value))


@dataclass
class GateChange:
    """Most recent gate move detected for a flight."""
    old_gate: str
    new_gate: str
    reason: str = ''
    time_impact: GateImpact = GateImpact.NONE
    changed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            'old_gate': self.old_gate,
            'new_gate': self.new_gate,
            'reason': self.reason,
            'time_impact': self.time_impact.value,
            'changed_at': _isoformat(self.changed_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'GateChange':
        return cls(
            old_gate=data.get('old_gate', ''),
            new_gate=data.get('new_gate', ''),
            reason=data.get('reason') or '',
            time_impact=GateImpact(data.get('time_impact') or GateImpact.NONE.value),
            changed_at=_parse_datetime(data.get('changed_at')),
        )


@dataclass
class FlightStatus:
    """Canonical status snapshot for one flight key."""
    flight_key: str
    flight_number: str
    airline_code: str = ''
    status: FlightLifecycle = FlightLifecycle.UNKNOWN
    gate: str = ''
    terminal: str = ''
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    delay_minutes: int = 0
    gate_change: Optional[GateChange] = None
    last_updated: Optional[datetime] = None
    raw_data: Optional[Any] = field(default=None, repr=False)
    boarding_offset_minutes: int = DEFAULT_BOARDING_OFFSET_MINUTES

    @property
    def boarding_time(self) -> Optional[datetime]:
        """Derived: scheduled departure minus the boarding offset."""
        if self.departure_time is None:
            return None
        return self.departure_time - timedelta(minutes=self.boarding_offset_minutes)

    def to_dict(self, include_raw: bool = True) -> dict:
        """JSON-serializable form, used for the cache and API responses."""
        data = {
            'flight_key': self.flight_key,
            'flight_number': self.flight_number,
            'airline_code': self.airline_code,
            'status': self.status.value,
            'gate': self.gate,
            'terminal': self.terminal,
            'boarding_time': _isoformat(self.boarding_time),
            'departure_time': _isoformat(self.departure_time),
            'arrival_time': _isoformat(self.arrival_time),
            'delay_minutes': self.delay_minutes,
            'gate_change': self.gate_change.to_dict() if self.gate_change else None,
            'last_updated': _isoformat(self.last_updated),
            'boarding_offset_minutes': self.boarding_offset_minutes,
        }
        if include_raw:
            data['raw_data'] = self.raw_data
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'FlightStatus':
        """Inverse of to_dict. ``boarding_time`` is ignored and re-derived."""
        gate_change = data.get('gate_change')
        return cls(
            flight_key=data['flight_key'],
            flight_number=data['flight_number'],
            airline_code=data.get('airline_code') or '',
            status=FlightLifecycle.parse(data.get('status')),
            gate=data.get('gate') or '',
            terminal=data.get('terminal') or '',
            departure_time=_parse_datetime(data.get('departure_time')),
            arrival_time=_parse_datetime(data.get('arrival_time')),
            delay_minutes=int(data.get('delay_minutes') or 0),
            gate_change=GateChange.from_dict(gate_change) if gate_change else None,
            last_updated=_parse_datetime(data.get('last_updated')),
            raw_data=data.get('raw_data'),
            boarding_offset_minutes=int(
                data.get('boarding_offset_minutes', DEFAULT_BOARDING_OFFSET_MINUTES)
            ),
        )


class FlightStatusRecord(Base):
    """
    Durable flight status, one row per flight key.

    Upserted by the resolver on a provider hit and by the polling
    scheduler when it detects a change. Concurrent writers of the same
    key simply overwrite each other.
    """

    __tablename__ = 'flight_statuses'

    flight_key: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment='Flight number + departure date, e.g. AA123_2025-06-01'
    )

    flight_number: Mapped[str] = mapped_column(String(10), index=True)

    airline_code: Mapped[str] = mapped_column(String(AIRLINE_CODE_LENGTH), default='')

    status: Mapped[str] = mapped_column(
        String(20),
        default=FlightLifecycle.UNKNOWN.value,
        comment='Lifecycle status'
    )

    gate: Mapped[str] = mapped_column(String(GATE_LENGTH), default='')

    terminal: Mapped[str] = mapped_column(String(TERMINAL_LENGTH), default='')

    departure_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment='Scheduled departure (UTC)'
    )

    arrival_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment='Scheduled arrival (UTC)'
    )

    delay_minutes: Mapped[int] = mapped_column(Integer, default=0)

    boarding_offset_minutes: Mapped[int] = mapped_column(
        Integer,
        default=DEFAULT_BOARDING_OFFSET_MINUTES,
        comment='Minutes before departure that boarding starts'
    )

    gate_change: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    last_updated: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    raw_data: Mapped[Optional[Any]] = mapped_column(
        JSON,
        nullable=True,
        comment='Untransformed provider payload, kept for audit'
    )

    def __repr__(self) -> str:
        return f'<FlightStatusRecord {self.flight_key} {self.status} gate={self.gate or "?"}>'

    def to_status(self) -> FlightStatus:
        return FlightStatus(
            flight_key=self.flight_key,
            flight_number=self.flight_number,
            airline_code=self.airline_code or '',
            status=FlightLifecycle.parse(self.status),
            gate=self.gate or '',
            terminal=self.terminal or '',
            departure_time=as_utc(self.departure_time),
            arrival_time=as_utc(self.arrival_time),
            delay_minutes=self.delay_minutes or 0,
            gate_change=GateChange.from_dict(self.gate_change) if self.gate_change else None,
            last_updated=as_utc(self.last_updated),
            raw_data=self.raw_data,
            boarding_offset_minutes=self.boarding_offset_minutes,
        )

    @staticmethod
    def row_values(status: FlightStatus) -> dict:
        """Column values for an insert/upsert of ``status``."""
        return {
            'flight_key': status.flight_key,
            'flight_number': status.flight_number,
            'airline_code': status.airline_code,
            'status': status.status.value,
            'gate': status.gate,
            'terminal': status.terminal,
            'departure_time': status.departure_time,
            'arrival_time': status.arrival_time,
            'delay_minutes': status.delay_minutes,
            'boarding_offset_minutes': status.boarding_offset_minutes,
            'gate_change': status.gate_change.to_dict() if status.gate_change else None,
            'last_updated': status.last_updated,
            'raw_data': status.raw_data,
        }
