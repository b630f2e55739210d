"""
Notification model - append-only log of everything pushed to a user.

Records are written by the dispatcher before the push is attempted, so
the log is the durable artifact even when delivery fails.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Integer, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from gatewatch.clock import utc_now
from gatewatch.models.base import Base

BOARDING_REMINDER_MINUTES = (40, 20, 10)


class NotificationCategory(str, Enum):
    """Notification type, stored verbatim."""
    GATE_CHANGE = 'gate_change'
    STATUS_CHANGE = 'status_change'
    DELAY = 'delay'
    BOARDING_40 = 'boarding_40'
    BOARDING_20 = 'boarding_20'
    BOARDING_10 = 'boarding_10'

    @classmethod
    def boarding(cls, minutes: int) -> 'NotificationCategory':
        """Reminder category for a threshold in BOARDING_REMINDER_MINUTES."""
        return cls(f'boarding_{minutes}')


class NotificationPriority(str, Enum):
    NORMAL = 'normal'
    HIGH = 'high'


class Notification(Base):
    """One notification sent (or attempted) to a user."""

    __tablename__ = 'notifications'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey('users.id'), index=True)

    flight_key: Mapped[str] = mapped_column(String(32), index=True)

    category: Mapped[str] = mapped_column(String(20), comment='NotificationCategory value')

    title: Mapped[str] = mapped_column(String(200))

    body: Mapped[str] = mapped_column(Text)

    priority: Mapped[str] = mapped_column(String(10), default=NotificationPriority.NORMAL.value)

    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('ix_notifications_user_sent', 'user_id', 'sent_at'),
    )

    def __repr__(self) -> str:
        return f'<Notification {self.id} {self.category} {self.flight_key} user={self.user_id}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'flight_key': self.flight_key,
            'type': self.category,
            'title': self.title,
            'body': self.body,
            'priority': self.priority,
            'sent_at': self.sent_at.isoformat() if self.sent_at else None,
            'read_at': self.read_at.isoformat() if self.read_at else None,
        }
