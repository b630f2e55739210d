"""
User model - the traveller who owns tracked flights.

Only the fields the notification pipeline reads are modelled here:
the push token and the six notification preference switches.
Account management (credentials, sessions) lives elsewhere.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, Integer, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from gatewatch.clock import utc_now
from gatewatch.models.base import Base

# Preference switches, in the order they are exposed over the API
PREFERENCE_FIELDS = (
    'notify_gate_change',
    'notify_boarding',
    'notify_delay',
    'boarding_reminder_40',
    'boarding_reminder_20',
    'boarding_reminder_10',
)


class User(Base):
    """Registered traveller with push token and notification preferences."""

    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    push_token: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        comment='FCM registration token; no token means no pushes'
    )

    # Notification preferences - all on by default
    notify_gate_change: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_boarding: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_delay: Mapped[bool] = mapped_column(Boolean, default=True)
    boarding_reminder_40: Mapped[bool] = mapped_column(Boolean, default=True)
    boarding_reminder_20: Mapped[bool] = mapped_column(Boolean, default=True)
    boarding_reminder_10: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
    )

    def __repr__(self) -> str:
        return f'<User {self.id} {self.email}>'

    @property
    def preferences(self) -> dict:
        return {name: bool(getattr(self, name)) for name in PREFERENCE_FIELDS}

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'email': self.email,
            'phone': self.phone,
            'has_push_token': bool(self.push_token),
            'preferences': self.preferences,
        }
