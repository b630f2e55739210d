"""
Airport model - static reference data keyed by IATA code.

Coordinates feed the proximity engine; the average security wait is
served as a rough estimate to travellers.
"""

from sqlalchemy import String, Float, Integer
from sqlalchemy.orm import Mapped, mapped_column

from gatewatch.models.base import Base


class Airport(Base):
    """
    Static airport information.

    Fields:
        code: 3-letter IATA code (e.g., 'JFK')
        latitude/longitude: WGS84 reference point used for walk-time estimates
        security_wait_avg: Typical security queue in minutes
    """

    __tablename__ = 'airports'

    code: Mapped[str] = mapped_column(String(3), primary_key=True, comment='IATA airport code')

    name: Mapped[str] = mapped_column(String(100))

    city: Mapped[str] = mapped_column(String(100), default='')

    country: Mapped[str] = mapped_column(String(100), default='')

    timezone: Mapped[str] = mapped_column(String(50), default='UTC')

    security_wait_avg: Mapped[int] = mapped_column(Integer, default=20, comment='Minutes')

    latitude: Mapped[float] = mapped_column(Float)

    longitude: Mapped[float] = mapped_column(Float)

    def __repr__(self) -> str:
        return f'<Airport {self.code} {self.name}>'

    def to_dict(self) -> dict:
        return {
            'code': self.code,
            'name': self.name,
            'city': self.city,
            'country': self.country,
            'timezone': self.timezone,
            'security_wait_avg': self.security_wait_avg,
            'latitude': self.latitude,
            'longitude': self.longitude,
        }
