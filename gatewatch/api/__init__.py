"""
API module for GateWatch.

Provides REST endpoints for:
- Flight tracking and status
- Location, walk time and airport data
- Notifications, preferences and users
"""

from gatewatch.api.flights import flights_bp
from gatewatch.api.location import airports_bp, location_bp
from gatewatch.api.notifications import notifications_bp, users_bp

__all__ = ['flights_bp', 'location_bp', 'airports_bp', 'notifications_bp', 'users_bp']
