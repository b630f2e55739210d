"""
GateWatch Backend Package.

Flight tracking companion built with Flask, SQLAlchemy, and requests.
Keeps tracked flights in sync with an external aviation data provider and
pushes gate, delay and boarding notifications to travellers.

Modules:
    api/            REST endpoints for tracking, location and notifications
    models/         SQLAlchemy ORM models and the canonical flight status
    providers/      Aviation data provider adapters (AviationStack, ...)
    sync/           Status resolver, change detection and background schedulers
    notifications/  Notification dispatch and push transports
    proximity.py    Walk-time estimation from user location to the airport
    urgency.py      Shared urgency tiers for boarding and walk-time
    cache.py        Thread-safe in-memory TTL cache
    config.py       Centralized configuration from environment variables
"""

__version__ = '1.0.0'
