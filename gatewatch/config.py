"""
Configuration management for GateWatch.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = '1') -> bool:
    """Parse a '1'/'true'/'yes' style environment flag."""
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = os.getenv('DATABASE_URL', 'sqlite:///gatewatch.db')


@dataclass(frozen=True)
class CacheConfig:
    """In-memory TTL cache settings."""
    status_ttl_seconds: int = int(os.getenv('STATUS_CACHE_TTL_SECONDS', '300'))
    location_ttl_seconds: int = int(os.getenv('LOCATION_TTL_SECONDS', '600'))
    security_wait_ttl_seconds: int = int(os.getenv('SECURITY_WAIT_TTL_SECONDS', '900'))
    max_entries: int = 10000


@dataclass(frozen=True)
class AviationConfig:
    """Aviation data provider configuration."""
    provider: str = os.getenv('AVIATION_API_PROVIDER', 'aviationstack').strip().lower()
    aviationstack_key: Optional[str] = os.getenv('AVIATIONSTACK_API_KEY') or None
    aviationstack_url: str = os.getenv('AVIATIONSTACK_URL', 'http://api.aviationstack.com/v1')
    flightaware_key: Optional[str] = os.getenv('FLIGHTAWARE_API_KEY') or None
    amadeus_client_id: Optional[str] = os.getenv('AMADEUS_CLIENT_ID') or None
    amadeus_client_secret: Optional[str] = os.getenv('AMADEUS_CLIENT_SECRET') or None
    timeout_seconds: float = float(os.getenv('AVIATION_TIMEOUT_SECONDS', '10'))

    # Boarding opens this long before scheduled departure
    boarding_offset_minutes: int = int(os.getenv('BOARDING_OFFSET_MINUTES', '40'))


@dataclass(frozen=True)
class PushConfig:
    """Firebase Cloud Messaging configuration."""
    fcm_server_key: Optional[str] = os.getenv('FCM_SERVER_KEY') or None
    fcm_url: str = os.getenv('FCM_URL', 'https://fcm.googleapis.com/fcm/send')
    timeout_seconds: float = float(os.getenv('FCM_TIMEOUT_SECONDS', '10'))

    @property
    def is_configured(self) -> bool:
        return bool(self.fcm_server_key)


@dataclass(frozen=True)
class SchedulerConfig:
    """Background scheduler settings."""
    enabled: bool = _env_flag('SCHEDULERS_ENABLED')
    poll_interval_seconds: float = float(os.getenv('POLL_INTERVAL_SECONDS', '120'))
    reminder_interval_seconds: float = float(os.getenv('REMINDER_INTERVAL_SECONDS', '60'))
    shutdown_grace_seconds: float = float(os.getenv('SHUTDOWN_GRACE_SECONDS', '10'))


@dataclass(frozen=True)
class ProximityConfig:
    """Walk-time estimation settings."""
    walking_speed_mps: float = float(os.getenv('WALKING_SPEED_MPS', '1.4'))


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    database: DatabaseConfig
    cache: CacheConfig
    aviation: AviationConfig
    push: PushConfig
    scheduler: SchedulerConfig
    proximity: ProximityConfig

    # Flask settings
    secret_key: str
    debug: bool


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        database=DatabaseConfig(),
        cache=CacheConfig(),
        aviation=AviationConfig(),
        push=PushConfig(),
        scheduler=SchedulerConfig(),
        proximity=ProximityConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=os.getenv('FLASK_DEBUG', '0') == '1',
    )


# Singleton instance
config = load_config()
