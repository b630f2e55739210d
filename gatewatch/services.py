"""
Service wiring.

Builds every GateWatch component from configuration, with explicit
overrides for the pieces tests replace (database, provider, push, clock).

Usage:
    from gatewatch.services import build_services

    services = build_services()
    services.start_schedulers()
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import sessionmaker

from gatewatch.cache import TTLCache
from gatewatch.clock import Clock, utc_now
from gatewatch.config import AppConfig, config as default_config
from gatewatch.models import SessionLocal
from gatewatch.notifications import NotificationDispatcher, PushTransport, create_push_transport
from gatewatch.providers import ProviderAdapter, ProviderGateway, create_gateway
from gatewatch.proximity import ProximityEngine
from gatewatch.repositories import (
    AirportRepository,
    FlightStatusRepository,
    NotificationRepository,
    TrackedFlightRepository,
    UserRepository,
)
from gatewatch.sync import PollingScheduler, ReminderScheduler, StatusResolver
from gatewatch.tracking import FlightTracker

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Every long-lived component of a running GateWatch instance."""
    config: AppConfig
    cache: TTLCache
    statuses: FlightStatusRepository
    flights: TrackedFlightRepository
    users: UserRepository
    notifications: NotificationRepository
    airports: AirportRepository
    provider: ProviderGateway
    resolver: StatusResolver
    dispatcher: NotificationDispatcher
    tracker: FlightTracker
    proximity: ProximityEngine
    polling: PollingScheduler
    reminders: ReminderScheduler

    def start_schedulers(self) -> None:
        self.polling.start_background()
        self.reminders.start_background()

    def stop_schedulers(self) -> bool:
        """Stop both loops. False if either missed the grace period."""
        polling_stopped = self.polling.stop()
        reminders_stopped = self.reminders.stop()
        return polling_stopped and reminders_stopped

    @property
    def stats(self) -> dict:
        return {
            'provider': self.provider.stats,
            'resolver': self.resolver.stats,
            'cache': self.cache.stats,
            'notifications': self.dispatcher.stats,
            'polling': self.polling.stats,
            'reminders': self.reminders.stats,
        }


def build_services(
    config: Optional[AppConfig] = None,
    session_factory: Optional[sessionmaker] = None,
    provider: Optional[ProviderAdapter] = None,
    push: Optional[PushTransport] = None,
    clock: Clock = utc_now,
) -> Services:
    """
    Wire up the component graph.

    ``provider`` and ``push`` override the configured adapter and transport;
    ``session_factory`` binds every repository to another database.
    """
    config = config or default_config
    session_factory = session_factory or SessionLocal

    cache = TTLCache(max_entries=config.cache.max_entries)

    statuses = FlightStatusRepository(session_factory, clock)
    flights = TrackedFlightRepository(session_factory, clock)
    users = UserRepository(session_factory, clock)
    notifications = NotificationRepository(session_factory, clock)
    airports = AirportRepository(session_factory, clock)

    gateway = ProviderGateway(provider) if provider is not None else create_gateway(config.aviation, clock)
    push = push or create_push_transport(config.push)

    resolver = StatusResolver(gateway, statuses, cache, config.cache.status_ttl_seconds)
    dispatcher = NotificationDispatcher(users, notifications, push)

    tracker = FlightTracker(resolver, flights, users, notifications, clock)
    proximity = ProximityEngine(
        cache,
        flights,
        airports,
        resolver,
        clock=clock,
        walking_speed_mps=config.proximity.walking_speed_mps,
        location_ttl_seconds=config.cache.location_ttl_seconds,
        security_wait_ttl_seconds=config.cache.security_wait_ttl_seconds,
    )

    polling = PollingScheduler(
        flights,
        resolver,
        dispatcher,
        clock=clock,
        interval_seconds=config.scheduler.poll_interval_seconds,
        shutdown_grace_seconds=config.scheduler.shutdown_grace_seconds,
    )
    reminders = ReminderScheduler(
        flights,
        users,
        resolver,
        dispatcher,
        clock=clock,
        interval_seconds=config.scheduler.reminder_interval_seconds,
        shutdown_grace_seconds=config.scheduler.shutdown_grace_seconds,
    )

    logger.info(f'Services ready (provider={gateway.provider_name})')

    return Services(
        config=config,
        cache=cache,
        statuses=statuses,
        flights=flights,
        users=users,
        notifications=notifications,
        airports=airports,
        provider=gateway,
        resolver=resolver,
        dispatcher=dispatcher,
        tracker=tracker,
        proximity=proximity,
        polling=polling,
        reminders=reminders,
    )
