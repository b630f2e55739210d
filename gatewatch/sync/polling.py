"""
Polling scheduler - detects drift between stored and live flight status.

Cycle stages:
1. Load: every active tracked flight, grouped by flight key
2. Fetch: one provider call per flight key (cache and database bypassed)
3. Compare: against the stored snapshot via the change detector
4. Save: upsert the new snapshot and refresh the cache, only if changed
5. Notify: dispatch the changes to every user tracking that flight

A failure on one flight key (provider error, failed upsert) is logged and
that key is skipped; the rest of the cycle continues. The next tick is the
retry.
"""

import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from gatewatch.changes import ChangeSet, detect_changes, gate_change_record
from gatewatch.clock import Clock, utc_now
from gatewatch.config import config
from gatewatch.errors import NotFoundError, PersistenceError, ProviderError
from gatewatch.models import TrackedFlight
from gatewatch.notifications import NotificationDispatcher
from gatewatch.repositories import TrackedFlightRepository
from gatewatch.sync.loop import RecurringTask
from gatewatch.sync.resolver import StatusResolver

logger = logging.getLogger(__name__)


class PollingScheduler(RecurringTask):
    """Periodically reconciles tracked flights against the provider."""

    name = 'flight-polling'

    def __init__(
        self,
        flights: TrackedFlightRepository,
        resolver: StatusResolver,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
        interval_seconds: Optional[float] = None,
        shutdown_grace_seconds: Optional[float] = None,
    ):
        super().__init__(
            interval_seconds=interval_seconds or config.scheduler.poll_interval_seconds,
            shutdown_grace_seconds=(
                config.scheduler.shutdown_grace_seconds
                if shutdown_grace_seconds is None else shutdown_grace_seconds
            ),
        )
        self.flights = flights
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.clock = clock

    def run_cycle(self) -> int:
        """Poll every active flight once. Returns count of flight keys that changed."""
        groups = self._group_by_flight_key(self.flights.find_active())
        if not groups:
            logger.debug('No active flights to poll')
            return 0

        changed = 0
        for flight_key, tracked in groups.items():
            if self.stopping:
                logger.info('Stop requested, abandoning polling cycle')
                break
            try:
                if self.check_flight(tracked):
                    changed += 1
            except NotFoundError as e:
                logger.warning(f'Provider has no data for {flight_key}, skipping: {e}')
            except ProviderError as e:
                logger.error(f'Error fetching flight status for {flight_key}: {e}')
            except PersistenceError as e:
                logger.error(f'Could not save status for {flight_key}, skipping: {e}')

        logger.info(f'Polled {len(groups)} flight(s), {changed} changed')
        return changed

    def check_flight(self, tracked: List[TrackedFlight]) -> Optional[ChangeSet]:
        """
        Reconcile one flight key.

        ``tracked`` holds every active subscription to that key; all of
        them get notified. Returns the detected changes, or None.
        """
        flight = tracked[0]
        flight_key = flight.flight_key

        old_status = self.resolver.stored(flight_key)
        new_status = self.resolver.fetch_fresh(flight.flight_number, flight.departure_date)

        if old_status is None:
            # Nothing to compare against yet; store as the baseline
            logger.info(f'No stored status for {flight_key}, saving baseline')
            self.resolver.save(new_status)
            return None

        changes = detect_changes(old_status, new_status)
        if not changes:
            return None

        if changes.gate:
            new_status.gate_change = gate_change_record(changes.gate, old_status, new_status, self.clock())

        # Raises PersistenceError, which skips this key before anyone is notified
        self.resolver.save(new_status)

        logger.info(f'Flight {flight_key} updated: {", ".join(changes.describe())}')

        for user_id in OrderedDict.fromkeys(t.user_id for t in tracked):
            self.dispatcher.dispatch_changes(user_id, new_status, changes)

        return changes

    @staticmethod
    def _group_by_flight_key(flights: List[TrackedFlight]) -> Dict[str, List[TrackedFlight]]:
        groups: Dict[str, List[TrackedFlight]] = OrderedDict()
        for flight in flights:
            groups.setdefault(flight.flight_key, []).append(flight)
        return groups
