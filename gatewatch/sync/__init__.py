"""
Flight status synchronization.

Resolves flight status through cache, database and provider, and runs the
two background loops that keep tracked flights fresh and remind travellers
before boarding.
"""

from gatewatch.sync.loop import RecurringTask
from gatewatch.sync.polling import PollingScheduler
from gatewatch.sync.reminders import ReminderScheduler, reminder_threshold
from gatewatch.sync.resolver import StatusResolver

__all__ = [
    'RecurringTask',
    'PollingScheduler',
    'ReminderScheduler',
    'StatusResolver',
    'reminder_threshold',
]
