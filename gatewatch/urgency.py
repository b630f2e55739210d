"""
Urgency tiers shared by flight-status responses, boarding reminders and
walk-time estimates.

The four-tier vocabulary (calm|moderate|urgent|critical) is an external
contract: clients key their colors and sounds off these exact strings.
"""

from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional

# Upper bounds (inclusive) for the absolute classifier
CRITICAL_MINUTES = 10
URGENT_MINUTES = 20
MODERATE_MINUTES = 40

# Slack margins for the walk-time classifier
URGENT_SLACK_MINUTES = 10
MODERATE_SLACK_MINUTES = 20


class UrgencyLevel(str, Enum):
    """Ordinal urgency tier, calm < moderate < urgent < critical."""
    CALM = 'calm'
    MODERATE = 'moderate'
    URGENT = 'urgent'
    CRITICAL = 'critical'

    @property
    def rank(self) -> int:
        return _RANK[self]


_RANK = {
    UrgencyLevel.CALM: 0,
    UrgencyLevel.MODERATE: 1,
    UrgencyLevel.URGENT: 2,
    UrgencyLevel.CRITICAL: 3,
}

RECOMMENDED_ACTIONS = {
    UrgencyLevel.CRITICAL: 'Head to gate immediately!',
    UrgencyLevel.URGENT: 'Start heading to gate now',
    UrgencyLevel.MODERATE: 'Consider heading to gate soon',
    UrgencyLevel.CALM: 'You have plenty of time',
}


def minutes_until(target: Optional[datetime], now: datetime) -> Optional[int]:
    """
    Whole minutes from ``now`` until ``target``, truncated toward zero.

    Negative once the target has passed; None if there is no target.
    """
    if target is None:
        return None
    return int((target - now).total_seconds() / 60)


def classify_urgency(minutes_remaining: int) -> UrgencyLevel:
    """
    Map minutes remaining to a tier.

    critical <= 10 < urgent <= 20 < moderate <= 40 < calm.
    Negative values (threshold already passed) are critical.
    """
    if minutes_remaining <= CRITICAL_MINUTES:
        return UrgencyLevel.CRITICAL
    if minutes_remaining <= URGENT_MINUTES:
        return UrgencyLevel.URGENT
    if minutes_remaining <= MODERATE_MINUTES:
        return UrgencyLevel.MODERATE
    return UrgencyLevel.CALM


class WalkUrgency(NamedTuple):
    level: UrgencyLevel
    recommended_action: str


def classify_walk_urgency(walk_minutes: int, minutes_until_boarding: int) -> WalkUrgency:
    """
    Tier a walk to the gate against the time left before boarding.

    critical if the walk alone is longer than the time left, urgent if
    less than 10 minutes of slack would remain, moderate under 20.
    """
    if walk_minutes > minutes_until_boarding:
        level = UrgencyLevel.CRITICAL
    elif walk_minutes + URGENT_SLACK_MINUTES > minutes_until_boarding:
        level = UrgencyLevel.URGENT
    elif walk_minutes + MODERATE_SLACK_MINUTES > minutes_until_boarding:
        level = UrgencyLevel.MODERATE
    else:
        level = UrgencyLevel.CALM
    return WalkUrgency(level, RECOMMENDED_ACTIONS[level])
