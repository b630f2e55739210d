"""
Change detection between two status snapshots of the same flight.

Only three fields matter operationally: gate, lifecycle status and delay
minutes. Everything else (terminal, raw payload, timestamps) can differ
without producing a change.

Rules:
- Gate: reported only when the old gate was known and differs. A first
  gate assignment is not a "change from nothing".
- Status: reported whenever the lifecycle value differs.
- Delay: reported whenever the minutes differ, decreases included.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional, Union

from gatewatch.models import FlightLifecycle, FlightStatus, GateChange, GateImpact


@dataclass(frozen=True)
class GateChanged:
    old: str
    new: str


@dataclass(frozen=True)
class StatusChanged:
    old: FlightLifecycle
    new: FlightLifecycle


@dataclass(frozen=True)
class DelayChanged:
    old: int
    new: int


Change = Union[GateChanged, StatusChanged, DelayChanged]


@dataclass(frozen=True)
class ChangeSet:
    """At most one change of each kind. Falsy when nothing relevant changed."""
    gate: Optional[GateChanged] = None
    status: Optional[StatusChanged] = None
    delay: Optional[DelayChanged] = None

    def __iter__(self) -> Iterator[Change]:
        for change in (self.gate, self.status, self.delay):
            if change is not None:
                yield change

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return len(self) > 0

    def describe(self) -> List[str]:
        """Short human-readable summary, for logs."""
        parts = []
        if self.gate:
            parts.append(f'gate {self.gate.old}->{self.gate.new}')
        if self.status:
            parts.append(f'status {self.status.old.value}->{self.status.new.value}')
        if self.delay:
            parts.append(f'delay {self.delay.old}->{self.delay.new}m')
        return parts


def detect_changes(old: FlightStatus, new: FlightStatus) -> ChangeSet:
    """Compare two snapshots; pure, no I/O."""
    gate = None
    if old.gate and old.gate != new.gate:
        gate = GateChanged(old=old.gate, new=new.gate)

    status = None
    if old.status != new.status:
        status = StatusChanged(old=old.status, new=new.status)

    delay = None
    if old.delay_minutes != new.delay_minutes:
        delay = DelayChanged(old=old.delay_minutes, new=new.delay_minutes)

    return ChangeSet(gate=gate, status=status, delay=delay)


_CONCOURSE = re.compile(r'^[A-Za-z]+')


def _concourse(gate: str) -> str:
    match = _CONCOURSE.match(gate or '')
    return match.group(0).upper() if match else ''


def grade_gate_impact(old: FlightStatus, new: FlightStatus) -> GateImpact:
    """
    Estimate how disruptive a gate move is.

    major: terminal changed. minor: same terminal, different concourse
    letter (B12 -> C3). none: same concourse (B12 -> B14).
    """
    if old.terminal and new.terminal and old.terminal != new.terminal:
        return GateImpact.MAJOR
    if _concourse(old.gate) != _concourse(new.gate):
        return GateImpact.MINOR
    return GateImpact.NONE


def gate_change_record(
    change: GateChanged,
    old: FlightStatus,
    new: FlightStatus,
    changed_at: datetime,
    reason: str = '',
) -> GateChange:
    """Embedded GateChange to attach to the new snapshot."""
    return GateChange(
        old_gate=change.old,
        new_gate=change.new,
        reason=reason,
        time_impact=grade_gate_impact(old, new),
        changed_at=changed_at,
    )
