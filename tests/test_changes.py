"""Tests for change detection and gate-change grading."""

from dataclasses import replace

from gatewatch.changes import (
    ChangeSet,
    DelayChanged,
    GateChanged,
    StatusChanged,
    detect_changes,
    gate_change_record,
    grade_gate_impact,
)
from gatewatch.models import FlightLifecycle, GateImpact

from conftest import START, make_status


def test_identical_snapshots_have_no_changes():
    status = make_status()

    changes = detect_changes(status, replace(status))

    assert not changes
    assert len(changes) == 0
    assert list(changes) == []


def test_irrelevant_fields_are_ignored():
    """Terminal and timestamps may differ without producing a change."""

    old = make_status()
    new = replace(old, terminal='8', last_updated=None, raw_data={'x': 1})

    assert not detect_changes(old, new)


def test_gate_status_and_delay_reported_together():
    old = make_status(gate='B12', delay_minutes=0)
    new = make_status(gate='C3', status=FlightLifecycle.DELAYED, delay_minutes=25)

    changes = detect_changes(old, new)

    assert changes.gate == GateChanged(old='B12', new='C3')
    assert changes.status == StatusChanged(old=FlightLifecycle.ON_TIME, new=FlightLifecycle.DELAYED)
    assert changes.delay == DelayChanged(old=0, new=25)
    assert len(changes) == 3
    assert changes.describe() == ['gate B12->C3', 'status On Time->Delayed', 'delay 0->25m']


def test_first_gate_assignment_is_not_a_change():
    """A gate appearing where none was known is not reported."""

    changes = detect_changes(make_status(gate=''), make_status(gate='A7'))

    assert changes.gate is None
    assert not changes


def test_delay_decrease_is_a_change():
    changes = detect_changes(make_status(delay_minutes=30), make_status(delay_minutes=10))

    assert changes == ChangeSet(delay=DelayChanged(old=30, new=10))


def test_gate_impact_grading():
    same_concourse = grade_gate_impact(make_status(gate='B12'), make_status(gate='B14'))
    other_concourse = grade_gate_impact(make_status(gate='B12'), make_status(gate='C3'))
    other_terminal = grade_gate_impact(
        make_status(gate='B12', terminal='1'),
        make_status(gate='B14', terminal='4'),
    )

    assert same_concourse is GateImpact.NONE
    assert other_concourse is GateImpact.MINOR
    assert other_terminal is GateImpact.MAJOR


def test_gate_change_record_carries_both_gates():
    old, new = make_status(gate='A1'), make_status(gate='D4')
    change = detect_changes(old, new).gate

    record = gate_change_record(change, old, new, START, reason='Operational')

    assert record.old_gate == 'A1'
    assert record.new_gate == 'D4'
    assert record.time_impact is GateImpact.MINOR
    assert record.changed_at == START
    assert record.reason == 'Operational'
