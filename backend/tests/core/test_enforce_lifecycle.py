"""Tests for life-state transition rules — table, terminal law and counter effects."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

from swinetrack.core.domain_types import LifeState
from swinetrack.core.enforce_lifecycle import (
    VALID_TRANSITIONS,
    check_lot_finalizable,
    check_lot_open,
    check_pig_mutable,
    check_transition,
    transition_effect,
)
from swinetrack.core.errors import InvalidTransitionError


def _pig(state: str) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), tag="T-000001", state=state)


def _lot(status: str) -> SimpleNamespace:
    return SimpleNamespace(id=uuid4(), code="LOTE-2024-001", status=status)


@pytest.mark.parametrize("current,requested", [
    ("ACTIVE", "SICK"), ("ACTIVE", "SOLD"), ("ACTIVE", "DEAD"),
    ("SICK", "ACTIVE"), ("SICK", "SOLD"), ("SICK", "DEAD"),
])
def test_listed_transitions_are_accepted(current, requested):
    assert check_transition(current, requested) is None


@pytest.mark.parametrize("terminal", ["SOLD", "DEAD"])
@pytest.mark.parametrize("requested", ["ACTIVE", "SICK", "SOLD", "DEAD"])
def test_terminal_states_reject_every_transition(terminal, requested):
    error = check_transition(terminal, requested)
    assert isinstance(error, InvalidTransitionError)
    assert "terminal" in error.message


@pytest.mark.parametrize("state", ["ACTIVE", "SICK"])
def test_same_state_is_not_a_transition(state):
    assert isinstance(check_transition(state, state), InvalidTransitionError)


def test_unknown_state_is_rejected():
    error = check_transition("ACTIVE", "ESCAPED")
    assert isinstance(error, InvalidTransitionError)
    assert error.http_status == 409


def test_terminal_states_have_no_outgoing_edges():
    assert VALID_TRANSITIONS[LifeState.SOLD] == frozenset()
    assert VALID_TRANSITIONS[LifeState.DEAD] == frozenset()


@pytest.mark.parametrize("current", ["ACTIVE", "SICK"])
@pytest.mark.parametrize("target", ["SOLD", "DEAD"])
def test_leaving_the_herd_decrements_both_counters(current, target):
    effect = transition_effect(current, target)
    assert effect.occupancy_delta == -1
    assert effect.live_count_delta == -1
    assert effect.leaves_herd


@pytest.mark.parametrize("current,target", [("ACTIVE", "SICK"), ("SICK", "ACTIVE")])
def test_sickness_moves_no_counters(current, target):
    effect = transition_effect(current, target)
    assert effect.occupancy_delta == 0
    assert effect.live_count_delta == 0
    assert not effect.leaves_herd
    assert effect.previous == LifeState(current)
    assert effect.target == LifeState(target)


@pytest.mark.parametrize("state", ["ACTIVE", "SICK"])
def test_live_pig_is_mutable(state):
    assert check_pig_mutable(_pig(state), "record_weighing") is None


@pytest.mark.parametrize("state", ["SOLD", "DEAD"])
def test_terminal_pig_is_frozen(state):
    pig = _pig(state)
    error = check_pig_mutable(pig, "transfer_pig")
    assert isinstance(error, InvalidTransitionError)
    assert error.context.entity_id == str(pig.id)
    assert error.context.operation == "transfer_pig"


def test_open_lot_accepts_commands():
    assert check_lot_open(_lot("ACTIVE"), "admit_pig") is None


def test_finalized_lot_rejects_commands():
    error = check_lot_open(_lot("FINALIZED"), "admit_pig")
    assert isinstance(error, InvalidTransitionError)
    assert "FINALIZED" in error.message


def test_finalize_is_one_way():
    assert check_lot_finalizable(_lot("ACTIVE")) is None
    assert isinstance(check_lot_finalizable(_lot("FINALIZED")), InvalidTransitionError)
