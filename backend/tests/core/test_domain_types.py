"""Tests for domain enums — terminal states and string round-trips."""

import pytest

from swinetrack.core.domain_types import ChangeField, LifeState, LotStatus, PenType, Site


@pytest.mark.parametrize("state,terminal", [
    (LifeState.ACTIVE, False), (LifeState.SICK, False),
    (LifeState.SOLD, True), (LifeState.DEAD, True),
])
def test_terminal_states(state, terminal):
    assert state.is_terminal is terminal
    assert state.is_live is not terminal


def test_enums_are_their_stored_strings():
    assert LifeState("SICK") == "SICK"
    assert LotStatus.FINALIZED.value == "FINALIZED"
    assert Site("NURSERY") is Site.NURSERY
    assert {t.value for t in PenType} == {"NURSERY", "FINISHING", "INFIRMARY"}
    assert {f.value for f in ChangeField} == {"WEIGHT", "STATE", "PEN"}


def test_unknown_state_raises():
    with pytest.raises(ValueError):
        LifeState("ESCAPED")
