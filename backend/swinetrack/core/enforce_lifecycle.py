"""Lifecycle Enforcement — the pig life-state machine and lot open/closed checks.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - check_* return an InvalidTransitionError on violation, None on success
    - SOLD and DEAD are terminal: no transition, weighing or transfer leaves them
    - A pig leaves the herd (occupancy −1, lot live-count −1) only when it moves
      from ACTIVE or SICK into SOLD or DEAD, so the decrement happens exactly once

Design Decisions:
    - Transition table as data (VALID_TRANSITIONS): single source of truth, tested directly
    - Counter deltas described by TransitionEffect; the service shell applies them
      inside its unit of work
"""

from dataclasses import dataclass

from swinetrack.core.domain_types import LifeState, LotStatus
from swinetrack.core.errors import ErrorContext, InvalidTransitionError
from swinetrack.core.repository_protocols import LotLike, PigLike


VALID_TRANSITIONS: dict[LifeState, frozenset[LifeState]] = {
    LifeState.ACTIVE: frozenset({LifeState.SOLD, LifeState.DEAD, LifeState.SICK}),
    LifeState.SICK: frozenset({LifeState.ACTIVE, LifeState.SOLD, LifeState.DEAD}),
    LifeState.SOLD: frozenset(),
    LifeState.DEAD: frozenset(),
}


@dataclass(frozen=True)
class TransitionEffect:
    """Counter side effects of an accepted transition."""
    previous: LifeState
    target: LifeState
    occupancy_delta: int
    live_count_delta: int

    @property
    def leaves_herd(self) -> bool:
        return self.occupancy_delta < 0


def check_transition(current: str, requested: str) -> InvalidTransitionError | None:
    """Validate a life-state change against the transition table."""
    try:
        current_state = LifeState(current)
        requested_state = LifeState(requested)
    except ValueError:
        return InvalidTransitionError(str(current), str(requested), "unknown life-state")

    if current_state.is_terminal:
        return InvalidTransitionError(
            current_state.value, requested_state.value,
            f"{current_state.value} is a terminal state",
        )
    if requested_state not in VALID_TRANSITIONS[current_state]:
        return InvalidTransitionError(current_state.value, requested_state.value)
    return None


def transition_effect(current: str, requested: str) -> TransitionEffect:
    """Describe counter deltas for a transition already accepted by check_transition."""
    previous = LifeState(current)
    target = LifeState(requested)
    leaving = previous.is_live and target.is_terminal
    delta = -1 if leaving else 0
    return TransitionEffect(
        previous=previous, target=target,
        occupancy_delta=delta, live_count_delta=delta,
    )


def check_pig_mutable(pig: PigLike, operation: str) -> InvalidTransitionError | None:
    """Weighing and transfers are only allowed while the pig is ACTIVE or SICK."""
    state = LifeState(pig.state)
    if state.is_terminal:
        return InvalidTransitionError(
            state.value, operation,
            f"pig '{pig.tag}' is {state.value}; no further changes are permitted",
            context=ErrorContext(entity_type="Pig", entity_id=str(pig.id), operation=operation),
        )
    return None


def check_lot_open(lot: LotLike, operation: str) -> InvalidTransitionError | None:
    """A FINALIZED lot accepts no new pens, admissions or life-state changes."""
    if lot.status != LotStatus.ACTIVE.value:
        return InvalidTransitionError(
            lot.status, operation,
            f"lot '{lot.code}' is {lot.status}",
            context=ErrorContext(entity_type="Lot", entity_id=str(lot.id), operation=operation),
        )
    return None


def check_lot_finalizable(lot: LotLike) -> InvalidTransitionError | None:
    """ACTIVE → FINALIZED is one-way; finalizing twice is rejected."""
    if lot.status == LotStatus.FINALIZED.value:
        return InvalidTransitionError(
            lot.status, LotStatus.FINALIZED.value, f"lot '{lot.code}' is already finalized",
            context=ErrorContext(entity_type="Lot", entity_id=str(lot.id), operation="finalize_lot"),
        )
    return None
