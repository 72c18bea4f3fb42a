"""Placement Enforcement — where a pig may live: pen ownership, pen type, capacity.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return a typed error on violation, None on success
    - A pig's pen always belongs to the pig's lot
    - 0 <= occupancy <= capacity for every pen
    - Registered live pigs of a lot never exceed the lot's live headcount

Design Decisions:
    - NURSERY pens only in NURSERY lots; FINISHING and INFIRMARY pens in any lot
      (infirmary pens receive sick animals from every stage)
    - Capacity checks read the row locked by the shell, so a passing check
      cannot be invalidated by a concurrent admit before commit
"""

from uuid import UUID

from swinetrack.core.domain_types import PenType, Site
from swinetrack.core.errors import (
    CapacityExceededError,
    ErrorContext,
    FieldValidationError,
    InconsistentReferenceError,
)
from swinetrack.core.repository_protocols import LotLike, PenLike


def check_pen_type_compatible(
    pen_type: str, site: str,
) -> InconsistentReferenceError | None:
    """Pen type must suit the lot's site classification."""
    if PenType(pen_type) == PenType.NURSERY and Site(site) != Site.NURSERY:
        return InconsistentReferenceError(
            f"Pen type {pen_type} is not compatible with lot site {site}",
        )
    return None


def check_pen_in_lot(pen: PenLike, lot_id: UUID) -> InconsistentReferenceError | None:
    """Pen must be owned by the given lot."""
    if pen.lot_id != lot_id:
        return InconsistentReferenceError(
            f"Pen '{pen.number}' does not belong to lot {lot_id}",
            context=ErrorContext(entity_type="Pen", entity_id=str(pen.id)),
        )
    return None


def check_pen_has_room(pen: PenLike) -> CapacityExceededError | None:
    """At least one free slot in the pen."""
    if pen.occupancy >= pen.capacity:
        return CapacityExceededError(
            f"Pen '{pen.number}' is at capacity ({pen.occupancy}/{pen.capacity})",
            capacity=pen.capacity, occupancy=pen.occupancy,
            context=ErrorContext(entity_type="Pen", entity_id=str(pen.id)),
        )
    return None


def check_lot_headcount(
    lot: LotLike, registered_live: int,
) -> CapacityExceededError | None:
    """Every admitted pig is one of the lot's counted live animals."""
    if registered_live >= lot.current_live_count:
        return CapacityExceededError(
            f"Lot '{lot.code}' already has all {lot.current_live_count} "
            f"live animals registered",
            capacity=lot.current_live_count, occupancy=registered_live,
            context=ErrorContext(entity_type="Lot", entity_id=str(lot.id)),
        )
    return None


def check_admission(
    lot: LotLike, pen: PenLike, registered_live: int,
) -> InconsistentReferenceError | CapacityExceededError | None:
    """All placement preconditions for admitting a new pig."""
    return (
        check_pen_in_lot(pen, lot.id)
        or check_pen_type_compatible(pen.pen_type, lot.site)
        or check_pen_has_room(pen)
        or check_lot_headcount(lot, registered_live)
    )


def check_transfer_target(
    lot: LotLike, origin_pen_id: UUID, target: PenLike,
) -> InconsistentReferenceError | CapacityExceededError | None:
    """Target pen must differ from the origin, share the lot, suit the site and have room."""
    if target.id == origin_pen_id:
        return InconsistentReferenceError(
            f"Pig is already in pen '{target.number}'",
            context=ErrorContext(entity_type="Pen", entity_id=str(target.id)),
        )
    return (
        check_pen_in_lot(target, lot.id)
        or check_pen_type_compatible(target.pen_type, lot.site)
        or check_pen_has_room(target)
    )


def check_capacity_value(
    capacity: int, occupancy: int = 0,
) -> FieldValidationError | CapacityExceededError | None:
    """Capacity must be positive and never below current occupancy."""
    if capacity <= 0:
        return FieldValidationError("Pen capacity must be greater than 0", "capacity")
    if capacity < occupancy:
        return CapacityExceededError(
            f"New capacity {capacity} is below current occupancy {occupancy}",
            capacity=capacity, occupancy=occupancy,
        )
    return None


def check_pen_reassignment(
    pen: PenLike, new_lot: LotLike, pigs_in_pen: int,
) -> InconsistentReferenceError | None:
    """A pen changes lot only while empty, and must suit the new lot's site."""
    if pen.lot_id == new_lot.id:
        return None
    if pigs_in_pen > 0:
        return InconsistentReferenceError(
            f"Pen '{pen.number}' holds {pigs_in_pen} pig(s) and cannot change lot",
            context=ErrorContext(entity_type="Pen", entity_id=str(pen.id)),
        )
    return check_pen_type_compatible(pen.pen_type, new_lot.site)
