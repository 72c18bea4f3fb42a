"""Weighing Enforcement — weight plausibility rules for pigs and lot admission data.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - A live pig's weight is always > 0
    - A re-weigh may differ from the previous weight by at most max_variation
      (relative to the previous weight); beyond that it is rejected as suspicious
    - Weighing times are UTC and never move a pig's last weighing backwards

Design Decisions:
    - Suspicious variation is a hard rejection with its own error code, so a caller
      can tell it apart from a non-positive weight; there is no override path
    - The variation check is skipped only when the previous weight is not > 0
    - The threshold is always passed in; its single default lives in Settings
"""

from datetime import datetime, timezone

from swinetrack.core.errors import InvalidWeightError


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are converted."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def check_positive_weight(weight: float, label: str = "Weight") -> InvalidWeightError | None:
    """Rule: weights are strictly positive."""
    if weight <= 0:
        return InvalidWeightError(f"{label} must be greater than 0 (got {weight})")
    return None


def weight_variation(previous: float, new: float) -> float:
    """Relative change |new − previous| / previous."""
    return abs(new - previous) / previous


def check_weighing(
    previous: float, new: float, max_variation: float,
) -> InvalidWeightError | None:
    """Validate a new weighing against the previous recorded weight."""
    error = check_positive_weight(new)
    if error:
        return error

    if previous > 0:
        variation = weight_variation(previous, new)
        if variation > max_variation:
            return InvalidWeightError(
                f"Suspicious weight variation: {previous} -> {new} kg "
                f"({variation:.0%} > {max_variation:.0%}). Please verify.",
                suspicious=True,
            )
    return None


def check_weighing_time(
    last_weighed_at: datetime | None, weighed_at: datetime,
) -> InvalidWeightError | None:
    """A weighing may not be dated before the pig's last recorded weighing."""
    if last_weighed_at is None:
        return None
    if as_utc(weighed_at) < as_utc(last_weighed_at):
        return InvalidWeightError(
            f"Weighing dated {as_utc(weighed_at).isoformat()} is earlier than the "
            f"last weighing at {as_utc(last_weighed_at).isoformat()}",
        )
    return None


def check_lot_weights(
    average: float, minimum: float, maximum: float,
) -> InvalidWeightError | None:
    """Lot admission weights must satisfy min <= average <= max, all positive."""
    for label, value in (
        ("Initial average weight", average),
        ("Initial minimum weight", minimum),
        ("Initial maximum weight", maximum),
    ):
        error = check_positive_weight(value, label)
        if error:
            return error

    if minimum > average or maximum < average:
        return InvalidWeightError(
            f"Inconsistent lot weights: min={minimum}, avg={average}, max={maximum}",
        )
    return None
