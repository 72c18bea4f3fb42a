"""Tests for herd statistics — mortality, occupancy, lot and pen summaries."""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

from swinetrack.core.herd_stats import (
    compute_lot_stats,
    compute_pen_stats,
    days_between,
    mortality_percentage,
    occupancy_percentage,
)


def test_mortality_counts_every_loss():
    assert mortality_percentage(10, 9) == 10.0
    assert mortality_percentage(3, 2) == 33.33
    assert mortality_percentage(0, 0) == 0.0


def test_occupancy_percentage():
    assert occupancy_percentage(5, 10) == 50.0
    assert occupancy_percentage(0, 0) == 0.0


def test_days_between_accepts_naive_datetimes():
    start = datetime(2024, 1, 1)
    end = datetime(2024, 1, 11, tzinfo=timezone.utc)
    assert days_between(start, end) == 10
    assert days_between(end, start) == 0


def test_lot_stats_summary():
    lot = SimpleNamespace(
        id=uuid4(), code="LOTE-2024-001", status="ACTIVE",
        admission_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        initial_count=10, current_live_count=8,
    )
    stats = compute_lot_stats(
        lot, ["ACTIVE", "ACTIVE", "SICK", "DEAD", "SOLD"],
        now=datetime(2024, 1, 31, tzinfo=timezone.utc),
    )
    assert stats["days_in_system"] == 30
    assert stats["losses"] == 2
    assert stats["mortality_pct"] == 20.0
    assert stats["registered_pigs"] == 5
    assert stats["active_pigs"] == 2
    assert stats["sick_pigs"] == 1
    assert stats["dead_pigs"] == 1
    assert stats["sold_pigs"] == 1


def test_pen_stats_summary():
    pen = SimpleNamespace(id=uuid4(), number="A-01", capacity=4, occupancy=3)
    stats = compute_pen_stats(pen, 24.456, ["ACTIVE", "ACTIVE", "SICK", "DEAD"])
    assert stats["free_slots"] == 1
    assert stats["occupancy_pct"] == 75.0
    assert stats["average_weight"] == 24.46
    assert stats["active_pigs"] == 2
    assert stats["sick_pigs"] == 1


def test_empty_pen_stats():
    pen = SimpleNamespace(id=uuid4(), number="A-02", capacity=10, occupancy=0)
    stats = compute_pen_stats(pen, 0.0, [])
    assert stats["average_weight"] == 0.0
    assert stats["occupancy_pct"] == 0.0
