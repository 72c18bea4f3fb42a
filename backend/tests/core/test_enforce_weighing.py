"""Tests for weighing rules — positivity, the variation limit, weighing order, lot weight ordering."""

from datetime import datetime, timedelta, timezone

import pytest

from swinetrack.config import Settings
from swinetrack.core.enforce_weighing import (
    as_utc,
    check_lot_weights,
    check_positive_weight,
    check_weighing,
    check_weighing_time,
    weight_variation,
)
from swinetrack.core.errors import InvalidWeightError

LIMIT = 0.30
T0 = datetime(2024, 1, 5, 8, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("weight", [0, -1.5])
def test_non_positive_weight_is_rejected(weight):
    error = check_positive_weight(weight)
    assert isinstance(error, InvalidWeightError)
    assert error.code == "INVALID_WEIGHT"


def test_variation_is_relative_to_previous():
    assert weight_variation(20.0, 24.0) == pytest.approx(0.20)
    assert weight_variation(24.0, 40.0) == pytest.approx(0.6667, rel=1e-3)


def test_twenty_percent_gain_is_accepted():
    assert check_weighing(20.0, 24.0, LIMIT) is None


def test_exactly_thirty_percent_is_accepted():
    assert check_weighing(100.0, 130.0, LIMIT) is None
    assert check_weighing(100.0, 70.0, LIMIT) is None


def test_large_gain_is_suspicious():
    error = check_weighing(24.0, 40.0, LIMIT)
    assert isinstance(error, InvalidWeightError)
    assert error.suspicious
    assert error.code == "SUSPICIOUS_WEIGHT_VARIATION"


def test_large_loss_is_suspicious():
    assert check_weighing(50.0, 30.0, LIMIT).suspicious


def test_no_previous_weight_skips_variation_check():
    assert check_weighing(0.0, 80.0, LIMIT) is None


def test_custom_threshold():
    assert check_weighing(100.0, 115.0, max_variation=0.10).suspicious


def test_default_threshold_comes_from_settings():
    assert Settings.model_fields["max_weight_variation"].default == 0.30


def test_zero_new_weight_is_invalid_not_suspicious():
    error = check_weighing(20.0, 0.0, LIMIT)
    assert not error.suspicious


def test_naive_times_are_read_as_utc():
    assert as_utc(datetime(2024, 1, 5, 8, 0)) == T0
    eastern = timezone(timedelta(hours=-3))
    assert as_utc(datetime(2024, 1, 5, 5, 0, tzinfo=eastern)) == T0


def test_weighing_may_not_go_back_in_time():
    assert check_weighing_time(None, T0) is None
    assert check_weighing_time(T0, T0) is None
    assert check_weighing_time(T0, T0 + timedelta(days=1)) is None
    error = check_weighing_time(T0, T0 - timedelta(minutes=1))
    assert isinstance(error, InvalidWeightError)
    assert not error.suspicious


def test_weighing_order_compares_naive_and_aware():
    assert check_weighing_time(datetime(2024, 1, 5, 8, 0), T0) is None
    assert check_weighing_time(T0, datetime(2024, 1, 4, 8, 0)) is not None


def test_lot_weights_must_be_ordered():
    assert check_lot_weights(20.0, 18.0, 22.0) is None
    assert isinstance(check_lot_weights(20.0, 21.0, 22.0), InvalidWeightError)
    assert isinstance(check_lot_weights(20.0, 18.0, 19.0), InvalidWeightError)


def test_lot_weights_must_be_positive():
    error = check_lot_weights(20.0, 0.0, 22.0)
    assert "minimum" in error.message
