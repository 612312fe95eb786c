"""Slab billing tests: progressive charging, the default fallback and per-slab breakdowns.

- Known default-tariff bills at and across slab boundaries.
- Monotonicity and zero-units properties.
- Per-slab charges sum to the bill; no unit skipped or double-billed.
"""

import logging

import numpy as np
import pytest

from usagelogic import compute_bill
from usagelogic.tariffs import (
    Slab,
    TariffSchedule,
    calculate_bill,
    default_schedule,
    schedule_or_default,
    slab_charges,
)


@pytest.mark.parametrize(
    "units, expected",
    [
        (0, 0.0),
        (100, 350.0),
        (250, 1025.0),  # 100 x 3.5 + 150 x 4.5
        (300, 1250.0),
        (500, 2450.0),
        (600, 3200.0),  # ... + 200 x 6.0 + 100 x 7.5
    ],
)
def test_default_schedule_known_bills(units, expected):
    assert calculate_bill(units, default_schedule()) == pytest.approx(expected)


def test_zero_and_negative_units_bill_nothing(two_slab_schedule):
    assert calculate_bill(0, two_slab_schedule) == 0.0
    assert calculate_bill(-5, two_slab_schedule) == 0.0


def test_final_slab_absorbs_remaining_units(two_slab_schedule):
    """The last slab is unbounded even when a max is given: 10 x 1 + 40 x 2."""
    assert calculate_bill(50, two_slab_schedule) == pytest.approx(90.0)


def test_bill_is_monotonic_in_units():
    sched = default_schedule()
    units = np.linspace(0, 1200, 961)
    bills = [calculate_bill(u, sched) for u in units]
    assert all(b2 >= b1 for b1, b2 in zip(bills, bills[1:]))


def test_slabs_walked_in_ascending_order():
    """Slab order in the schedule does not change the walk."""
    shuffled = TariffSchedule(slabs=list(reversed(default_schedule().slabs)))
    assert calculate_bill(250, shuffled) == pytest.approx(1025.0)


@pytest.mark.parametrize("units", [0, 42.5, 100, 101, 300.25, 777])
def test_slab_charges_sum_to_bill(units):
    sched = default_schedule()
    charges = slab_charges(units, sched)
    assert len(charges) == len(sched.slabs)
    assert charges["units"].sum() == pytest.approx(units)
    assert charges["charge"].sum() == pytest.approx(calculate_bill(units, sched))


def test_slab_charges_fill_lower_slabs_first():
    charges = slab_charges(250, default_schedule())
    assert list(charges["units"]) == [100.0, 150.0, 0.0, 0.0]


def test_bill_does_not_revalidate_schedule():
    """Creation-time validation only: an unpublished odd schedule still bills."""
    sched = TariffSchedule(slabs=[Slab(min_units=0, max_units=None, rate_per_unit=2.0)])
    assert calculate_bill(10, sched) == pytest.approx(20.0)


def test_missing_schedule_falls_back_to_default(caplog):
    with caplog.at_level(logging.WARNING):
        sched = schedule_or_default(None)
    assert sched.id == "default"
    assert "default" in caplog.text
    assert compute_bill(250) == 1025.0


def test_supplied_schedule_wins_over_default(two_slab_schedule):
    assert schedule_or_default(two_slab_schedule) is two_slab_schedule
    assert compute_bill(15, two_slab_schedule) == 20.0


def test_compute_bill_rounds_to_cents():
    flat = TariffSchedule(slabs=[Slab(min_units=0, rate_per_unit=0.333)])
    assert compute_bill(10, flat) == 3.33


def test_fractional_start_uses_plain_width():
    assert Slab(min_units=0.5, max_units=10, rate_per_unit=1.0).width == pytest.approx(10.5)
    assert Slab(min_units=0, max_units=10, rate_per_unit=1.0).width == 10


def test_fractional_start_bills_full_first_slab():
    sched = TariffSchedule(
        slabs=[
            Slab(min_units=0.5, max_units=10, rate_per_unit=1.0),
            Slab(min_units=11, max_units=None, rate_per_unit=2.0),
        ]
    )
    # 10.5 x 1.0 + 1.5 x 2.0
    assert calculate_bill(12, sched) == pytest.approx(13.5)
