"""Forecasting engine tests.

- Guard: fewer than two points is `insufficient_data` with zero output.
- Confidence always within [50, 95] once there is enough history.
- Trend labels for rising, falling and flat series.
- Worked blends at user and system scope.
"""

from datetime import date

import pytest

from usagelogic import forecast_next, forecast_system_next
from usagelogic.forecast import forecast
from usagelogic.tariffs import Slab, TariffSchedule
from usagelogic.types import HistoryPoint


@pytest.mark.parametrize("history", [[], [120.0], [HistoryPoint(total_units=50.0, month=3, year=2025)]])
def test_insufficient_history(history):
    res = forecast_next(history)
    assert res.next_period_consumption == 0
    assert res.next_period_bill == 0
    assert res.confidence == 0
    assert res.trend == "insufficient_data"
    assert not res.is_sufficient


@pytest.mark.parametrize(
    "history",
    [
        [100.0, 100.0],
        [0.0, 0.0],
        [0.0, 500.0, 3.0],
        [1.0, 1000.0, 1.0, 1000.0, 1.0, 1000.0, 1.0, 1000.0],
        [250.0] * 24,
        [200.0, 170.0, 150.0, 130.0, 120.0, 100.0],
    ],
)
def test_confidence_is_bounded(history):
    res = forecast_next(history, next_month=1)
    assert 50 <= res.confidence <= 95
    assert isinstance(res.confidence, int)


def test_rising_series_is_increasing(rising_history):
    assert forecast_next(rising_history, next_month=1).trend == "increasing"


def test_reversed_series_is_decreasing(rising_history):
    assert forecast_next(rising_history[::-1], next_month=1).trend == "decreasing"


def test_constant_series_is_stable():
    assert forecast_next([180.0] * 6, next_month=1).trend == "stable"


def test_short_history_compares_latest_two_only():
    """Below six points only the latest pair counts, whatever came before."""
    assert forecast_next([100.0, 100.0, 300.0], next_month=1).trend == "stable"
    assert forecast_next([110.0, 100.0], next_month=1).trend == "increasing"
    assert forecast_next([90.0, 100.0], next_month=1).trend == "decreasing"


def test_two_point_blend():
    """weighted 0.4*100 + 0.3*100 = 70; trend falls back to 70; seasonal (Oct) 100."""
    res = forecast_next([100.0, 100.0], next_month=10)
    assert res.weighted_average == pytest.approx(70.0)
    assert res.trend_projection == pytest.approx(70.0)
    assert res.seasonal_adjustment == pytest.approx(100.0)
    assert res.next_period_consumption == pytest.approx(79.0)
    assert res.next_period_bill == pytest.approx(79.0 * 3.5)  # default first slab
    assert res.confidence == 74  # 60 + 2*2 + 10 (flat series)
    assert res.trend == "stable"
    assert res.based_on == 2


def test_four_point_blend_with_linear_trend():
    """Chronological 100..130 extrapolates to 140; weighted = 52+36+22+10."""
    res = forecast_next([130.0, 120.0, 110.0, 100.0], next_month=10)
    assert res.weighted_average == pytest.approx(120.0)
    assert res.trend_projection == pytest.approx(140.0)
    assert res.seasonal_adjustment == pytest.approx(130.0)
    assert res.next_period_consumption == pytest.approx(129.0)
    assert res.confidence == 78  # 60 + 8 + 10 (CV ~ 0.097)
    assert res.trend == "increasing"


def test_seasonal_uses_month_after_latest_point():
    hist = [
        HistoryPoint(total_units=100.0, month=12, year=2024),
        HistoryPoint(total_units=100.0, month=11, year=2024),
    ]
    res = forecast_next(hist)
    assert res.upcoming_month == 1
    assert res.seasonal_factor == pytest.approx(0.9)
    assert res.seasonal_adjustment == pytest.approx(90.0)


def test_explicit_month_overrides_history():
    hist = [HistoryPoint(total_units=100.0, month=12, year=2024), HistoryPoint(total_units=90.0)]
    res = forecast_next(hist, next_month=7)
    assert res.upcoming_month == 7
    assert res.seasonal_adjustment == pytest.approx(150.0)


def test_prediction_never_negative():
    """A steep fall extrapolates below zero; the prediction is floored."""
    res = forecast_next([0.0, 0.0, 0.0, 1000.0], next_month=10)
    assert res.next_period_consumption == 0.0
    assert res.next_period_bill == 0.0


def test_bill_uses_supplied_schedule():
    flat = TariffSchedule(slabs=[Slab(min_units=0, rate_per_unit=2.0)])
    res = forecast_next([100.0, 100.0], schedule=flat, next_month=10)
    assert res.next_period_bill == pytest.approx(158.0)


def test_system_scope_uses_five_point_weights():
    hist = [500.0, 400.0, 300.0, 200.0, 100.0]
    assert forecast(hist, scope="user", next_month=10).weighted_average == pytest.approx(400.0)
    assert forecast(hist, scope="system", next_month=10).weighted_average == pytest.approx(390.0)


def test_system_forecast_projects_users_and_revenue(system_history):
    res = forecast_system_next(system_history)
    assert res.upcoming_month == 6
    # latest 12, oldest 8 over a 3-point window -> +1.33 per period
    assert res.user_growth_rate == pytest.approx(1.33)
    assert res.predicted_users == 13  # max(12 + 4/3, 12 x 1.02), rounded
    assert res.predicted_revenue == pytest.approx(res.next_period_consumption * 5.0, abs=0.01)
    assert 50 <= res.confidence <= 95


def test_system_user_growth_floor():
    hist = [
        HistoryPoint(total_units=100.0, month=2, year=2025, total_bill=400.0, user_count=100),
        HistoryPoint(total_units=100.0, month=1, year=2025, total_bill=400.0, user_count=100),
    ]
    res = forecast_system_next(hist)
    assert res.predicted_users == 102


def test_system_revenue_skips_months_without_usage():
    hist = [
        HistoryPoint(total_units=200.0, month=2, year=2025, total_bill=800.0, user_count=3),
        HistoryPoint(total_units=0.0, month=1, year=2025, total_bill=0.0, user_count=0),
    ]
    res = forecast_system_next(hist)
    assert res.predicted_revenue == pytest.approx(res.next_period_consumption * 4.0, abs=0.01)


def test_system_insufficient_history(system_history):
    res = forecast_system_next(system_history[:1])
    assert res.trend == "insufficient_data"
    assert res.confidence == 0
    assert res.predicted_users == 0
    assert res.predicted_revenue == 0


def test_predicted_users_is_whole_number(system_history):
    res = forecast_system_next(system_history)
    assert isinstance(res.predicted_users, int)


def test_out_of_range_month_on_latest_point_falls_back_to_today():
    hist = [HistoryPoint(100.0, month=13), HistoryPoint(100.0, month=12)]
    res = forecast_next(hist, today=date(2025, 3, 1))
    assert res.is_sufficient
    assert res.upcoming_month == 4


def test_out_of_range_next_month_is_ignored():
    hist = [HistoryPoint(100.0, month=5, year=2025), HistoryPoint(100.0, month=4, year=2025)]
    assert forecast_next(hist, next_month=0).upcoming_month == 6
    assert forecast_next(hist, next_month=13).upcoming_month == 6
