"""Next-month consumption forecasting.

Three signals are blended into one prediction:

- a weighted moving average over the most recent months,
- a least-squares line over the recent window, extrapolated one step,
- the latest month scaled by the seasonal multiplier of the upcoming month.

History is always most-recent-first. The same engine serves a single user and
the whole system; system scope only changes the weight table and adds user
and revenue projections. Nothing here raises for numeric input: too little
history is reported as ``insufficient_data``.
"""

from __future__ import annotations
import logging
import math
from dataclasses import asdict
from datetime import date
from numbers import Real
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from . import canon
from .canon import Month
from .config import ForecastConfig, default_config
from .tariffs import TariffSchedule, calculate_bill, schedule_or_default
from .types import ForecastResult, HistoryPoint, Scope, SystemForecastResult, TrendLabel

logger = logging.getLogger(__name__)


def as_points(history: Iterable[HistoryPoint | Real]) -> List[HistoryPoint]:
    """Accept HistoryPoint rows or bare monthly totals."""
    return [
        h if isinstance(h, HistoryPoint) else HistoryPoint(total_units=float(h))
        for h in history
    ]


# ------------------ components ------------------


def weight_for_lag(weights: Mapping[int, float], lag: int) -> float:
    if lag in weights:
        return float(weights[lag])
    return float(weights[max(weights)])


def weighted_average(
    values: Sequence[float], weights: Mapping[int, float], window: int
) -> float:
    """Sum of value x weight over the `window` most recent values."""
    return float(
        sum(v * weight_for_lag(weights, lag) for lag, v in enumerate(values[:window]))
    )


def linear_trend(values: Sequence[float], min_points: int = 3) -> Optional[float]:
    """
    Fit y = a*x + b over x = 0..n-1 (oldest first) and evaluate at x = n.
    Returns None below `min_points`.
    """
    n = len(values)
    if n < min_points:
        return None
    y = np.asarray(values[::-1], dtype=float)
    x = np.arange(n, dtype=float)
    slope, intercept = np.polyfit(x, y, 1)
    return float(slope * n + intercept)


def seasonal_factor(month: Month) -> float:
    return canon.SEASONAL_FACTORS[Month(month)]


def _is_month(value: Optional[int]) -> bool:
    return value is not None and 1 <= value <= 12


def upcoming_month(
    points: Sequence[HistoryPoint],
    next_month: Optional[int] = None,
    today: Optional[date] = None,
) -> Month:
    """Explicit month, else the month after the latest point, else after today.

    Values outside 1..12 are ignored and the next rule applies.
    """
    if _is_month(next_month):
        return Month(next_month)
    if points and _is_month(points[0].month):
        return Month(points[0].month).following()
    return Month((today or date.today()).month).following()


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population stddev / mean; 0.0 for an empty or non-positive-mean window."""
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return 0.0
    mean = float(arr.mean())
    if mean <= 0:
        return 0.0
    return float(arr.std() / mean)


def score_confidence(
    history_len: int, cv: float, config: Optional[ForecastConfig] = None
) -> int:
    cfg = config or default_config().forecast
    score = cfg.base_confidence
    score += min(cfg.max_history_bonus, cfg.per_point_confidence * history_len)
    if cv < cfg.cv_very_consistent:
        score += 10
    elif cv < cfg.cv_consistent:
        score += 5
    elif cv > cfg.cv_volatile:
        score -= 10
    return int(round(min(cfg.max_confidence, max(cfg.min_confidence, score))))


def _pct_change(recent: float, earlier: float) -> float:
    if earlier == 0:
        if recent == 0:
            return 0.0
        return math.copysign(math.inf, recent)
    return (recent - earlier) / earlier * 100.0


def classify_trend(
    values: Sequence[float], config: Optional[ForecastConfig] = None
) -> TrendLabel:
    """
    With two full blocks (6 points by default) compare the mean of the newest
    block against the block before it; otherwise compare the latest two points.
    """
    cfg = config or default_config().forecast
    if len(values) < cfg.min_points:
        return "insufficient_data"
    block = cfg.trend_block
    if len(values) >= 2 * block:
        recent = float(np.mean(values[:block]))
        earlier = float(np.mean(values[block : 2 * block]))
    else:
        recent, earlier = float(values[0]), float(values[1])
    change = _pct_change(recent, earlier)
    if change > cfg.trend_threshold_pct:
        return "increasing"
    if change < -cfg.trend_threshold_pct:
        return "decreasing"
    return "stable"


# ------------------ system-scope projections ------------------


def project_users(
    recent: Sequence[HistoryPoint], min_growth: float = 0.02
) -> Tuple[float, float]:
    """
    (predicted_users, growth_rate). Growth is the change across the recent
    window per point, floored at `min_growth` relative growth.
    """
    if not recent or recent[0].user_count is None:
        return 0.0, 0.0
    latest = float(recent[0].user_count)
    oldest = float(recent[-1].user_count if recent[-1].user_count is not None else latest)
    rate = (latest - oldest) / len(recent)
    return max(latest + rate, latest * (1.0 + min_growth)), rate


def revenue_per_unit(recent: Sequence[HistoryPoint]) -> float:
    """Mean historical bill per kWh; months without consumption are skipped."""
    ratios = [p.total_bill / p.total_units for p in recent if p.total_units > 0]
    return float(np.mean(ratios)) if ratios else 0.0


# ------------------ engine ------------------


def forecast(
    history: Iterable[HistoryPoint | Real],
    *,
    scope: Scope = "user",
    schedule: Optional[TariffSchedule] = None,
    next_month: Optional[int] = None,
    config: Optional[ForecastConfig] = None,
    today: Optional[date] = None,
) -> ForecastResult:
    cfg = config or default_config().forecast
    points = as_points(history)
    if len(points) < cfg.min_points:
        return ForecastResult(
            next_period_consumption=0.0,
            next_period_bill=0.0,
            confidence=0,
            trend="insufficient_data",
            based_on=len(points),
        )

    sc = cfg.scope(scope)
    values = [p.total_units for p in points]
    recent = values[: sc.recent_window]

    weighted = weighted_average(values, sc.weights, sc.weighted_window)
    trend_value = linear_trend(recent, cfg.min_points_for_fit)
    if trend_value is None:
        trend_value = weighted
    month = upcoming_month(points, next_month, today)
    factor = seasonal_factor(month)
    seasonal = values[0] * factor

    prediction = (
        cfg.weighted_share * weighted
        + cfg.trend_share * trend_value
        + cfg.seasonal_share * seasonal
    )
    prediction = max(0.0, prediction)

    cv = coefficient_of_variation(recent)
    bill = calculate_bill(prediction, schedule_or_default(schedule))
    result = ForecastResult(
        next_period_consumption=round(prediction, canon.ROUND_DP),
        next_period_bill=round(bill, canon.ROUND_DP),
        confidence=score_confidence(len(points), cv, cfg),
        trend=classify_trend(values, cfg),
        weighted_average=round(weighted, canon.ROUND_DP),
        trend_projection=round(trend_value, canon.ROUND_DP),
        seasonal_adjustment=round(seasonal, canon.ROUND_DP),
        seasonal_factor=factor,
        upcoming_month=int(month),
        based_on=len(points),
        data_consistency=int(round((1.0 - cv) * 100)),
    )
    logger.debug(
        "%s forecast for %s: %.2f kWh (confidence %d, %s)",
        scope,
        month.name,
        result.next_period_consumption,
        result.confidence,
        result.trend,
    )
    return result


def forecast_system(
    history: Iterable[HistoryPoint | Real],
    *,
    schedule: Optional[TariffSchedule] = None,
    next_month: Optional[int] = None,
    config: Optional[ForecastConfig] = None,
    today: Optional[date] = None,
) -> SystemForecastResult:
    cfg = config or default_config().forecast
    points = as_points(history)
    base = forecast(
        points,
        scope="system",
        schedule=schedule,
        next_month=next_month,
        config=cfg,
        today=today,
    )
    if not base.is_sufficient:
        return SystemForecastResult(**asdict(base))

    recent = points[: cfg.system.recent_window]
    users, growth = project_users(recent, cfg.min_user_growth)
    revenue = base.next_period_consumption * revenue_per_unit(recent)
    return SystemForecastResult(
        **asdict(base),
        predicted_users=int(round(users)),
        predicted_revenue=round(revenue, canon.ROUND_DP),
        user_growth_rate=round(growth, canon.ROUND_DP),
    )
