from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from . import canon


@dataclass
class ScopeConfig:
    # Descending weights keyed by lag (0 = most recent)
    weights: Dict[int, float] = field(default_factory=lambda: dict(canon.USER_WEIGHTS))
    weighted_window: int = 4  # points fed to the weighted moving average
    recent_window: int = 6  # points used for trend fit, CV and revenue
    history_window: int = 12  # months fetched from storage


@dataclass
class ForecastConfig:
    user: ScopeConfig = field(default_factory=ScopeConfig)
    system: ScopeConfig = field(
        default_factory=lambda: ScopeConfig(
            weights=dict(canon.SYSTEM_WEIGHTS),
            weighted_window=5,
            recent_window=6,
        )
    )

    # Blend of the three signals
    weighted_share: float = 0.4
    trend_share: float = 0.3
    seasonal_share: float = 0.3

    min_points: int = 2
    min_points_for_fit: int = 3

    # Confidence scoring
    base_confidence: float = 60.0
    per_point_confidence: float = 2.0
    max_history_bonus: float = 25.0
    cv_very_consistent: float = 0.1  # +10 below this
    cv_consistent: float = 0.2  # +5 below this
    cv_volatile: float = 0.4  # -10 above this
    min_confidence: int = 50
    max_confidence: int = 95

    # Trend labelling
    trend_threshold_pct: float = 5.0
    trend_block: int = 3  # compare two blocks of this many points

    # System scope user projection
    min_user_growth: float = 0.02

    def scope(self, name: str) -> ScopeConfig:
        return self.system if name == canon.SCOPE_SYSTEM else self.user


@dataclass
class BillingConfig:
    days_per_month: int = canon.DAYS_PER_MONTH
    round_dp: int = canon.ROUND_DP


@dataclass
class Config:
    forecast: ForecastConfig = field(default_factory=ForecastConfig)
    billing: BillingConfig = field(default_factory=BillingConfig)


def default_config() -> Config:
    return Config()
