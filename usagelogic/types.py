from __future__ import annotations
from typing import Literal, List, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone
import uuid

Scope = Literal["user", "system"]
TrendLabel = Literal["increasing", "decreasing", "stable", "insufficient_data"]
ApplianceCategory = Literal[
    "Lighting",
    "Cooling",
    "Heating",
    "Kitchen",
    "Entertainment",
    "Laundry",
    "Office",
    "Industrial",
    "Other",
]


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


## Appliances and usage
@dataclass
class Appliance:
    id: str
    name: str
    category: ApplianceCategory
    default_wattage: float  # W
    is_custom: bool = False


@dataclass
class ApplianceUsageEntry:
    appliance_id: str
    quantity: int = 1
    daily_hours: float = 0.0  # 0..24
    wattage_override: Optional[float] = None  # W; replaces the appliance default


@dataclass
class ConsumptionRecord:
    """One month of logged appliance usage for an owner.

    total_units and estimated_bill are derived; they are recomputed whenever
    the entries change and are never edited directly.
    """

    owner_id: str
    month: int  # 1..12
    year: int  # >= 2020
    entries: List[ApplianceUsageEntry] = field(default_factory=list)
    total_units: float = 0.0  # kWh
    estimated_bill: float = 0.0
    submitted_at: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=_new_id)

    @property
    def period_key(self) -> tuple[str, int, int]:
        return (self.owner_id, self.year, self.month)


## History rows fed to the forecaster (most-recent-first)
@dataclass
class HistoryPoint:
    total_units: float
    month: Optional[int] = None
    year: Optional[int] = None
    total_bill: float = 0.0
    user_count: Optional[int] = None


## Forecast results
@dataclass
class ForecastResult:
    next_period_consumption: float
    next_period_bill: float
    confidence: int  # 0..100
    trend: TrendLabel
    weighted_average: float = 0.0
    trend_projection: float = 0.0
    seasonal_adjustment: float = 0.0
    seasonal_factor: float = 1.0
    upcoming_month: Optional[int] = None
    based_on: int = 0  # number of history points supplied
    data_consistency: Optional[int] = None  # (1 - CV) * 100

    @property
    def is_sufficient(self) -> bool:
        return self.trend != "insufficient_data"


@dataclass
class SystemForecastResult(ForecastResult):
    predicted_users: int = 0
    predicted_revenue: float = 0.0
    user_growth_rate: float = 0.0
