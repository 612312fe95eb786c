from __future__ import annotations
from enum import IntEnum
from typing import Final, Dict, Tuple


class Month(IntEnum):
    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12

    def following(self) -> "Month":
        return Month(self.value % 12 + 1)


DAYS_PER_MONTH: Final[int] = 30  # fixed billing month, independent of the calendar
MIN_YEAR: Final[int] = 2020
MAX_DAILY_HOURS: Final[float] = 24.0
MAX_WATTAGE: Final[float] = 50_000.0
ROUND_DP: Final[int] = 2

SCOPE_USER: Final[str] = "user"
SCOPE_SYSTEM: Final[str] = "system"

TREND_INCREASING: Final[str] = "increasing"
TREND_DECREASING: Final[str] = "decreasing"
TREND_STABLE: Final[str] = "stable"
TREND_INSUFFICIENT: Final[str] = "insufficient_data"

# Weight by lag (0 = most recent month). Lags past the table reuse the last entry.
USER_WEIGHTS: Final[Dict[int, float]] = {0: 0.4, 1: 0.3, 2: 0.2, 3: 0.1}
SYSTEM_WEIGHTS: Final[Dict[int, float]] = {0: 0.4, 1: 0.3, 2: 0.15, 3: 0.1, 4: 0.05}

# Cooling-load seasonality: low in winter, peaking in July.
SEASONAL_FACTORS: Final[Dict[Month, float]] = {
    Month.JAN: 0.9,
    Month.FEB: 0.85,
    Month.MAR: 0.95,
    Month.APR: 1.1,
    Month.MAY: 1.3,
    Month.JUN: 1.4,
    Month.JUL: 1.5,
    Month.AUG: 1.45,
    Month.SEP: 1.2,
    Month.OCT: 1.0,
    Month.NOV: 0.9,
    Month.DEC: 0.85,
}

# (min_units, max_units, rate_per_unit); None = unbounded
DEFAULT_SLABS: Final[Tuple[Tuple[float, float | None, float], ...]] = (
    (0, 100, 3.5),
    (101, 300, 4.5),
    (301, 500, 6.0),
    (501, None, 7.5),
)
DEFAULT_SCHEDULE_DESCRIPTION: Final[str] = "Default residential slab tariff"
