from __future__ import annotations
import logging
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd

from . import canon
from .exceptions import ValidationError, require
from .types import ApplianceUsageEntry

logger = logging.getLogger(__name__)

WattageLookup = Callable[[str], float]

BREAKDOWN_COLS = [
    "appliance_id",
    "quantity",
    "daily_hours",
    "wattage",
    "daily_kwh",
    "monthly_kwh",
]


def validate_entry(entry: ApplianceUsageEntry) -> None:
    hours = float(entry.daily_hours)
    require(
        0.0 <= hours <= canon.MAX_DAILY_HOURS,
        f"daily_hours must be within [0, 24], got {entry.daily_hours} "
        f"for appliance '{entry.appliance_id}'.",
        ValidationError,
    )
    require(
        int(entry.quantity) == entry.quantity and entry.quantity >= 1,
        f"quantity must be an integer >= 1, got {entry.quantity} "
        f"for appliance '{entry.appliance_id}'.",
        ValidationError,
    )
    if entry.wattage_override is not None:
        require(
            float(entry.wattage_override) >= 0,
            f"wattage override must be non-negative, got {entry.wattage_override}.",
            ValidationError,
        )


def resolve_wattage(entry: ApplianceUsageEntry, lookup_wattage: WattageLookup) -> float:
    """Override wins; otherwise ask the catalogue (NotFoundError propagates)."""
    if entry.wattage_override is not None:
        return float(entry.wattage_override)
    return float(lookup_wattage(entry.appliance_id))


def usage_breakdown(
    entries: Iterable[ApplianceUsageEntry],
    lookup_wattage: WattageLookup,
    *,
    days: int = canon.DAYS_PER_MONTH,
) -> pd.DataFrame:
    """
    One row per entry:
      ['appliance_id', 'quantity', 'daily_hours', 'wattage', 'daily_kwh', 'monthly_kwh']

    Every entry is validated before any lookup is made.
    """
    entries = list(entries)
    for e in entries:
        validate_entry(e)
    if not entries:
        return pd.DataFrame(columns=BREAKDOWN_COLS)

    df = pd.DataFrame(
        {
            "appliance_id": [e.appliance_id for e in entries],
            "quantity": np.asarray([e.quantity for e in entries], dtype=int),
            "daily_hours": np.asarray([e.daily_hours for e in entries], dtype=float),
            "wattage": np.asarray(
                [resolve_wattage(e, lookup_wattage) for e in entries], dtype=float
            ),
        }
    )
    df["daily_kwh"] = df["wattage"] * df["daily_hours"] / 1000.0
    df["monthly_kwh"] = df["daily_kwh"] * days * df["quantity"]
    return df[BREAKDOWN_COLS]


def compute_consumption(
    entries: Iterable[ApplianceUsageEntry],
    lookup_wattage: WattageLookup,
    *,
    days: int = canon.DAYS_PER_MONTH,
    round_dp: Optional[int] = canon.ROUND_DP,
) -> float:
    """Monthly kWh across all entries, rounded to 2 dp."""
    bd = usage_breakdown(entries, lookup_wattage, days=days)
    total = float(bd["monthly_kwh"].sum()) if len(bd) else 0.0
    if round_dp is not None:
        total = round(total, round_dp)
    logger.debug("Computed %.2f kWh from %d usage entries", total, len(bd))
    return total
