from __future__ import annotations
import logging
import math
from typing import Optional

import pandas as pd

from .schema import TariffSchedule, default_schedule

logger = logging.getLogger(__name__)

CHARGE_COLS = ["slab", "min_units", "max_units", "rate_per_unit", "units", "charge"]


def schedule_or_default(schedule: Optional[TariffSchedule]) -> TariffSchedule:
    """Fallback strategy: a bill must always be computable, so a missing
    active schedule resolves to the built-in default slabs."""
    if schedule is not None:
        return schedule
    logger.warning("No active tariff schedule; billing with the default slabs")
    return default_schedule()


def _walk(units: float, schedule: TariffSchedule):
    """Yield (index, slab, billed_units) in ascending slab order."""
    remaining = float(units)
    slabs = schedule.ordered_slabs()
    last = len(slabs) - 1
    for i, slab in enumerate(slabs):
        if remaining <= 0:
            break
        # final slab absorbs everything left over
        width = math.inf if i == last else slab.width
        billed = min(remaining, width)
        yield i, slab, billed
        remaining -= billed


def calculate_bill(units: float, schedule: TariffSchedule) -> float:
    total = 0.0
    for _, slab, billed in _walk(units, schedule):
        total += billed * slab.rate_per_unit
    return total


def slab_charges(units: float, schedule: TariffSchedule) -> pd.DataFrame:
    """
    Per-slab breakdown; one row per slab in ascending order, including slabs
    left untouched (units == 0). The 'charge' column sums to calculate_bill().
    """
    slabs = schedule.ordered_slabs()
    billed = {i: u for i, _, u in _walk(units, schedule)}
    out = pd.DataFrame(
        {
            "slab": range(len(slabs)),
            "min_units": [s.min_units for s in slabs],
            "max_units": [s.max_units for s in slabs],
            "rate_per_unit": [s.rate_per_unit for s in slabs],
            "units": [billed.get(i, 0.0) for i in range(len(slabs))],
        }
    )
    out["charge"] = out["units"] * out["rate_per_unit"]
    return out[CHARGE_COLS]
