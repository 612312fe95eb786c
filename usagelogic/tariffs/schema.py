from __future__ import annotations
import math
import uuid
from datetime import date
from pydantic import BaseModel, Field

from .. import canon

Currency = float


class Slab(BaseModel):
    min_units: float
    max_units: float | None = None  # None = open-ended
    rate_per_unit: Currency

    @property
    def width(self) -> float:
        """Units billed in this slab: max - min + 1.

        Units are counted from 1, so a slab starting at 0 is treated as starting
        at 1 (0-100 holds 100). Every other start, fractional ones included,
        uses the plain formula.
        """
        if self.max_units is None:
            return math.inf
        start = 1 if self.min_units == 0 else self.min_units
        return self.max_units - start + 1


class TariffSchedule(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    slabs: list[Slab]
    effective_from: date = Field(default_factory=date.today)
    is_active: bool = True
    description: str = ""
    created_by: str | None = None

    def ordered_slabs(self) -> list[Slab]:
        return sorted(self.slabs, key=lambda s: s.min_units)


def default_schedule() -> TariffSchedule:
    return TariffSchedule(
        id="default",
        slabs=[
            Slab(min_units=lo, max_units=hi, rate_per_unit=rate)
            for lo, hi, rate in canon.DEFAULT_SLABS
        ],
        effective_from=date(canon.MIN_YEAR, 1, 1),
        is_active=False,
        description=canon.DEFAULT_SCHEDULE_DESCRIPTION,
    )
