from __future__ import annotations

from .schema import Slab, TariffSchedule, default_schedule
from .validators import validate_schedule
from .price_engine import calculate_bill, slab_charges, schedule_or_default
from .book import TariffBook

__all__ = [
    "Slab",
    "TariffSchedule",
    "TariffBook",
    "default_schedule",
    "validate_schedule",
    "calculate_bill",
    "slab_charges",
    "schedule_or_default",
]
