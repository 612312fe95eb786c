from __future__ import annotations
import logging
from datetime import date
from typing import Iterable, List, Optional

import pydantic

from . import canon
from .config import Config, ForecastConfig, default_config
from .exceptions import ConfigurationError, DuplicateError, ValidationError, require
from .forecast import forecast, forecast_system
from .history import usage_statistics
from .store import InMemoryStore
from .tariffs import Slab, TariffSchedule, calculate_bill, schedule_or_default
from .types import (
    ApplianceUsageEntry,
    ConsumptionRecord,
    ForecastResult,
    HistoryPoint,
    SystemForecastResult,
)
from .usage import compute_consumption

logger = logging.getLogger(__name__)

__all__ = [
    "compute_consumption",
    "compute_bill",
    "forecast_next",
    "forecast_system_next",
    "Portal",
]


def compute_bill(
    total_units: float,
    schedule: Optional[TariffSchedule] = None,
    round_dp: int = canon.ROUND_DP,
) -> float:
    """Bill against `schedule`, or the default slabs when none is active."""
    return round(calculate_bill(total_units, schedule_or_default(schedule)), round_dp)


def forecast_next(
    history: Iterable[HistoryPoint | float],
    schedule: Optional[TariffSchedule] = None,
    next_month: Optional[int] = None,
    *,
    config: Optional[ForecastConfig] = None,
    today: Optional[date] = None,
) -> ForecastResult:
    return forecast(
        history,
        scope="user",
        schedule=schedule,
        next_month=next_month,
        config=config,
        today=today,
    )


def forecast_system_next(
    history: Iterable[HistoryPoint | float],
    schedule: Optional[TariffSchedule] = None,
    next_month: Optional[int] = None,
    *,
    config: Optional[ForecastConfig] = None,
    today: Optional[date] = None,
) -> SystemForecastResult:
    return forecast_system(
        history, schedule=schedule, next_month=next_month, config=config, today=today
    )


class Portal:
    """Consumption submission, billing and forecasting over one store.

    Request handling, authentication and serialisation live in the calling
    layer; this class only enforces the domain rules.
    """

    def __init__(
        self, store: Optional[InMemoryStore] = None, config: Optional[Config] = None
    ):
        self.store = store if store is not None else InMemoryStore()
        self.config = config or default_config()

    # ---- consumption ----

    def _validate_period(self, month: int, year: int, today: Optional[date]) -> None:
        today = today or date.today()
        require(1 <= month <= 12, f"month must be within 1..12, got {month}", ValidationError)
        require(
            year >= canon.MIN_YEAR,
            f"year must be >= {canon.MIN_YEAR}, got {year}",
            ValidationError,
        )
        require(
            (year, month) <= (today.year, today.month),
            f"Cannot submit consumption for a future month ({month:02d}/{year})",
            ValidationError,
        )

    def _price(self, entries: List[ApplianceUsageEntry]) -> tuple[float, float]:
        billing = self.config.billing
        units = compute_consumption(
            entries,
            self.store.lookup_appliance_wattage,
            days=billing.days_per_month,
            round_dp=billing.round_dp,
        )
        bill = compute_bill(units, self.store.fetch_active_tariff_schedule(), billing.round_dp)
        return units, bill

    def submit_consumption(
        self,
        owner_id: str,
        month: int,
        year: int,
        entries: Iterable[ApplianceUsageEntry],
        *,
        today: Optional[date] = None,
    ) -> ConsumptionRecord:
        self._validate_period(month, year, today)
        if self.store.find_consumption_record(owner_id, month, year) is not None:
            raise DuplicateError(
                f"Consumption for {month:02d}/{year} already exists; update it instead"
            )
        entries = list(entries)
        units, bill = self._price(entries)
        record = ConsumptionRecord(
            owner_id=owner_id,
            month=month,
            year=year,
            entries=entries,
            total_units=units,
            estimated_bill=bill,
        )
        self.store.persist_consumption_record(record)
        logger.info(
            "Recorded %.2f kWh (bill %.2f) for %s %02d/%d",
            units,
            bill,
            owner_id,
            month,
            year,
        )
        return record

    def update_consumption(
        self, record_id: str, owner_id: str, entries: Iterable[ApplianceUsageEntry]
    ) -> ConsumptionRecord:
        record = self.store.get_consumption_record(record_id, owner_id)
        entries = list(entries)
        units, bill = self._price(entries)
        record.entries = entries
        record.total_units = units
        record.estimated_bill = bill
        self.store.persist_consumption_record(record)
        logger.info("Recomputed record %s: %.2f kWh, bill %.2f", record_id, units, bill)
        return record

    def delete_consumption(self, record_id: str, owner_id: str) -> None:
        self.store.delete_consumption_record(record_id, owner_id)
        logger.info("Deleted consumption record %s for %s", record_id, owner_id)

    def user_statistics(self, owner_id: str) -> dict:
        return usage_statistics(self.store.records(owner_id))

    # ---- forecasting ----

    def predict_for_user(
        self,
        owner_id: str,
        *,
        next_month: Optional[int] = None,
        today: Optional[date] = None,
    ) -> ForecastResult:
        cfg = self.config.forecast
        hist = self.store.fetch_historical_totals(
            "user", cfg.user.history_window, owner_id
        )
        return forecast_next(
            hist,
            self.store.fetch_active_tariff_schedule(today),
            next_month,
            config=cfg,
            today=today,
        )

    def predict_system(
        self, *, next_month: Optional[int] = None, today: Optional[date] = None
    ) -> SystemForecastResult:
        cfg = self.config.forecast
        hist = self.store.fetch_historical_totals("system", cfg.system.history_window)
        return forecast_system_next(
            hist,
            self.store.fetch_active_tariff_schedule(today),
            next_month,
            config=cfg,
            today=today,
        )

    # ---- tariffs ----

    def publish_tariff(
        self,
        slabs: Iterable[Slab | dict],
        *,
        effective_from: Optional[date] = None,
        description: str = "",
        created_by: Optional[str] = None,
        activate: bool = True,
    ) -> TariffSchedule:
        try:
            schedule = TariffSchedule(
                slabs=[s if isinstance(s, Slab) else Slab(**s) for s in slabs],
                effective_from=effective_from or date.today(),
                is_active=activate,
                description=description,
                created_by=created_by,
            )
        except pydantic.ValidationError as e:
            raise ConfigurationError(f"Malformed tariff schedule: {e}") from e
        return self.store.persist_tariff_schedule(schedule)

    def activate_tariff(
        self, schedule_id: str, *, expected_version: Optional[int] = None
    ) -> TariffSchedule:
        return self.store.tariffs.activate(schedule_id, expected_version=expected_version)

    def current_tariff(self, as_of: Optional[date] = None) -> Optional[TariffSchedule]:
        return self.store.fetch_active_tariff_schedule(as_of)
