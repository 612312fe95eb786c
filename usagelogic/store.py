"""In-memory persistence collaborator.

Implements the lookups and writes the core depends on. A real deployment
would back the same :class:`Repository` protocol with its own database; the
uniqueness and single-active-tariff invariants must hold there too.
"""

from __future__ import annotations
import logging
import threading
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol

from . import canon, history
from .exceptions import DuplicateError, NotFoundError, ValidationError, require
from .tariffs import TariffBook, TariffSchedule
from .types import Appliance, ConsumptionRecord, HistoryPoint, Scope

logger = logging.getLogger(__name__)

DEFAULT_APPLIANCES: List[Appliance] = [
    Appliance("led-bulb", "LED Bulb (9W)", "Lighting", 9),
    Appliance("cfl-bulb", "CFL Bulb (15W)", "Lighting", 15),
    Appliance("incandescent-bulb", "Incandescent Bulb (60W)", "Lighting", 60),
    Appliance("tube-light", "Tube Light (40W)", "Lighting", 40),
    Appliance("ceiling-fan", "Ceiling Fan", "Cooling", 75),
    Appliance("table-fan", "Table Fan", "Cooling", 50),
    Appliance("ac-1.5-ton", "Air Conditioner (1.5 Ton)", "Cooling", 1500),
    Appliance("ac-1-ton", "Air Conditioner (1 Ton)", "Cooling", 1000),
    Appliance("air-cooler", "Air Cooler", "Cooling", 200),
    Appliance("fridge-single", "Refrigerator (Single Door)", "Kitchen", 150),
    Appliance("fridge-double", "Refrigerator (Double Door)", "Kitchen", 250),
    Appliance("microwave", "Microwave Oven", "Kitchen", 1000),
    Appliance("kettle", "Electric Kettle", "Kitchen", 1500),
    Appliance("mixer-grinder", "Mixer Grinder", "Kitchen", 500),
    Appliance("induction-cooktop", "Induction Cooktop", "Kitchen", 2000),
    Appliance("iron", "Electric Iron", "Laundry", 1000),
    Appliance("washing-machine", "Washing Machine", "Laundry", 500),
    Appliance("tv-32", 'Television (LED 32")', "Entertainment", 60),
    Appliance("tv-55", 'Television (LED 55")', "Entertainment", 150),
    Appliance("desktop", "Desktop Computer", "Office", 300),
    Appliance("laptop", "Laptop", "Office", 65),
    Appliance("geyser", "Water Heater (Geyser)", "Heating", 2000),
]


class Repository(Protocol):
    def lookup_appliance_wattage(self, appliance_id: str) -> float: ...

    def fetch_historical_totals(
        self, scope: Scope, window_size: int, owner_id: Optional[str] = None
    ) -> List[HistoryPoint]: ...

    def fetch_active_tariff_schedule(
        self, as_of: Optional[date] = None
    ) -> Optional[TariffSchedule]: ...

    def persist_consumption_record(self, record: ConsumptionRecord) -> None: ...

    def persist_tariff_schedule(self, schedule: TariffSchedule) -> TariffSchedule: ...


class InMemoryStore:
    def __init__(
        self,
        appliances: Optional[Iterable[Appliance]] = None,
        tariffs: Optional[TariffBook] = None,
    ):
        self._lock = threading.Lock()
        self._appliances: Dict[str, Appliance] = {}
        self._records: Dict[str, ConsumptionRecord] = {}
        self._by_period: Dict[tuple[str, int, int], str] = {}
        self.tariffs = tariffs if tariffs is not None else TariffBook()
        for a in DEFAULT_APPLIANCES if appliances is None else appliances:
            self.add_appliance(a)

    # ---- appliances ----

    def add_appliance(self, appliance: Appliance) -> None:
        require(
            1 <= appliance.default_wattage <= canon.MAX_WATTAGE,
            f"Appliance '{appliance.id}': wattage must be within "
            f"[1, {canon.MAX_WATTAGE:,.0f}], got {appliance.default_wattage}",
            ValidationError,
        )
        self._appliances[appliance.id] = appliance

    def get_appliance(self, appliance_id: str) -> Appliance:
        try:
            return self._appliances[appliance_id]
        except KeyError:
            raise NotFoundError(f"Appliance '{appliance_id}' not found") from None

    def lookup_appliance_wattage(self, appliance_id: str) -> float:
        return float(self.get_appliance(appliance_id).default_wattage)

    # ---- consumption records ----

    def persist_consumption_record(self, record: ConsumptionRecord) -> None:
        """Insert, or replace the record with the same id.

        A different record already holding (owner, year, month) is a conflict.
        """
        key = record.period_key
        with self._lock:
            holder = self._by_period.get(key)
            if holder is not None and holder != record.id:
                raise DuplicateError(
                    f"Consumption for {record.month:02d}/{record.year} already "
                    f"exists for owner '{record.owner_id}'"
                )
            previous = self._records.get(record.id)
            if previous is not None and previous.period_key != key:
                del self._by_period[previous.period_key]
            self._records[record.id] = record
            self._by_period[key] = record.id
        logger.debug("Persisted consumption record %s", record.id)

    def get_consumption_record(
        self, record_id: str, owner_id: Optional[str] = None
    ) -> ConsumptionRecord:
        rec = self._records.get(record_id)
        if rec is None or (owner_id is not None and rec.owner_id != owner_id):
            raise NotFoundError(f"Consumption record '{record_id}' not found")
        return rec

    def find_consumption_record(
        self, owner_id: str, month: int, year: int
    ) -> Optional[ConsumptionRecord]:
        rid = self._by_period.get((owner_id, year, month))
        return self._records.get(rid) if rid is not None else None

    def delete_consumption_record(
        self, record_id: str, owner_id: Optional[str] = None
    ) -> None:
        with self._lock:
            rec = self.get_consumption_record(record_id, owner_id)
            del self._records[rec.id]
            del self._by_period[rec.period_key]
        logger.debug("Deleted consumption record %s", record_id)

    def records(self, owner_id: Optional[str] = None) -> List[ConsumptionRecord]:
        with self._lock:
            recs = list(self._records.values())
        if owner_id is not None:
            recs = [r for r in recs if r.owner_id == owner_id]
        return recs

    def fetch_historical_totals(
        self, scope: Scope, window_size: int, owner_id: Optional[str] = None
    ) -> List[HistoryPoint]:
        if scope == canon.SCOPE_SYSTEM:
            return history.system_history(self.records(), window_size)
        require(owner_id is not None, "User-scope history needs an owner_id", ValidationError)
        return history.user_history(self.records(owner_id), owner_id, window_size)

    # ---- tariffs ----

    def fetch_active_tariff_schedule(
        self, as_of: Optional[date] = None
    ) -> Optional[TariffSchedule]:
        return self.tariffs.active(as_of)

    def persist_tariff_schedule(self, schedule: TariffSchedule) -> TariffSchedule:
        return self.tariffs.publish(schedule)
