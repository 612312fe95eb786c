import pytest

from usagelogic import Portal
from usagelogic.store import InMemoryStore
from usagelogic.tariffs import Slab, TariffSchedule
from usagelogic.types import Appliance, ApplianceUsageEntry, HistoryPoint


@pytest.fixture
def appliances():
    return [
        Appliance("lamp", "Desk Lamp", "Lighting", 100),
        Appliance("fridge", "Refrigerator", "Kitchen", 250),
        Appliance("ac", "Air Conditioner", "Cooling", 1500),
    ]


@pytest.fixture
def store(appliances):
    return InMemoryStore(appliances=appliances)


@pytest.fixture
def portal(store):
    return Portal(store)


@pytest.fixture
def lamp_entries():
    # Two 100 W lamps, 5 h/day -> 30 kWh/month
    return [ApplianceUsageEntry("lamp", quantity=2, daily_hours=5.0)]


@pytest.fixture
def two_slab_schedule():
    return TariffSchedule(
        id="two-slab",
        slabs=[
            Slab(min_units=0, max_units=10, rate_per_unit=1.0),
            Slab(min_units=11, max_units=20, rate_per_unit=2.0),
        ],
    )


@pytest.fixture
def rising_history():
    """Six months, most recent first, clearly trending up."""
    return [200.0, 170.0, 150.0, 130.0, 120.0, 100.0]


@pytest.fixture
def system_history():
    """Three aggregated months, most recent first, 5.0 currency per kWh."""
    return [
        HistoryPoint(total_units=1000.0, month=5, year=2025, total_bill=5000.0, user_count=12),
        HistoryPoint(total_units=900.0, month=4, year=2025, total_bill=4500.0, user_count=10),
        HistoryPoint(total_units=800.0, month=3, year=2025, total_bill=4000.0, user_count=8),
    ]
