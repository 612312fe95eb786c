from . import (
    canon,
    config,
    exceptions,
    types,
    usage,
    tariffs,
    forecast,
    history,
    store,
    service,
)
from .service import (
    Portal,
    compute_bill,
    compute_consumption,
    forecast_next,
    forecast_system_next,
)

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "usage",
    "tariffs",
    "forecast",
    "history",
    "store",
    "service",
    "Portal",
    "compute_bill",
    "compute_consumption",
    "forecast_next",
    "forecast_system_next",
]
