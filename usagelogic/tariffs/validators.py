from __future__ import annotations
from .schema import TariffSchedule
from ..exceptions import ConfigurationError, require

MAX_DESCRIPTION_LEN = 500


def validate_schedule(schedule: TariffSchedule) -> None:
    """Creation-time checks; bills are computed without re-validating."""
    slabs = schedule.slabs
    require(bool(slabs), "Tariff schedule must define at least one slab", ConfigurationError)
    for i, s in enumerate(slabs):
        require(
            s.min_units >= 0,
            f"Slab {i}: min_units must be >= 0, got {s.min_units}",
            ConfigurationError,
        )
        require(
            s.rate_per_unit >= 0,
            f"Slab {i}: rate_per_unit must be >= 0, got {s.rate_per_unit}",
            ConfigurationError,
        )
        if s.max_units is not None:
            require(
                s.max_units >= s.min_units,
                f"Slab {i}: max_units {s.max_units} below min_units {s.min_units}",
                ConfigurationError,
            )
        elif i != len(slabs) - 1:
            raise ConfigurationError(f"Slab {i}: only the final slab may be open-ended")

    for i in range(1, len(slabs)):
        prev, cur = slabs[i - 1], slabs[i]
        require(
            cur.min_units > prev.min_units,
            f"Slabs out of order: slab {i} starts at {cur.min_units}, "
            f"slab {i - 1} at {prev.min_units}",
            ConfigurationError,
        )
        # prev.max_units is set here: only the last slab may be open-ended
        require(
            cur.min_units > prev.max_units,
            f"Slabs overlap: slab {i - 1} ends at {prev.max_units}, "
            f"slab {i} starts at {cur.min_units}",
            ConfigurationError,
        )

    require(
        len(schedule.description) <= MAX_DESCRIPTION_LEN,
        f"Description exceeds {MAX_DESCRIPTION_LEN} characters",
        ConfigurationError,
    )
