from __future__ import annotations
import logging
import threading
from datetime import date
from typing import Iterable, List, Optional

from .schema import TariffSchedule
from .validators import validate_schedule
from ..exceptions import DuplicateError, NotFoundError, VersionConflictError

logger = logging.getLogger(__name__)


class TariffBook:
    """All tariff schedules, past and present, with at most one active.

    The active flag is only ever changed here, inside one lock-guarded step
    that clears every other schedule. Each change bumps ``version`` so callers
    can activate optimistically with ``expected_version``. Schedules handed
    out are copies; flipping ``is_active`` on them has no effect on the book.
    """

    def __init__(self, schedules: Optional[Iterable[TariffSchedule]] = None):
        self._lock = threading.Lock()
        self._schedules: dict[str, TariffSchedule] = {}
        self._version = 0
        for s in schedules or []:
            self.publish(s)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._schedules)

    def publish(self, schedule: TariffSchedule) -> TariffSchedule:
        """Validate and store a new schedule; an active one displaces the rest."""
        validate_schedule(schedule)
        stored = schedule.model_copy(deep=True)
        with self._lock:
            if stored.id in self._schedules:
                raise DuplicateError(f"Tariff schedule '{stored.id}' already exists")
            self._schedules[stored.id] = stored
            if stored.is_active:
                self._make_sole_active(stored.id)
            self._version += 1
        logger.info(
            "Published tariff schedule %s (active=%s, %d slabs)",
            stored.id,
            stored.is_active,
            len(stored.slabs),
        )
        return stored.model_copy(deep=True)

    def activate(
        self, schedule_id: str, *, expected_version: Optional[int] = None
    ) -> TariffSchedule:
        with self._lock:
            if schedule_id not in self._schedules:
                raise NotFoundError(f"Tariff schedule '{schedule_id}' not found")
            if expected_version is not None and expected_version != self._version:
                raise VersionConflictError(
                    f"Tariff book changed (version {self._version}, "
                    f"expected {expected_version})"
                )
            self._make_sole_active(schedule_id)
            self._version += 1
            out = self._schedules[schedule_id].model_copy(deep=True)
        logger.info("Activated tariff schedule %s", schedule_id)
        return out

    def _make_sole_active(self, schedule_id: str) -> None:
        # caller holds the lock
        for sid, s in self._schedules.items():
            s.is_active = sid == schedule_id

    def get(self, schedule_id: str) -> TariffSchedule:
        with self._lock:
            try:
                return self._schedules[schedule_id].model_copy(deep=True)
            except KeyError:
                raise NotFoundError(
                    f"Tariff schedule '{schedule_id}' not found"
                ) from None

    def active(self, as_of: Optional[date] = None) -> Optional[TariffSchedule]:
        """The active schedule if it is already in effect on ``as_of``, else None."""
        as_of = as_of or date.today()
        with self._lock:
            for s in self._schedules.values():
                if s.is_active and s.effective_from <= as_of:
                    return s.model_copy(deep=True)
        return None

    def history(self, limit: Optional[int] = 10) -> List[TariffSchedule]:
        """Every schedule, newest effective date first."""
        with self._lock:
            ordered = sorted(
                self._schedules.values(), key=lambda s: s.effective_from, reverse=True
            )
            return [s.model_copy(deep=True) for s in ordered[:limit]]
