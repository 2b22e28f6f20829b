from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import at_hour
from ..core.constants import OFFICE_END_HOUR, OFFICE_START_HOUR
from .strategies.base import PunctualityStrategy
from .strategies.early_strategy import EarlyDepartureStrategy
from .strategies.late_strategy import LateArrivalStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the punctuality strategy from office hours."""

    office_start_hour: int = OFFICE_START_HOUR
    office_end_hour: int = OFFICE_END_HOUR

    def office_start(self, now: datetime) -> datetime:
        return at_hour(now, self.office_start_hour)

    def office_end(self, now: datetime) -> datetime:
        return at_hour(now, self.office_end_hour)

    def for_clock_in(self, *, now: datetime) -> PunctualityStrategy:
        if now > self.office_start(now):
            return LateArrivalStrategy()
        return NormalStrategy()

    def for_clock_out(self, *, now: datetime) -> PunctualityStrategy:
        # Any clock-out before closing time counts, including a half-day exit.
        if now < self.office_end(now):
            return EarlyDepartureStrategy()
        return NormalStrategy()
