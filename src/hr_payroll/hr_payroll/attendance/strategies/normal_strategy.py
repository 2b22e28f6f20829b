from __future__ import annotations

from datetime import datetime

from .base import PunctualityDecision, PunctualityStrategy


class NormalStrategy(PunctualityStrategy):
    """On-time clock-in, clock-out at or after closing time."""

    def decide_clock_in(self, *, now: datetime, office_start: datetime) -> PunctualityDecision:
        return PunctualityDecision(is_late_arrival=False)

    def decide_clock_out(self, *, now: datetime, office_end: datetime) -> PunctualityDecision:
        return PunctualityDecision(is_early_departure=False)
