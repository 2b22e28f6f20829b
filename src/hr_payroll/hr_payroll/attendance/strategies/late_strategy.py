from __future__ import annotations

from datetime import datetime

from .base import PunctualityDecision, PunctualityStrategy


class LateArrivalStrategy(PunctualityStrategy):
    """Clock-in after office start."""

    def decide_clock_in(self, *, now: datetime, office_start: datetime) -> PunctualityDecision:
        return PunctualityDecision(is_late_arrival=True)

    def decide_clock_out(self, *, now: datetime, office_end: datetime) -> PunctualityDecision:
        return PunctualityDecision()
