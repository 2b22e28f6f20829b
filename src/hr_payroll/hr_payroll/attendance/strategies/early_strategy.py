from __future__ import annotations

from datetime import datetime

from .base import PunctualityDecision, PunctualityStrategy


class EarlyDepartureStrategy(PunctualityStrategy):
    """Clock-out strictly before office end."""

    def decide_clock_in(self, *, now: datetime, office_start: datetime) -> PunctualityDecision:
        return PunctualityDecision()

    def decide_clock_out(self, *, now: datetime, office_end: datetime) -> PunctualityDecision:
        return PunctualityDecision(is_early_departure=True)
