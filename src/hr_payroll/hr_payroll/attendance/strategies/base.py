from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class PunctualityDecision:
    is_late_arrival: bool = False
    is_early_departure: bool = False


class PunctualityStrategy(ABC):
    """Strategy Pattern: encapsulate how we flag arrivals and departures."""

    @abstractmethod
    def decide_clock_in(self, *, now: datetime, office_start: datetime) -> PunctualityDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_clock_out(self, *, now: datetime, office_end: datetime) -> PunctualityDecision:
        raise NotImplementedError
