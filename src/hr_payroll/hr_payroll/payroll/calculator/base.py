from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..model import Deductions, Earnings


@dataclass(frozen=True)
class PeriodAttendance:
    """Attendance/leave roll-up for one employee over one pay period."""

    working_days: int
    present_days: int = 0
    half_days: int = 0
    leave_days: float = 0
    overtime_hours: float = 0


@dataclass(frozen=True)
class PayrollBreakdown:
    earnings: Earnings
    deductions: Deductions

    @property
    def ctc(self) -> float:
        return self.earnings.total_earnings

    @property
    def in_hand_salary(self) -> float:
        return self.earnings.total_earnings - self.deductions.total


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, basic_salary: float, attendance: Optional[PeriodAttendance] = None) -> PayrollBreakdown:
        raise NotImplementedError
