from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from .calculator.structure_calculator import SalaryStructure
from .model import PayrollRecord


class PayrollRepository(Protocol):
    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_period(self, employee_id: int, month: str, year: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, record: PayrollRecord) -> int:
        """Insert a new record; raises DuplicatePayrollPeriod if the period exists."""

        raise NotImplementedError

    def save(self, record: PayrollRecord) -> bool:
        raise NotImplementedError

    def list_for_period(
        self,
        month: str,
        year: int,
        *,
        statuses: Optional[Iterable[PayrollStatus]] = None,
        visible_only: bool = False,
    ) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, offset: int, limit: int) -> Sequence[PayrollRecord]:
        """Newest period first."""

        raise NotImplementedError

    def count_for_employee(self, employee_id: int) -> int:
        raise NotImplementedError


class SalaryStructureRepository(Protocol):
    def get(self, structure_id: int) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def list_active(self) -> Sequence[SalaryStructure]:
        raise NotImplementedError
