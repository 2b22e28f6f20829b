from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from ...core.enums import StructureScope
from ...employees.model import Employee
from ..model import Deductions, Earnings
from .base import PayrollBreakdown, PayrollCalculator, PeriodAttendance


@dataclass(frozen=True)
class SalaryLineItem:
    """Either a percentage of base salary or a fixed amount."""

    percentage: float = 0
    fixed_amount: float = 0
    is_percentage: bool = True

    def amount(self, base_salary: float) -> float:
        if self.is_percentage:
            return (base_salary * self.percentage) / 100
        return self.fixed_amount

    def to_dict(self) -> dict[str, Any]:
        return {"percentage": self.percentage, "fixedAmount": self.fixed_amount, "isPercentage": self.is_percentage}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SalaryLineItem":
        return cls(
            percentage=float(data.get("percentage") or 0),
            fixed_amount=float(data.get("fixedAmount") or 0),
            is_percentage=bool(data.get("isPercentage", True)),
        )


def default_earning_items() -> dict[str, SalaryLineItem]:
    return {
        "basic_wage": SalaryLineItem(),
        "house_rent_allowance": SalaryLineItem(),
        "transport_allowance": SalaryLineItem(),
        "medical_allowance": SalaryLineItem(),
        "special_allowance": SalaryLineItem(),
        "pf_employer": SalaryLineItem(percentage=12),
        "esi_employer": SalaryLineItem(percentage=3.25),
    }


def default_deduction_items() -> dict[str, SalaryLineItem]:
    return {
        "pf_employee": SalaryLineItem(percentage=12),
        "esi_employee": SalaryLineItem(percentage=0.75),
        "professional_tax": SalaryLineItem(is_percentage=False),
        "income_tax": SalaryLineItem(),
    }


@dataclass(frozen=True)
class StructureSalary:
    earnings: dict[str, float]
    deductions: dict[str, float]
    total_earnings: float
    total_deductions: float
    net_salary: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "earnings": dict(self.earnings),
            "deductions": dict(self.deductions),
            "totalEarnings": self.total_earnings,
            "totalDeductions": self.total_deductions,
            "netSalary": self.net_salary,
        }


@dataclass(frozen=True)
class SalaryStructure:
    """Admin-defined template of earning/deduction line items."""

    structure_id: Optional[int]
    name: str
    description: Optional[str] = None
    is_active: bool = True
    applicable_to: StructureScope = StructureScope.ALL
    applicable_values: Sequence[str] = ()
    earnings: dict[str, SalaryLineItem] = field(default_factory=default_earning_items)
    deductions: dict[str, SalaryLineItem] = field(default_factory=default_deduction_items)

    def applies_to(self, employee: Employee) -> bool:
        if self.applicable_to == StructureScope.ALL:
            return True
        if self.applicable_to == StructureScope.DEPARTMENT:
            return employee.department in self.applicable_values
        if self.applicable_to == StructureScope.POSITION:
            return employee.position in self.applicable_values
        return False

    def calculate_salary(self, base_salary: float) -> StructureSalary:
        earnings = {key: item.amount(base_salary) for key, item in self.earnings.items()}
        deductions = {key: item.amount(base_salary) for key, item in self.deductions.items()}
        total_earnings = sum(earnings.values())
        total_deductions = sum(deductions.values())
        return StructureSalary(
            earnings=earnings,
            deductions=deductions,
            total_earnings=total_earnings,
            total_deductions=total_deductions,
            net_salary=total_earnings - total_deductions,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "structureId": self.structure_id,
            "name": self.name,
            "description": self.description,
            "isActive": self.is_active,
            "applicableTo": self.applicable_to,
            "applicableValues": list(self.applicable_values),
            "earnings": {k: v.to_dict() for k, v in self.earnings.items()},
            "deductions": {k: v.to_dict() for k, v in self.deductions.items()},
        }


class StructurePayrollCalculator(PayrollCalculator):
    """Line-item strategy driven by a SalaryStructure; ignores attendance."""

    def __init__(self, structure: SalaryStructure):
        self._structure = structure

    def calculate(self, basic_salary: float, attendance: Optional[PeriodAttendance] = None) -> PayrollBreakdown:
        result = self._structure.calculate_salary(float(basic_salary or 0))
        return PayrollBreakdown(
            earnings=Earnings(**result.earnings),
            deductions=Deductions(**result.deductions),
        )
