from __future__ import annotations

from typing import Optional

from ...core.constants import (
    ESI_EMPLOYEE_RATE,
    ESI_EMPLOYER_RATE,
    HRA_RATE,
    INCOME_TAX_RATE,
    MEDICAL_ALLOWANCE,
    PF_EMPLOYEE_RATE,
    PF_EMPLOYER_RATE,
    PROFESSIONAL_TAX,
    STANDARD_WORK_HOURS,
    TRANSPORT_ALLOWANCE,
)
from ...core.exceptions import ValidationError
from ..model import Deductions, Earnings, round_half_up
from .base import PayrollBreakdown, PayrollCalculator, PeriodAttendance


def _default_deductions(basic_salary: float) -> Deductions:
    return Deductions(
        pf_employee=round_half_up(basic_salary * PF_EMPLOYEE_RATE),
        esi_employee=round_half_up(basic_salary * ESI_EMPLOYEE_RATE),
        professional_tax=PROFESSIONAL_TAX,
        income_tax=round_half_up(basic_salary * INCOME_TAX_RATE),
    )


def _default_earnings(basic_salary: float, *, basic_wage: float, overtime: float = 0) -> Earnings:
    return Earnings(
        basic_wage=basic_wage,
        house_rent_allowance=round_half_up(basic_salary * HRA_RATE),
        transport_allowance=TRANSPORT_ALLOWANCE,
        medical_allowance=MEDICAL_ALLOWANCE,
        overtime=overtime,
        pf_employer=round_half_up(basic_salary * PF_EMPLOYER_RATE),
        esi_employer=round_half_up(basic_salary * ESI_EMPLOYER_RATE),
    )


def compute_default_payroll(basic_salary: float) -> PayrollBreakdown:
    basic_salary = float(basic_salary or 0)
    return PayrollBreakdown(
        earnings=_default_earnings(basic_salary, basic_wage=basic_salary),
        deductions=_default_deductions(basic_salary),
    )


def compute_prorated_payroll(
    basic_salary: float,
    working_days_in_month: int,
    present_days: int,
    half_days: int,
    leave_days: float,
    total_overtime_hours: float,
) -> PayrollBreakdown:
    """Scale basic wage down for unpaid days and add overtime pay.

    Only ``basic_wage`` uses the adjusted basic; allowances, PF/ESI and
    income tax stay on the full ``basic_salary``.
    """
    if int(working_days_in_month) < 1:
        raise ValidationError("working days in month must be at least 1")

    basic_salary = float(basic_salary or 0)
    effective_present = present_days + 0.5 * half_days + leave_days
    unpaid_days = max(0.0, working_days_in_month - effective_present)
    per_day_rate = basic_salary / working_days_in_month
    adjusted_basic = max(0, round_half_up(basic_salary - unpaid_days * per_day_rate))
    overtime_pay = round_half_up(total_overtime_hours * (per_day_rate / STANDARD_WORK_HOURS))

    return PayrollBreakdown(
        earnings=_default_earnings(basic_salary, basic_wage=adjusted_basic, overtime=overtime_pay),
        deductions=_default_deductions(basic_salary),
    )


class StandardPayrollCalculator(PayrollCalculator):
    """Fixed-rate rule: HRA 40%, PF 12%, ESI 3.25%/0.75%, tax 10%, flat allowances."""

    def calculate(self, basic_salary: float, attendance: Optional[PeriodAttendance] = None) -> PayrollBreakdown:
        if attendance is None:
            return compute_default_payroll(basic_salary)
        return compute_prorated_payroll(
            basic_salary,
            attendance.working_days,
            attendance.present_days,
            attendance.half_days,
            attendance.leave_days,
            attendance.overtime_hours,
        )
