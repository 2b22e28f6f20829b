from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import calculate_working_days, month_name_of, month_range, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceStatus, PayrollStatus
from ..core.exceptions import DuplicatePayrollPeriod, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from ..notifications.sink import LoggingNotificationSink, NotificationEvent, NotificationSink
from .calculator.base import PayrollBreakdown, PayrollCalculator, PeriodAttendance
from .calculator.standard_calculator import StandardPayrollCalculator
from .calculator.structure_calculator import SalaryStructure, StructurePayrollCalculator
from .model import Deductions, Earnings, PayrollRecord
from .repository import PayrollRepository, SalaryStructureRepository

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 500


class PayrollService:
    """Creates and maintains payroll records.

    Totals, CTC and in-hand salary always come from the breakdown; callers
    can change earnings/deductions but never the derived figures.
    """

    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        structures: Optional[SalaryStructureRepository] = None,
        *,
        calculator: Optional[PayrollCalculator] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._structures = structures
        self._calculator = calculator or StandardPayrollCalculator()
        self._notifier = notifier or LoggingNotificationSink()

    def get_current_payroll(self, employee_id: int, *, now: datetime | None = None) -> PayrollRecord:
        """Current month's record, created from the default formulas if missing."""
        now = now or now_local()
        month, year = month_name_of(now), now.year

        existing = self._payrolls.get_for_period(employee_id, month, year)
        if existing:
            return existing

        employee = self._require_employee(employee_id)
        basic = float(employee.salary or 0)
        record = self._new_record(employee_id, month, year, basic, self._calculator.calculate(basic))
        record.payroll_id = self._payrolls.create(record)
        logger.info("Created default payroll for employee %s (%s %s)", employee_id, month, year)
        return record

    def get_payroll_for_period(self, employee_id: int, month: str, year: int) -> PayrollRecord:
        record = self._payrolls.get_for_period(employee_id, month, year)
        if not record:
            raise NotFoundError("Payroll not found")
        return record

    def generate_payrolls_for_month_year(self, month: str, year: int) -> int:
        """Pro-rated payroll for every salaried employee without one.

        Employees who already have a record for the period are skipped.
        Records are written one by one; a failure part-way leaves earlier
        ones in place.
        """
        start, end = month_range(month, year)
        working_days = calculate_working_days(start, end)
        if working_days < 1:
            raise ValidationError("Pay period has no working days")

        created = 0
        for employee in self._employees.list_salaried():
            if self._payrolls.get_for_period(employee.employee_id, month, year):
                continue

            period = self._period_attendance(employee, start, end, working_days)
            basic = float(employee.salary or 0)
            record = self._new_record(employee.employee_id, month, year, basic, self._calculator.calculate(basic, period))
            record.payroll_id = self._payrolls.create(record)
            created += 1
            self._notifier.notify(
                NotificationEvent(
                    kind="payroll.generated",
                    employee_id=employee.employee_id,
                    payload={"payrollId": record.payroll_id, "month": month, "year": year},
                )
            )

        logger.info("Bulk payroll generation for %s %s created %d record(s)", month, year, created)
        return created

    def create_payroll(
        self,
        *,
        employee_id: int,
        month: str,
        year: int,
        basic_salary: Optional[float] = None,
        earnings: Optional[dict[str, float]] = None,
        deductions: Optional[dict[str, float]] = None,
        notes: Optional[str] = None,
        status: PayrollStatus = PayrollStatus.PENDING,
        actor_id: Optional[int] = None,
    ) -> PayrollRecord:
        employee = self._require_employee(employee_id)
        if self._payrolls.get_for_period(employee_id, month, year):
            raise DuplicatePayrollPeriod(
                "Payroll already exists for this employee and period",
                details={"month": month, "year": year},
            )

        breakdown = PayrollBreakdown(earnings=Earnings(**(earnings or {})), deductions=Deductions(**(deductions or {})))
        basic = float(basic_salary if basic_salary is not None else (employee.salary or 0))
        record = self._new_record(employee_id, month, year, basic, breakdown)
        record.status = status
        record.notes = self._check_notes(notes)
        record.last_modified_by = actor_id
        record.payroll_id = self._payrolls.create(record)
        return record

    def update_payroll(
        self,
        payroll_id: int,
        *,
        earnings: Optional[dict[str, float]] = None,
        deductions: Optional[dict[str, float]] = None,
        notes: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> PayrollRecord:
        record = self._require_payroll(payroll_id)
        record.replace_breakdown(
            earnings=record.earnings.merged(**earnings) if earnings else None,
            deductions=record.deductions.merged(**deductions) if deductions else None,
            notes=self._check_notes(notes),
            modified_by=actor_id,
        )
        self._payrolls.save(record)
        return record

    def set_visibility(self, payroll_id: int, is_visible: bool) -> PayrollRecord:
        record = self._require_payroll(payroll_id)
        record.set_visibility(is_visible)
        self._payrolls.save(record)
        return record

    def list_payrolls(self, month: str, year: int, *, include_hidden: bool = False) -> Sequence[PayrollRecord]:
        return self._payrolls.list_for_period(month, year, visible_only=not include_hidden)

    def get_history(self, employee_id: int, *, page: int = 1, limit: int = DEFAULT_HISTORY_LIMIT) -> dict[str, Any]:
        page = max(1, int(page))
        limit = max(1, int(limit))
        total = self._payrolls.count_for_employee(employee_id)
        payrolls = self._payrolls.list_for_employee(employee_id, offset=(page - 1) * limit, limit=limit)
        return {
            "payrolls": list(payrolls),
            "totalPages": math.ceil(total / limit),
            "currentPage": page,
            "total": total,
        }

    def get_payslip(self, employee_id: int, payroll_id: int) -> dict[str, Any]:
        record = self._payrolls.get(payroll_id)
        if not record or record.employee_id != employee_id:
            raise NotFoundError("Payroll not found")
        employee = self._require_employee(employee_id)
        return {
            "employee": employee.summary(),
            "payroll": {
                "month": record.month,
                "year": record.year,
                "basicSalary": record.basic_salary,
                "earnings": record.earnings,
                "deductions": record.deductions,
                "ctc": record.ctc,
                "inHandSalary": record.in_hand_salary,
                "status": record.status,
                "processedDate": record.processed_date,
                "paidDate": record.paid_date,
            },
        }

    def applicable_structures(self, employee_id: int) -> Sequence[SalaryStructure]:
        employee = self._require_employee(employee_id)
        return [s for s in self._require_structures().list_active() if s.applies_to(employee)]

    def generate_with_structure(self, *, employee_id: int, month: str, year: int, structure_id: int) -> PayrollRecord:
        employee = self._require_employee(employee_id)
        structure = self._require_structures().get(structure_id)
        if not structure:
            raise NotFoundError("Salary structure not found")

        existing = self._payrolls.get_for_period(employee_id, month, year)
        if existing:
            raise DuplicatePayrollPeriod(
                "Payroll already exists for this employee and period",
                details={"payrollId": existing.payroll_id},
            )

        basic = float(employee.salary or 0)
        breakdown = StructurePayrollCalculator(structure).calculate(basic)
        record = self._new_record(employee_id, month, year, basic, breakdown)
        record.payroll_id = self._payrolls.create(record)
        logger.info("Generated payroll %s for employee %s from structure %r", record.payroll_id, employee_id, structure.name)
        return record

    def _period_attendance(self, employee: Employee, start, end, working_days: int) -> PeriodAttendance:
        records = self._attendance.list_for_employee(employee.employee_id, start_date=start, end_date=end)
        leaves = self._leaves.list_approved_overlapping(employee.employee_id, start_date=start, end_date=end)
        return PeriodAttendance(
            working_days=working_days,
            present_days=sum(1 for r in records if r.status in (AttendanceStatus.PRESENT, AttendanceStatus.LOGGED_OUT)),
            half_days=sum(1 for r in records if r.status == AttendanceStatus.HALF_DAY),
            leave_days=sum(leave.days_within(start, end) for leave in leaves),
            overtime_hours=sum(r.overtime_hours or 0 for r in records),
        )

    @staticmethod
    def _new_record(employee_id: int, month: str, year: int, basic: float, breakdown: PayrollBreakdown) -> PayrollRecord:
        return PayrollRecord(
            payroll_id=None,
            employee_id=employee_id,
            month=month,
            year=int(year),
            basic_salary=basic,
            earnings=breakdown.earnings,
            deductions=breakdown.deductions,
            status=PayrollStatus.PENDING,
        )

    @staticmethod
    def _check_notes(notes: Optional[str]) -> Optional[str]:
        if notes is not None and len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"notes must be at most {NOTES_MAX_LENGTH} characters")
        return notes

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_payroll(self, payroll_id: int) -> PayrollRecord:
        record = self._payrolls.get(payroll_id)
        if not record:
            raise NotFoundError("Payroll not found")
        return record

    def _require_structures(self) -> SalaryStructureRepository:
        if self._structures is None:
            raise NotFoundError("Salary structures are not configured")
        return self._structures
