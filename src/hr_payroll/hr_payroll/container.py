from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import (
    DEFAULT_CURRENCY,
    MAX_BREAKS_PER_DAY,
    OFFICE_END_HOUR,
    OFFICE_START_HOUR,
    ORPHAN_BREAK_MINUTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .notifications.sink import LoggingNotificationSink, NotificationSink
from .payroll.bank import BankTransferGateway, MockBankGateway
from .payroll.disbursement import PayrollDisbursementService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.mysql_structure_repository import MySQLSalaryStructureRepository
from .payroll.repository import PayrollRepository, SalaryStructureRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRepository
    payrolls_repo: PayrollRepository
    structures_repo: SalaryStructureRepository

    attendance_service: AttendanceService
    payroll_service: PayrollService
    disbursement_service: PayrollDisbursementService

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRepository,
    payrolls_repo: PayrollRepository,
    structures_repo: SalaryStructureRepository,
    gateway: Optional[BankTransferGateway] = None,
    notifier: Optional[NotificationSink] = None,
    settings: Optional[Mapping[str, Any]] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build services on top of the given repositories.

    Tests call this directly with in-memory repositories.
    """
    settings = settings or {}
    notifier = notifier or LoggingNotificationSink()

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        strategy_factory=AttendanceStrategyFactory(
            office_start_hour=int(settings.get("OFFICE_START_HOUR", OFFICE_START_HOUR)),
            office_end_hour=int(settings.get("OFFICE_END_HOUR", OFFICE_END_HOUR)),
        ),
        max_breaks=int(settings.get("MAX_BREAKS_PER_DAY", MAX_BREAKS_PER_DAY)),
        orphan_break_minutes=int(settings.get("ORPHAN_BREAK_MINUTES", ORPHAN_BREAK_MINUTES)),
    )
    payroll_service = PayrollService(
        payrolls_repo,
        employees_repo,
        attendance_repo,
        leaves_repo,
        structures_repo,
        notifier=notifier,
    )
    disbursement_service = PayrollDisbursementService(
        payrolls_repo,
        employees_repo,
        gateway or MockBankGateway(),
        notifier=notifier,
        currency=str(settings.get("PAYMENT_CURRENCY", DEFAULT_CURRENCY)),
    )

    return Container(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payrolls_repo=payrolls_repo,
        structures_repo=structures_repo,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
        disbursement_service=disbursement_service,
        conn=conn,
    )


def build_container(*, db_config: Mapping[str, Any], settings: Optional[Mapping[str, Any]] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(dict(db_config)))

    return wire_services(
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        payrolls_repo=MySQLPayrollRepository(conn),
        structures_repo=MySQLSalaryStructureRepository(conn),
        settings=settings,
        conn=conn,
    )
