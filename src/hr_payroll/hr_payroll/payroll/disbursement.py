from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_CURRENCY
from ..core.enums import PaymentStatus, PayrollStatus
from ..core.exceptions import ExternalServiceError
from ..employees.repository import EmployeeRepository
from ..notifications.sink import LoggingNotificationSink, NotificationEvent, NotificationSink
from .bank import BankTransferGateway, TransferResult
from .model import PaymentRecord, PayrollRecord, round_half_up
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

ELIGIBLE_STATUSES = (PayrollStatus.PROCESSED, PayrollStatus.PENDING)


@dataclass(frozen=True)
class DisbursementResult:
    payroll_id: Optional[int]
    employee_id: int
    amount: int
    status: PaymentStatus
    reference: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "payrollId": self.payroll_id,
            "employeeId": self.employee_id,
            "amount": self.amount,
            "status": self.status,
            "reference": self.reference,
            "error": self.error,
        }


@dataclass(frozen=True)
class DisbursementReport:
    month: str
    year: int
    results: list[DisbursementResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def paid(self) -> int:
        return sum(1 for r in self.results if r.status == PaymentStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == PaymentStatus.FAILED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "year": self.year,
            "total": self.total,
            "paid": self.paid,
            "failed": self.failed,
            "results": self.results,
        }


class PayrollDisbursementService:
    """Pays out every Pending/Processed payroll of a period, one at a time.

    A failed transfer is recorded on its own payroll and never stops the
    batch. Paid records are not eligible, so re-running a period only
    retries the failures.
    """

    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        gateway: BankTransferGateway,
        *,
        notifier: Optional[NotificationSink] = None,
        currency: str = DEFAULT_CURRENCY,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._gateway = gateway
        self._notifier = notifier or LoggingNotificationSink()
        self._currency = currency

    def disburse_for_period(self, month: str, year: int, *, now: datetime | None = None) -> DisbursementReport:
        records = self._payrolls.list_for_period(month, year, statuses=ELIGIBLE_STATUSES)
        logger.info("Disbursing %d payroll(s) for %s %s", len(records), month, year)

        report = DisbursementReport(month=month, year=int(year))
        for record in records:
            report.results.append(self._disburse_one(record, now=now or now_local()))

        logger.info(
            "Disbursement for %s %s finished: total=%d paid=%d failed=%d",
            month,
            year,
            report.total,
            report.paid,
            report.failed,
        )
        return report

    def _disburse_one(self, record: PayrollRecord, *, now: datetime) -> DisbursementResult:
        amount = round_half_up(record.in_hand_salary)
        result = self._transfer(record, amount)

        if result.success:
            record.mark_paid(
                PaymentRecord(
                    provider=result.provider,
                    reference=result.reference,
                    status=PaymentStatus.SUCCESS,
                    processed_at=now,
                )
            )
            logger.info("Payroll %s paid to employee %s (ref=%s)", record.payroll_id, record.employee_id, result.reference)
        else:
            record.record_failed_payment(
                PaymentRecord(
                    provider=result.provider,
                    status=PaymentStatus.FAILED,
                    processed_at=now,
                    error=result.error,
                )
            )
            logger.warning("Payroll %s transfer failed for employee %s: %s", record.payroll_id, record.employee_id, result.error)

        self._payrolls.save(record)
        status = record.payment.status
        self._notifier.notify(
            NotificationEvent(
                kind="payroll.paid" if result.success else "payroll.payment_failed",
                employee_id=record.employee_id,
                payload={"payrollId": record.payroll_id, "month": record.month, "year": record.year, "amount": amount},
                occurred_at=now,
            )
        )
        return DisbursementResult(
            payroll_id=record.payroll_id,
            employee_id=record.employee_id,
            amount=amount,
            status=status,
            reference=result.reference,
            error=result.error,
        )

    def _transfer(self, record: PayrollRecord, amount: int) -> TransferResult:
        provider = getattr(self._gateway, "provider", None)
        employee = self._employees.get_by_id(record.employee_id)
        if not employee:
            return TransferResult(success=False, provider=provider, error="Employee not found")

        try:
            logger.debug("Transferring %s %s to %s", amount, self._currency, employee.bank.masked_account)
            return self._gateway.transfer(amount=amount, beneficiary=employee.bank, currency=self._currency)
        except ExternalServiceError as e:
            return TransferResult(success=False, provider=provider, error=e.message)
