from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Optional

from ..core.enums import PaymentStatus, PayrollStatus
from ..core.exceptions import PayrollLocked


def round_half_up(value: float) -> int:
    """Round to the nearest whole currency unit, .5 going up."""
    return int(math.floor(float(value) + 0.5))


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


@dataclass(frozen=True)
class Earnings:
    basic_wage: float = 0
    house_rent_allowance: float = 0
    transport_allowance: float = 0
    medical_allowance: float = 0
    overtime: float = 0
    gratuity: float = 0
    special_allowance: float = 0
    performance_bonus: float = 0
    project_bonus: float = 0
    attendance_bonus: float = 0
    pf_employer: float = 0
    esi_employer: float = 0

    @property
    def total_earnings(self) -> float:
        return sum(getattr(self, f.name) or 0 for f in fields(self))

    def merged(self, **changes: float) -> "Earnings":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out = {_camel(k): v for k, v in asdict(self).items()}
        out["totalEarnings"] = self.total_earnings
        return out


@dataclass(frozen=True)
class Deductions:
    pf_employee: float = 0
    esi_employee: float = 0
    professional_tax: float = 0
    income_tax: float = 0
    advance_salary: float = 0
    loan_deduction: float = 0
    other_deductions: float = 0

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) or 0 for f in fields(self))

    def merged(self, **changes: float) -> "Deductions":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out = {_camel(k): v for k, v in asdict(self).items()}
        out["total"] = self.total
        return out


# JSON key -> attribute name, used when reading request payloads.
EARNING_FIELDS = {_camel(f.name): f.name for f in fields(Earnings)}
DEDUCTION_FIELDS = {_camel(f.name): f.name for f in fields(Deductions)}


@dataclass(frozen=True)
class PaymentRecord:
    provider: Optional[str]
    status: PaymentStatus
    processed_at: datetime
    reference: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "reference": self.reference,
            "status": self.status,
            "processedAt": self.processed_at,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Optional["PaymentRecord"]:
        if not data:
            return None
        processed_at = data.get("processedAt")
        if isinstance(processed_at, str):
            processed_at = datetime.fromisoformat(processed_at)
        return cls(
            provider=data.get("provider"),
            status=PaymentStatus(data.get("status") or PaymentStatus.PENDING.value),
            processed_at=processed_at,
            reference=data.get("reference"),
            error=data.get("error"),
        )


@dataclass
class PayrollRecord:
    """One employee's payroll for one (month, year).

    ``ctc`` and ``in_hand_salary`` are derived from the breakdown and cannot
    be assigned. Once Paid, only the payment sub-record may change.
    """

    payroll_id: Optional[int]
    employee_id: int
    month: str
    year: int
    basic_salary: float
    earnings: Earnings = field(default_factory=Earnings)
    deductions: Deductions = field(default_factory=Deductions)
    status: PayrollStatus = PayrollStatus.PENDING
    is_visible: bool = True
    notes: Optional[str] = None
    processed_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    payment: Optional[PaymentRecord] = None
    last_modified_by: Optional[int] = None

    @property
    def ctc(self) -> float:
        return self.earnings.total_earnings

    @property
    def in_hand_salary(self) -> float:
        return self.earnings.total_earnings - self.deductions.total

    @property
    def is_paid(self) -> bool:
        return self.status == PayrollStatus.PAID

    def replace_breakdown(
        self,
        *,
        earnings: Optional[Earnings] = None,
        deductions: Optional[Deductions] = None,
        notes: Optional[str] = None,
        modified_by: Optional[int] = None,
    ) -> None:
        if self.is_paid:
            raise PayrollLocked("Paid payroll records cannot be modified")
        if earnings is not None:
            self.earnings = earnings
        if deductions is not None:
            self.deductions = deductions
        if notes is not None:
            self.notes = notes
        if modified_by is not None:
            self.last_modified_by = modified_by

    def set_visibility(self, is_visible: bool) -> None:
        if self.is_paid:
            raise PayrollLocked("Paid payroll records cannot be modified")
        self.is_visible = bool(is_visible)

    def mark_paid(self, payment: PaymentRecord) -> None:
        self.status = PayrollStatus.PAID
        self.paid_date = payment.processed_at
        self.payment = payment

    def record_failed_payment(self, payment: PaymentRecord) -> None:
        self.payment = payment

    def to_dict(self) -> dict[str, Any]:
        return {
            "payrollId": self.payroll_id,
            "employeeId": self.employee_id,
            "month": self.month,
            "year": self.year,
            "basicSalary": self.basic_salary,
            "earnings": self.earnings,
            "deductions": self.deductions,
            "ctc": self.ctc,
            "inHandSalary": self.in_hand_salary,
            "status": self.status,
            "isVisible": self.is_visible,
            "notes": self.notes,
            "processedDate": self.processed_date,
            "paidDate": self.paid_date,
            "payment": self.payment,
        }
