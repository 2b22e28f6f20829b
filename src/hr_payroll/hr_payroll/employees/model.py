from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class BankDetails:
    """Beneficiary fields used for salary transfers."""

    bank_name: Optional[str] = None
    ifsc: Optional[str] = None
    account_no: Optional[str] = None
    account_name: Optional[str] = None

    @property
    def masked_account(self) -> str:
        if not self.account_no:
            return "-"
        return "****" + str(self.account_no)[-4:]

    def to_dict(self) -> dict[str, Any]:
        return {
            "bankName": self.bank_name,
            "ifsc": self.ifsc,
            "accountNo": self.account_no,
            "accountName": self.account_name,
        }


@dataclass(frozen=True)
class Employee:
    """Domain entity: employee as seen by attendance and payroll.

    Note: the directory itself (registration, profiles) is owned elsewhere.
    """

    employee_id: int
    name: str
    email: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    employee_code: Optional[str] = None
    salary: Optional[float] = None
    bank: BankDetails = field(default_factory=BankDetails)
    active: bool = True

    def summary(self) -> dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "position": self.position,
            "employeeCode": self.employee_code,
        }
