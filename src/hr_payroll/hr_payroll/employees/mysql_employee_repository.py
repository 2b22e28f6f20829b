from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BankDetails, Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, name, email, department, position, employee_code, salary,
    bank_name, ifsc, account_no, account_name, active
"""


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return self._to_employee(r) if r else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE active=1 ORDER BY name ASC")
            return [self._to_employee(r) for r in fetchall(cur)]

    def list_salaried(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE active=1 AND salary IS NOT NULL ORDER BY employee_id ASC"
            )
            return [self._to_employee(r) for r in fetchall(cur)]

    @staticmethod
    def _to_employee(r: dict[str, Any]) -> Employee:
        salary = r.get("salary")
        return Employee(
            employee_id=int(r["employee_id"]),
            name=r["name"],
            email=r.get("email"),
            department=r.get("department"),
            position=r.get("position"),
            employee_code=r.get("employee_code"),
            salary=float(salary) if salary is not None else None,
            bank=BankDetails(
                bank_name=r.get("bank_name"),
                ifsc=r.get("ifsc"),
                account_no=r.get("account_no"),
                account_name=r.get("account_name"),
            ),
            active=bool(r.get("active", 1)),
        )
