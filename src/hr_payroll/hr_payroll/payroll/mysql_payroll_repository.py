from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

import mysql.connector

from ..core.enums import PayrollStatus
from ..core.exceptions import DuplicatePayrollPeriod
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, placeholders
from .model import DEDUCTION_FIELDS, EARNING_FIELDS, Deductions, Earnings, PaymentRecord, PayrollRecord
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, month, year, basic_salary, earnings, deductions, status,
    is_visible, notes, processed_date, paid_date, payment, last_modified_by
"""

# Periods sort newest first: year, then calendar month.
_MONTH_ORDER = "FIELD(month,'January','February','March','April','May','June','July','August','September','October','November','December')"


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        rows = self._select("payroll_id=%s", [int(payroll_id)])
        return rows[0] if rows else None

    def get_for_period(self, employee_id: int, month: str, year: int) -> Optional[PayrollRecord]:
        rows = self._select("employee_id=%s AND month=%s AND year=%s", [int(employee_id), month, int(year)])
        return rows[0] if rows else None

    def create(self, record: PayrollRecord) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO payrolls(
                        employee_id, month, year, basic_salary, earnings, deductions,
                        total_earnings, total_deductions, ctc, in_hand_salary,
                        status, is_visible, notes, processed_date, paid_date, payment, last_modified_by
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.employee_id),
                        record.month,
                        int(record.year),
                        record.basic_salary,
                        *self._breakdown_params(record),
                        record.status.value,
                        int(record.is_visible),
                        record.notes,
                        record.processed_date,
                        record.paid_date,
                        self._payment_json(record),
                        record.last_modified_by,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            raise DuplicatePayrollPeriod(
                "Payroll already exists for this employee and period",
                details={"month": record.month, "year": record.year},
            ) from e

    def save(self, record: PayrollRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET basic_salary=%s, earnings=%s, deductions=%s,
                    total_earnings=%s, total_deductions=%s, ctc=%s, in_hand_salary=%s,
                    status=%s, is_visible=%s, notes=%s, processed_date=%s, paid_date=%s,
                    payment=%s, last_modified_by=%s
                WHERE payroll_id=%s
                """,
                (
                    record.basic_salary,
                    *self._breakdown_params(record),
                    record.status.value,
                    int(record.is_visible),
                    record.notes,
                    record.processed_date,
                    record.paid_date,
                    self._payment_json(record),
                    record.last_modified_by,
                    int(record.payroll_id),
                ),
            )
            return cur.rowcount > 0

    def list_for_period(
        self,
        month: str,
        year: int,
        *,
        statuses: Optional[Iterable[PayrollStatus]] = None,
        visible_only: bool = False,
    ) -> Sequence[PayrollRecord]:
        clauses = ["month=%s", "year=%s"]
        params: list[object] = [month, int(year)]
        if statuses is not None:
            values = [s.value for s in statuses]
            clauses.append(f"status IN ({placeholders(len(values))})")
            params.extend(values)
        if visible_only:
            clauses.append("is_visible=1")
        return self._select(" AND ".join(clauses), params)

    def list_for_employee(self, employee_id: int, *, offset: int, limit: int) -> Sequence[PayrollRecord]:
        return self._select(
            "employee_id=%s",
            [int(employee_id)],
            order=f"year DESC, {_MONTH_ORDER} DESC",
            limit=(int(offset), int(limit)),
        )

    def count_for_employee(self, employee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM payrolls WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def _select(
        self,
        where: str,
        params: list[object],
        *,
        order: str = "employee_id ASC",
        limit: Optional[tuple[int, int]] = None,
    ) -> list[PayrollRecord]:
        sql = f"SELECT {_COLUMNS} FROM payrolls WHERE {where} ORDER BY {order}"
        if limit is not None:
            sql += " LIMIT %s, %s"
            params = [*params, *limit]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._to_record(r) for r in fetchall(cur)]

    @staticmethod
    def _breakdown_params(record: PayrollRecord) -> tuple:
        return (
            dump_json({k: getattr(record.earnings, k) for k in EARNING_FIELDS.values()}),
            dump_json({k: getattr(record.deductions, k) for k in DEDUCTION_FIELDS.values()}),
            record.earnings.total_earnings,
            record.deductions.total,
            record.ctc,
            record.in_hand_salary,
        )

    @staticmethod
    def _payment_json(record: PayrollRecord) -> Optional[str]:
        if record.payment is None:
            return None
        p = record.payment
        return dump_json(
            {
                "provider": p.provider,
                "reference": p.reference,
                "status": p.status.value,
                "processedAt": p.processed_at.isoformat() if p.processed_at else None,
                "error": p.error,
            }
        )

    @staticmethod
    def _to_record(r: dict[str, Any]) -> PayrollRecord:
        earnings = load_json(r.get("earnings")) or {}
        deductions = load_json(r.get("deductions")) or {}
        return PayrollRecord(
            payroll_id=int(r["payroll_id"]),
            employee_id=int(r["employee_id"]),
            month=r["month"],
            year=int(r["year"]),
            basic_salary=float(r.get("basic_salary") or 0),
            earnings=Earnings(**{k: v for k, v in earnings.items() if k in EARNING_FIELDS.values()}),
            deductions=Deductions(**{k: v for k, v in deductions.items() if k in DEDUCTION_FIELDS.values()}),
            status=PayrollStatus(r["status"]),
            is_visible=bool(r.get("is_visible", 1)),
            notes=r.get("notes"),
            processed_date=r.get("processed_date"),
            paid_date=r.get("paid_date"),
            payment=PaymentRecord.from_dict(load_json(r.get("payment"))),
            last_modified_by=r.get("last_modified_by"),
        )
