from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, WorkLocation
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, placeholders
from .model import AttendanceRecord, BreakEntry, CaptureContext
from .repository import AttendanceRepository

_RECORD_COLUMNS = """
    attendance_id, employee_id, work_date, clock_in, clock_out, total_break_ms, status,
    is_late_arrival, is_early_departure, gross_hours, effective_hours, overtime_hours,
    work_location, clock_in_context, clock_out_context
"""


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date=%s
                ORDER BY attendance_id ASC
                LIMIT 1
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            breaks = self._load_breaks(cur, [int(r["attendance_id"])])
            return self._to_record(r, breaks.get(int(r["attendance_id"]), []))

    def create(self, record: AttendanceRecord) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, clock_in, clock_out, total_break_ms, status,
                    is_late_arrival, is_early_departure, gross_hours, effective_hours, overtime_hours,
                    work_location, clock_in_context, clock_out_context
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(record.employee_id),
                    record.work_date,
                    record.clock_in,
                    record.clock_out,
                    int(record.total_break_duration),
                    record.status.value,
                    int(record.is_late_arrival),
                    int(record.is_early_departure),
                    record.gross_hours,
                    record.effective_hours,
                    record.overtime_hours,
                    record.work_location.value,
                    dump_json(record.clock_in_context.to_dict()),
                    dump_json(record.clock_out_context.to_dict() if record.clock_out_context else None),
                ),
            )
            attendance_id = int(cur.lastrowid)
            self._insert_breaks(cur, attendance_id, record.breaks)
            return attendance_id

    def save(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, total_break_ms=%s, status=%s,
                    is_late_arrival=%s, is_early_departure=%s,
                    gross_hours=%s, effective_hours=%s, overtime_hours=%s,
                    clock_out_context=%s
                WHERE attendance_id=%s
                """,
                (
                    record.clock_out,
                    int(record.total_break_duration),
                    record.status.value,
                    int(record.is_late_arrival),
                    int(record.is_early_departure),
                    record.gross_hours,
                    record.effective_hours,
                    record.overtime_hours,
                    dump_json(record.clock_out_context.to_dict() if record.clock_out_context else None),
                    int(record.attendance_id),
                ),
            )
            updated = cur.rowcount > 0
            cur.execute("DELETE FROM attendance_breaks WHERE attendance_id=%s", (int(record.attendance_id),))
            self._insert_breaks(cur, int(record.attendance_id), record.breaks)
            return updated

    def list_for_employee(
        self,
        employee_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [int(employee_id)]
        if start_date is not None:
            clauses.append("work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date <= %s")
            params.append(end_date)

        return self._select(" AND ".join(clauses), params, order="work_date DESC, attendance_id DESC")

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        return self._select("work_date=%s", [work_date], order="employee_id ASC")

    def _select(self, where: str, params: list[object], *, order: str) -> list[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE {where} ORDER BY {order}",
                tuple(params),
            )
            rows = fetchall(cur)
            breaks = self._load_breaks(cur, [int(r["attendance_id"]) for r in rows])
            return [self._to_record(r, breaks.get(int(r["attendance_id"]), [])) for r in rows]

    @staticmethod
    def _load_breaks(cur, attendance_ids: list[int]) -> dict[int, list[BreakEntry]]:
        if not attendance_ids:
            return {}
        cur.execute(
            f"""
            SELECT attendance_id, break_in, break_out
            FROM attendance_breaks
            WHERE attendance_id IN ({placeholders(len(attendance_ids))})
            ORDER BY attendance_id ASC, seq ASC
            """,
            tuple(attendance_ids),
        )
        out: dict[int, list[BreakEntry]] = {}
        for b in fetchall(cur):
            out.setdefault(int(b["attendance_id"]), []).append(
                BreakEntry(break_in=b["break_in"], break_out=b.get("break_out"))
            )
        return out

    @staticmethod
    def _insert_breaks(cur, attendance_id: int, breaks: Sequence[BreakEntry]) -> None:
        for seq, entry in enumerate(breaks):
            cur.execute(
                "INSERT INTO attendance_breaks(attendance_id, seq, break_in, break_out) VALUES(%s,%s,%s,%s)",
                (attendance_id, seq, entry.break_in, entry.break_out),
            )

    @staticmethod
    def _to_record(r: dict[str, Any], breaks: list[BreakEntry]) -> AttendanceRecord:
        out_ctx = load_json(r.get("clock_out_context"))
        return AttendanceRecord(
            attendance_id=int(r["attendance_id"]),
            employee_id=int(r["employee_id"]),
            work_date=r["work_date"],
            clock_in=r["clock_in"],
            clock_out=r.get("clock_out"),
            breaks=breaks,
            total_break_duration=int(r.get("total_break_ms") or 0),
            status=AttendanceStatus(r["status"]),
            is_late_arrival=bool(r.get("is_late_arrival")),
            is_early_departure=bool(r.get("is_early_departure")),
            gross_hours=float(r.get("gross_hours") or 0),
            effective_hours=float(r.get("effective_hours") or 0),
            overtime_hours=float(r.get("overtime_hours") or 0),
            work_location=WorkLocation(r.get("work_location") or WorkLocation.OFFICE.value),
            clock_in_context=CaptureContext.from_dict(load_json(r.get("clock_in_context"))),
            clock_out_context=CaptureContext.from_dict(out_ctx) if out_ctx is not None else None,
        )
