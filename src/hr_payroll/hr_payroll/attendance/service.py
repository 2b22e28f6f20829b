from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ..common.datetime_utils import calculate_working_days, hours_between, now_local
from ..core.constants import (
    MAX_BREAKS_PER_DAY,
    MS_PER_HOUR,
    ORPHAN_BREAK_MINUTES,
    RECENT_RECORDS_LIMIT,
    STANDARD_WORK_HOURS,
)
from ..core.enums import AttendanceStatus, WorkLocation
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnBreak,
    BreakLimitExceeded,
    BreakStillActive,
    NoActiveBreak,
    NoClockInRecord,
    NoOpenSession,
    NotFoundError,
)
from ..employees.repository import EmployeeRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceLogs, AttendanceRecord, AttendanceSummary, BreakEntry, CaptureContext, DailyStats
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

PRESENT_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LOGGED_OUT})


class AttendanceService:
    """Clock-in / break / clock-out state machine for one employee-day.

    Status is never set directly: every operation mutates clock and break
    fields, then calls ``refresh_status`` to re-derive it.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        max_breaks: int = MAX_BREAKS_PER_DAY,
        orphan_break_minutes: int = ORPHAN_BREAK_MINUTES,
    ):
        self._attendance = attendance
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._max_breaks = int(max_breaks)
        self._orphan_after = timedelta(minutes=int(orphan_break_minutes))

    def clock_in(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        context: CaptureContext | None = None,
        work_location: WorkLocation | None = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()

        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        if existing:
            raise AlreadyClockedIn("Already clocked in for today", details={"session": existing})

        strategy = self._factory.for_clock_in(now=now)
        decision = strategy.decide_clock_in(now=now, office_start=self._factory.office_start(now))

        record = AttendanceRecord(
            attendance_id=None,
            employee_id=employee_id,
            work_date=today,
            clock_in=now,
            is_late_arrival=decision.is_late_arrival,
            work_location=work_location or WorkLocation.OFFICE,
            clock_in_context=context or CaptureContext(),
        )
        record.refresh_status()
        record.attendance_id = self._attendance.create(record)
        logger.info("Employee %s clocked in at %s (late=%s)", employee_id, now.isoformat(), record.is_late_arrival)
        return record

    def break_in(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        record = self._today_record(employee_id, now)

        if record.clock_out is not None:
            raise NoOpenSession("Already clocked out for today")

        if self._reap_orphan_breaks(record, now):
            record.refresh_status()
            self._attendance.save(record)

        if record.has_active_break:
            raise AlreadyOnBreak("Already on break. Please end your current break first.")

        used = record.completed_break_count
        if used >= self._max_breaks:
            raise BreakLimitExceeded(
                f"Maximum {self._max_breaks} breaks allowed per day",
                details={"breaksUsed": used, "maxBreaks": self._max_breaks},
            )

        record.breaks.append(BreakEntry(break_in=now))
        record.refresh_status()
        self._attendance.save(record)
        return record

    def break_out(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        record = self._today_record(employee_id, now)

        active = record.active_breaks
        if not active:
            raise NoActiveBreak("No active break found")

        record.close_break(active[-1], now)
        record.refresh_status()
        self._attendance.save(record)
        return record

    def force_end_break(self, employee_id: int, *, now: datetime | None = None) -> AttendanceRecord:
        """Close every open break for today in one go."""
        now = now or now_local()
        record = self._today_record(employee_id, now)

        active = record.active_breaks
        if not active:
            raise NoActiveBreak("No active breaks to end")

        for entry in active:
            record.close_break(entry, now)
        record.refresh_status()
        self._attendance.save(record)
        logger.info("Force-ended %d break(s) for employee %s", len(active), employee_id)
        return record

    def clock_out(
        self,
        employee_id: int,
        *,
        now: datetime | None = None,
        context: CaptureContext | None = None,
    ) -> AttendanceRecord:
        now = now or now_local()

        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if not record or record.clock_out is not None:
            raise NoOpenSession("Already clocked out or no clock-in record")

        if record.has_active_break:
            raise BreakStillActive("Please end your break before clocking out")

        record.clock_out = now
        record.clock_out_context = context or CaptureContext()
        record.gross_hours = hours_between(record.clock_in, now)
        record.effective_hours = record.gross_hours - int(record.total_break_duration or 0) / MS_PER_HOUR
        record.overtime_hours = round(max(0.0, record.effective_hours - STANDARD_WORK_HOURS), 2)

        strategy = self._factory.for_clock_out(now=now)
        decision = strategy.decide_clock_out(now=now, office_end=self._factory.office_end(now))
        record.is_early_departure = decision.is_early_departure

        record.refresh_status()
        self._attendance.save(record)
        logger.info(
            "Employee %s clocked out at %s (effective=%.2fh status=%s)",
            employee_id,
            now.isoformat(),
            record.effective_hours,
            record.status.value,
        )
        return record

    def get_today_record(self, employee_id: int, today: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, today)

    def get_logs(
        self,
        employee_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> AttendanceLogs:
        if start_date is None or end_date is None:
            start_date = end_date = None
        records = list(self._attendance.list_for_employee(employee_id, start_date=start_date, end_date=end_date))

        daily: dict[str, DailyStats] = {}
        late = 0
        early = 0
        for r in records:
            key = r.work_date.isoformat()
            stats = daily.setdefault(key, DailyStats())
            stats.effective_hours += r.effective_hours or 0
            stats.gross_hours += r.gross_hours or 0
            stats.overtime_hours += r.overtime_hours or 0
            stats.is_late_arrival = r.is_late_arrival
            stats.is_early_departure = r.is_early_departure
            stats.status = r.status
            late += int(r.is_late_arrival)
            early += int(r.is_early_departure)

        total_days = len(daily)
        total_effective = sum(d.effective_hours for d in daily.values())
        avg_effective = 0.0
        compliance = 0.0
        if total_days > 0:
            avg_effective = round(total_effective / total_days, 2)
            compliance = round(1 - (late + early) / total_days, 2)

        summary = AttendanceSummary(
            total_days=total_days,
            total_late_arrivals=late,
            total_early_departures=early,
            total_overtime=sum(d.overtime_hours for d in daily.values()),
            total_effective_hours=total_effective,
            avg_effective_hours=avg_effective,
            compliance_rate=compliance,
        )
        return AttendanceLogs(sessions=records, daily_stats=daily, summary=summary)

    def get_employee_attendance_details(
        self,
        employee_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        today: date | None = None,
    ) -> dict[str, Any]:
        today = today or now_local().date()
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        records = list(self._attendance.list_for_employee(employee_id, start_date=start_date, end_date=end_date))

        if start_date is not None:
            period_start = start_date
        elif records:
            period_start = min(r.work_date for r in records)
        else:
            period_start = today
        period_end = end_date or today
        working_days = calculate_working_days(period_start, period_end)

        present = sum(1 for r in records if r.status in PRESENT_STATUSES)
        half = sum(1 for r in records if r.status == AttendanceStatus.HALF_DAY)
        total_effective = sum(r.effective_hours or 0 for r in records)
        total_overtime = sum(r.overtime_hours or 0 for r in records)

        return {
            "employee": employee.summary(),
            "period": {"start": period_start, "end": period_end, "workingDays": working_days},
            "statistics": {
                "presentDays": present,
                "halfDays": half,
                "absentDays": working_days - present - half,
                "attendanceRate": round((present + half * 0.5) / working_days, 2) if working_days > 0 else 0,
                "totalEffectiveHours": round(total_effective, 2),
                "totalOvertime": round(total_overtime, 2),
                "avgDailyHours": round(total_effective / present, 2) if present > 0 else 0,
                "lateArrivals": sum(1 for r in records if r.is_late_arrival),
                "earlyDepartures": sum(1 for r in records if r.is_early_departure),
            },
            "recentRecords": records[:RECENT_RECORDS_LIMIT],
        }

    def get_today_status(self, *, now: datetime | None = None) -> dict[str, Any]:
        """Admin overview: every active employee with today's state."""
        now = now or now_local()
        employees = {e.employee_id: e for e in self._employees.list_active()}
        records = self._attendance.list_for_date(now.date())

        present: list[dict[str, Any]] = []
        invalid: list[dict[str, Any]] = []
        seen: set[int] = set()

        for r in records:
            employee = employees.get(r.employee_id)
            if not employee:
                invalid.append(
                    {
                        "employee": None,
                        "attendanceId": r.attendance_id,
                        "status": "invalid_reference",
                        "clockIn": r.clock_in,
                        "clockOut": r.clock_out,
                        "error": "Associated employee not found",
                    }
                )
                continue

            active = r.active_breaks
            current_break = None
            if active:
                current_break = int((now - active[-1].break_in).total_seconds() // 60)

            seen.add(r.employee_id)
            present.append(
                {
                    "employee": employee.summary(),
                    "status": r.status,
                    "clockIn": r.clock_in,
                    "clockOut": r.clock_out,
                    "isLateArrival": r.is_late_arrival,
                    "isEarlyDeparture": r.is_early_departure,
                    "effectiveHours": r.effective_hours,
                    "workLocation": r.work_location,
                    "isOnBreak": bool(active),
                    "currentBreakDuration": current_break,
                }
            )

        absent = [
            {
                "employee": e.summary(),
                "status": AttendanceStatus.ABSENT,
                "clockIn": None,
                "clockOut": None,
                "isLateArrival": False,
                "isEarlyDeparture": False,
                "effectiveHours": 0,
                "workLocation": None,
                "isOnBreak": False,
                "currentBreakDuration": None,
            }
            for e in employees.values()
            if e.employee_id not in seen
        ]

        return {
            "data": present + absent + invalid,
            "counts": {
                "present": len(present),
                "absent": len(absent),
                "onBreak": sum(1 for p in present if p["isOnBreak"]),
                "invalidRecords": len(invalid),
            },
        }

    def _today_record(self, employee_id: int, now: datetime) -> AttendanceRecord:
        record = self._attendance.get_for_employee_and_date(employee_id, now.date())
        if not record:
            raise NoClockInRecord("Clock-in required")
        return record

    def _reap_orphan_breaks(self, record: AttendanceRecord, now: datetime) -> int:
        reaped = 0
        for entry in record.active_breaks:
            if now - entry.break_in > self._orphan_after:
                duration = record.close_break(entry, now)
                reaped += 1
                logger.warning(
                    "Auto-closed orphaned break for employee %s (duration: %.2f hours)",
                    record.employee_id,
                    duration / MS_PER_HOUR,
                )
        return reaped
