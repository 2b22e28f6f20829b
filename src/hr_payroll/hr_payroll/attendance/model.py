from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import millis_between
from ..core.constants import HALF_DAY_THRESHOLD_HOURS
from ..core.enums import AttendanceStatus, WorkLocation


@dataclass
class BreakEntry:
    """One break inside a working day. Active while ``break_out`` is unset."""

    break_in: datetime
    break_out: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.break_in is not None and self.break_out is None

    def duration_ms(self) -> int:
        if self.break_out is None:
            return 0
        return millis_between(self.break_in, self.break_out)

    def to_dict(self) -> dict[str, Any]:
        return {"breakIn": self.break_in, "breakOut": self.break_out}


@dataclass(frozen=True)
class CaptureContext:
    """Image/geolocation/network metadata captured at clock-in or clock-out.

    Stored verbatim; nothing here is validated.
    """

    image: dict[str, Any] = field(default_factory=dict)
    location: dict[str, Any] = field(default_factory=dict)
    network: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"image": dict(self.image), "location": dict(self.location), "network": dict(self.network)}

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "CaptureContext":
        data = data or {}
        return cls(
            image=dict(data.get("image") or {}),
            location=dict(data.get("location") or {}),
            network=dict(data.get("network") or {}),
        )


def project_status(record: "AttendanceRecord") -> AttendanceStatus:
    """Derive the status of a record from its clock-out and break list."""
    if record.clock_out is not None:
        if record.effective_hours < HALF_DAY_THRESHOLD_HOURS:
            return AttendanceStatus.HALF_DAY
        return AttendanceStatus.LOGGED_OUT
    if record.has_active_break:
        return AttendanceStatus.ON_BREAK
    return AttendanceStatus.PRESENT


@dataclass
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    attendance_id: Optional[int]
    employee_id: int
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime] = None
    breaks: list[BreakEntry] = field(default_factory=list)
    total_break_duration: int = 0
    status: AttendanceStatus = AttendanceStatus.PRESENT
    is_late_arrival: bool = False
    is_early_departure: bool = False
    gross_hours: float = 0.0
    effective_hours: float = 0.0
    overtime_hours: float = 0.0
    work_location: WorkLocation = WorkLocation.OFFICE
    clock_in_context: CaptureContext = field(default_factory=CaptureContext)
    clock_out_context: Optional[CaptureContext] = None

    @property
    def is_on_time(self) -> bool:
        return not self.is_late_arrival

    @property
    def active_breaks(self) -> list[BreakEntry]:
        return [b for b in self.breaks if b.is_active]

    @property
    def has_active_break(self) -> bool:
        return any(b.is_active for b in self.breaks)

    @property
    def completed_break_count(self) -> int:
        return sum(1 for b in self.breaks if b.break_in is not None and b.break_out is not None)

    def close_break(self, entry: BreakEntry, now: datetime) -> int:
        """Close ``entry`` at ``now`` and accumulate its duration (ms)."""
        entry.break_out = now
        duration = entry.duration_ms()
        self.total_break_duration = int(self.total_break_duration or 0) + duration
        return duration

    def refresh_status(self) -> AttendanceStatus:
        self.status = project_status(self)
        return self.status

    def to_dict(self) -> dict[str, Any]:
        return {
            "attendanceId": self.attendance_id,
            "employeeId": self.employee_id,
            "date": self.work_date,
            "clockIn": self.clock_in,
            "clockOut": self.clock_out,
            "breaks": [b.to_dict() for b in self.breaks],
            "totalBreakDuration": self.total_break_duration,
            "status": self.status,
            "isLateArrival": self.is_late_arrival,
            "isOnTime": self.is_on_time,
            "isEarlyDeparture": self.is_early_departure,
            "grossHours": self.gross_hours,
            "effectiveHours": self.effective_hours,
            "overtimeHours": self.overtime_hours,
            "workLocation": self.work_location,
            "clockInContext": self.clock_in_context,
            "clockOutContext": self.clock_out_context,
        }


@dataclass
class DailyStats:
    effective_hours: float = 0.0
    gross_hours: float = 0.0
    overtime_hours: float = 0.0
    is_late_arrival: bool = False
    is_early_departure: bool = False
    status: AttendanceStatus = AttendanceStatus.PRESENT

    def to_dict(self) -> dict[str, Any]:
        return {
            "effectiveHours": self.effective_hours,
            "grossHours": self.gross_hours,
            "overtimeHours": self.overtime_hours,
            "isLateArrival": self.is_late_arrival,
            "isEarlyDeparture": self.is_early_departure,
            "status": self.status,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Roll-up over a range of days.

    ``compliance_rate`` is ``1 - (late + early) / total_days`` and is not
    clamped, so it goes negative when infractions outnumber tracked days.
    """

    total_days: int
    total_late_arrivals: int
    total_early_departures: int
    total_overtime: float
    total_effective_hours: float
    avg_effective_hours: float
    compliance_rate: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDays": self.total_days,
            "totalLateArrivals": self.total_late_arrivals,
            "totalEarlyDepartures": self.total_early_departures,
            "totalOvertime": self.total_overtime,
            "totalEffectiveHours": self.total_effective_hours,
            "avgEffectiveHours": self.avg_effective_hours,
            "complianceRate": self.compliance_rate,
        }


@dataclass(frozen=True)
class AttendanceLogs:
    sessions: list[AttendanceRecord]
    daily_stats: dict[str, DailyStats]
    summary: AttendanceSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessions": self.sessions,
            "dailyStats": self.daily_stats,
            "summary": self.summary,
        }
