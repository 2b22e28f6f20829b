from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from src.hr_payroll.hr_payroll.attendance.model import BreakEntry, CaptureContext
from src.hr_payroll.hr_payroll.attendance.service import AttendanceService
from src.hr_payroll.hr_payroll.core.enums import AttendanceStatus, WorkLocation
from src.hr_payroll.hr_payroll.core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnBreak,
    BreakLimitExceeded,
    BreakStillActive,
    NoActiveBreak,
    NoClockInRecord,
    NoOpenSession,
)

DAY = date(2024, 3, 4)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(DAY.year, DAY.month, DAY.day, hour, minute)


@pytest.fixture
def service(attendance_repo, employees) -> AttendanceService:
    return AttendanceService(attendance_repo, employees)


def test_clock_in_after_office_start_is_late(service, attendance_repo):
    ctx = CaptureContext(location={"latitude": 12.97, "longitude": 77.59})
    record = service.clock_in(1, now=at(9, 15), context=ctx, work_location=WorkLocation.HOME)

    assert record.attendance_id == 1
    assert record.is_late_arrival is True
    assert record.is_on_time is False
    assert record.status == AttendanceStatus.PRESENT
    assert record.work_location == WorkLocation.HOME
    assert attendance_repo.get_for_employee_and_date(1, DAY).clock_in_context.location["latitude"] == 12.97


def test_clock_in_exactly_at_office_start_is_on_time(service):
    record = service.clock_in(1, now=at(9, 0))
    assert record.is_late_arrival is False


def test_second_clock_in_same_day_is_rejected(service, attendance_repo):
    service.clock_in(1, now=at(8, 55))

    with pytest.raises(AlreadyClockedIn) as exc:
        service.clock_in(1, now=at(10, 0))

    assert exc.value.details["session"].employee_id == 1
    assert len(attendance_repo.records) == 1


def test_clock_in_again_after_clock_out_is_still_rejected(service):
    service.clock_in(1, now=at(9, 0))
    service.clock_out(1, now=at(17, 0))

    with pytest.raises(AlreadyClockedIn):
        service.clock_in(1, now=at(18, 0))


def test_full_day_with_one_break_computes_hours(service):
    service.clock_in(1, now=at(9, 15))
    service.break_in(1, now=at(12, 0))
    service.break_out(1, now=at(12, 20))
    record = service.clock_out(1, now=at(17, 30))

    assert record.total_break_duration == 1_200_000
    assert record.gross_hours == pytest.approx(8.25)
    assert record.effective_hours == pytest.approx(8.25 - 20 / 60)
    assert record.overtime_hours == 0
    assert record.is_late_arrival is True
    assert record.is_early_departure is False
    assert record.status == AttendanceStatus.LOGGED_OUT


def test_overtime_is_effective_hours_beyond_eight(service):
    service.clock_in(1, now=at(8, 0))
    record = service.clock_out(1, now=at(18, 30))

    assert record.effective_hours == pytest.approx(10.5)
    assert record.overtime_hours == pytest.approx(2.5)
    assert record.effective_hours == pytest.approx(record.gross_hours - record.total_break_duration / 3_600_000)


def test_short_day_is_half_day_and_early_departure(service):
    service.clock_in(1, now=at(9, 0))
    record = service.clock_out(1, now=at(12, 30))

    assert record.status == AttendanceStatus.HALF_DAY
    assert record.is_early_departure is True


def test_break_in_without_clock_in(service):
    with pytest.raises(NoClockInRecord):
        service.break_in(1, now=at(10, 0))


def test_break_in_marks_on_break_and_break_out_returns_to_present(service):
    service.clock_in(1, now=at(9, 0))

    record = service.break_in(1, now=at(10, 0))
    assert record.status == AttendanceStatus.ON_BREAK
    assert record.has_active_break

    record = service.break_out(1, now=at(10, 10))
    assert record.status == AttendanceStatus.PRESENT
    assert record.total_break_duration == 10 * 60 * 1000


def test_second_break_in_while_on_break_is_rejected(service):
    service.clock_in(1, now=at(9, 0))
    service.break_in(1, now=at(10, 0))

    with pytest.raises(AlreadyOnBreak):
        service.break_in(1, now=at(10, 5))


def test_break_exactly_at_orphan_threshold_is_not_reaped(service):
    service.clock_in(1, now=at(9, 0))
    service.break_in(1, now=at(10, 0))

    with pytest.raises(AlreadyOnBreak):
        service.break_in(1, now=at(10, 30))


def test_orphan_break_is_closed_before_new_break(service, caplog):
    service.clock_in(1, now=at(9, 0))
    service.break_in(1, now=at(10, 0))

    record = service.break_in(1, now=at(10, 35))

    assert record.breaks[0].break_out == at(10, 35)
    assert record.total_break_duration == 35 * 60 * 1000
    assert len(record.active_breaks) == 1
    assert record.active_breaks[0].break_in == at(10, 35)
    assert record.status == AttendanceStatus.ON_BREAK
    assert "Auto-closed orphaned break" in caplog.text


def test_reaped_break_is_saved_even_when_new_break_is_refused(service, attendance_repo):
    service.clock_in(1, now=at(9, 0))
    for start in (10, 11, 12):
        service.break_in(1, now=at(start, 0))
        service.break_out(1, now=at(start, 5))
    service.break_in(1, now=at(13, 0))

    with pytest.raises(BreakLimitExceeded):
        service.break_in(1, now=at(14, 0))

    stored = attendance_repo.get_for_employee_and_date(1, DAY)
    assert not stored.has_active_break
    assert stored.status == AttendanceStatus.PRESENT
    assert stored.total_break_duration == (3 * 5 + 60) * 60 * 1000


def test_fifth_break_is_refused_with_usage_details(service):
    service.clock_in(1, now=at(9, 0))
    for start in (10, 11, 12, 13):
        service.break_in(1, now=at(start, 0))
        service.break_out(1, now=at(start, 10))

    with pytest.raises(BreakLimitExceeded) as exc:
        service.break_in(1, now=at(15, 0))

    assert exc.value.details == {"breaksUsed": 4, "maxBreaks": 4}
    assert len(service.get_today_record(1, DAY).breaks) == 4


def test_break_out_without_active_break(service):
    service.clock_in(1, now=at(9, 0))

    with pytest.raises(NoActiveBreak):
        service.break_out(1, now=at(10, 0))


def test_force_end_break_closes_every_open_break(service, attendance_repo):
    record = service.clock_in(1, now=at(9, 0))
    service.break_in(1, now=at(10, 0))
    # Simulate a stray second open break left by a concurrent request.
    record.breaks.append(BreakEntry(break_in=at(10, 1)))

    record = service.force_end_break(1, now=at(10, 11))

    assert not record.has_active_break
    assert record.total_break_duration == (11 + 10) * 60 * 1000
    assert record.status == AttendanceStatus.PRESENT


def test_force_end_break_with_nothing_open(service):
    service.clock_in(1, now=at(9, 0))
    with pytest.raises(NoActiveBreak):
        service.force_end_break(1, now=at(10, 0))


def test_clock_out_requires_open_session(service):
    with pytest.raises(NoOpenSession):
        service.clock_out(1, now=at(17, 0))

    service.clock_in(1, now=at(9, 0))
    service.clock_out(1, now=at(17, 0))

    with pytest.raises(NoOpenSession):
        service.clock_out(1, now=at(17, 5))


def test_clock_out_during_break_is_rejected(service):
    service.clock_in(1, now=at(9, 0))
    service.break_in(1, now=at(16, 50))

    with pytest.raises(BreakStillActive):
        service.clock_out(1, now=at(17, 0))


def test_break_in_after_clock_out_is_rejected(service):
    service.clock_in(1, now=at(9, 0))
    service.clock_out(1, now=at(17, 0))

    with pytest.raises(NoOpenSession):
        service.break_in(1, now=at(17, 30))


def test_office_hours_follow_configured_factory(attendance_repo, employees):
    from src.hr_payroll.hr_payroll.attendance.factory import AttendanceStrategyFactory

    service = AttendanceService(
        attendance_repo,
        employees,
        strategy_factory=AttendanceStrategyFactory(office_start_hour=10, office_end_hour=18),
        max_breaks=1,
        orphan_break_minutes=5,
    )
    record = service.clock_in(1, now=at(9, 45))
    assert record.is_late_arrival is False

    service.break_in(1, now=at(11, 0))
    # Reaped after 5 minutes, which uses up the single allowed break.
    with pytest.raises(BreakLimitExceeded):
        service.break_in(1, now=at(11, 6))
    assert service.get_today_record(1, DAY).completed_break_count == 1

    record = service.clock_out(1, now=at(17, 30))
    assert record.is_early_departure is True


def test_next_day_starts_fresh(service):
    service.clock_in(1, now=at(9, 0))
    service.clock_out(1, now=at(17, 0))

    record = service.clock_in(1, now=at(9, 0) + timedelta(days=1))
    assert record.work_date == DAY + timedelta(days=1)
    assert record.attendance_id == 2
