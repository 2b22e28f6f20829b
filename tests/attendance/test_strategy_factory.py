from datetime import datetime

from src.hr_payroll.hr_payroll.attendance.factory import AttendanceStrategyFactory
from src.hr_payroll.hr_payroll.attendance.strategies.early_strategy import EarlyDepartureStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.late_strategy import LateArrivalStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.normal_strategy import NormalStrategy


def test_factory_clock_in_at_office_start_is_normal():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 9, 0, 0)

    strategy = factory.for_clock_in(now=now)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_clock_in(now=now, office_start=factory.office_start(now)).is_late_arrival is False


def test_factory_clock_in_one_second_late():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 9, 0, 1)

    strategy = factory.for_clock_in(now=now)

    assert isinstance(strategy, LateArrivalStrategy)
    assert strategy.decide_clock_in(now=now, office_start=factory.office_start(now)).is_late_arrival is True


def test_factory_clock_out_before_closing_is_early():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 16, 59)

    strategy = factory.for_clock_out(now=now)

    assert isinstance(strategy, EarlyDepartureStrategy)
    assert strategy.decide_clock_out(now=now, office_end=factory.office_end(now)).is_early_departure is True


def test_factory_clock_out_at_closing_is_normal():
    factory = AttendanceStrategyFactory()
    now = datetime(2025, 1, 1, 17, 0)

    assert isinstance(factory.for_clock_out(now=now), NormalStrategy)


def test_factory_uses_configured_office_hours():
    factory = AttendanceStrategyFactory(office_start_hour=8, office_end_hour=20)
    now = datetime(2025, 1, 1, 8, 30)

    assert factory.office_start(now) == datetime(2025, 1, 1, 8, 0)
    assert factory.office_end(now) == datetime(2025, 1, 1, 20, 0)
    assert isinstance(factory.for_clock_in(now=now), LateArrivalStrategy)
    assert isinstance(factory.for_clock_out(now=datetime(2025, 1, 1, 19, 0)), EarlyDepartureStrategy)


def test_single_purpose_strategies_stay_neutral_on_the_other_punch():
    morning = datetime(2025, 1, 1, 8, 0)
    evening = datetime(2025, 1, 1, 18, 0)

    early = EarlyDepartureStrategy().decide_clock_in(now=evening, office_start=morning)
    late = LateArrivalStrategy().decide_clock_out(now=morning, office_end=evening)

    assert (early.is_late_arrival, early.is_early_departure) == (False, False)
    assert (late.is_late_arrival, late.is_early_departure) == (False, False)
