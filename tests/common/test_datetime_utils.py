from datetime import date, datetime

import pytest

from src.hr_payroll.hr_payroll.common.datetime_utils import (
    calculate_working_days,
    hours_between,
    month_name_of,
    month_range,
    parse_iso_date,
)
from src.hr_payroll.hr_payroll.common.validators import amounts_from, require_month_year
from src.hr_payroll.hr_payroll.core.exceptions import ValidationError
from src.hr_payroll.hr_payroll.payroll.model import EARNING_FIELDS


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (date(2024, 3, 1), date(2024, 3, 31), 21),
        (date(2024, 1, 1), date(2024, 1, 31), 23),
        (date(2024, 3, 2), date(2024, 3, 3), 0),
        (date(2024, 3, 4), date(2024, 3, 4), 1),
        (date(2024, 3, 8), date(2024, 3, 4), 0),
    ],
)
def test_calculate_working_days(start, end, expected):
    assert calculate_working_days(start, end) == expected


def test_working_days_accept_datetimes():
    assert calculate_working_days(datetime(2024, 3, 4, 18, 0), datetime(2024, 3, 8, 1, 0)) == 5


def test_month_range_handles_leap_february():
    assert month_range("February", 2024) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_range("february", 2023) == (date(2023, 2, 1), date(2023, 2, 28))


def test_month_range_rejects_unknown_name():
    with pytest.raises(ValidationError):
        month_range("Febuary", 2024)


def test_small_helpers():
    assert month_name_of(date(2024, 12, 5)) == "December"
    assert parse_iso_date("2024-03-04") == date(2024, 3, 4)
    assert hours_between(datetime(2024, 3, 4, 9, 15), datetime(2024, 3, 4, 17, 30)) == 8.25


def test_require_month_year_normalizes_month():
    assert require_month_year("march", "2024") == ("March", 2024)

    with pytest.raises(ValidationError, match="month and year are required"):
        require_month_year(None, 2024)
    with pytest.raises(ValidationError):
        require_month_year("March", "twenty")


def test_amounts_from_maps_camel_case_and_rejects_text():
    assert amounts_from({"basicWage": "1000", "houseRentAllowance": 400, "bogus": 1}, EARNING_FIELDS) == {
        "basic_wage": 1000.0,
        "house_rent_allowance": 400.0,
    }

    with pytest.raises(ValidationError):
        amounts_from({"basicWage": "lots"}, EARNING_FIELDS)
