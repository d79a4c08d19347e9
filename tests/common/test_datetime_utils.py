from datetime import date

import pytest

from src.qr_attendance.qr_attendance.common.datetime_utils import (
    count_working_days,
    month_bounds,
    parse_optional_date,
)
from src.qr_attendance.qr_attendance.common.numbers import percentage, round_half_up
from src.qr_attendance.qr_attendance.core.exceptions import ValidationError


def test_month_bounds_handles_leap_february():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_month_bounds_rejects_bad_month():
    with pytest.raises(ValidationError):
        month_bounds(2024, 13)


def test_count_working_days_june_2024():
    assert count_working_days(date(2024, 6, 1), date(2024, 6, 30)) == 20


def test_parse_optional_date():
    assert parse_optional_date("") is None
    assert parse_optional_date(None) is None
    assert parse_optional_date("2024-06-10") == date(2024, 6, 10)
    with pytest.raises(ValidationError):
        parse_optional_date("10/06/2024")


def test_round_half_up():
    assert round_half_up(7.25, 1) == 7.3
    assert round_half_up(2.5) == 3


def test_percentage():
    assert percentage(1, 0) == 0
    assert percentage(1, 3) == 33
    assert percentage(2, 3) == 67
