"""Unit tests for due-date calendar arithmetic"""

import pytest
from datetime import date
from dental_ledger.domain.exceptions import InvalidDueDay
from dental_ledger.utils.date_utils import (
    add_months,
    anniversary_due_date,
    fixed_day_due_date,
    monthly_due_dates,
    validate_due_day,
)


def test_add_months_clamps_to_last_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 3, 31), 1) == date(2024, 4, 30)


def test_add_months_crosses_year():
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


def test_anniversary_due_date_is_computed_from_first_date():
    """No drift: March keeps day 31 even though February was clamped"""
    first = date(2024, 1, 31)

    assert anniversary_due_date(first, 1) == first
    assert anniversary_due_date(first, 2) == date(2024, 2, 29)
    assert anniversary_due_date(first, 3) == date(2024, 3, 31)


def test_fixed_day_due_date_starts_month_after_start():
    assert fixed_day_due_date(date(2024, 1, 15), 1, 10) == date(2024, 2, 10)
    assert fixed_day_due_date(date(2024, 1, 5), 1, 10) == date(2024, 2, 10)
    assert fixed_day_due_date(date(2024, 1, 15), 24, 10) == date(2026, 1, 10)


def test_monthly_due_dates():
    assert monthly_due_dates(date(2024, 5, 10), 3) == [
        date(2024, 5, 10),
        date(2024, 6, 10),
        date(2024, 7, 10),
    ]


@pytest.mark.parametrize("due_day", [1, 10, 28])
def test_validate_due_day_accepts_range(due_day):
    assert validate_due_day(due_day) == due_day


@pytest.mark.parametrize("due_day", [0, 29, 30, 31, -1])
def test_validate_due_day_rejects_outside_range(due_day):
    with pytest.raises(InvalidDueDay):
        validate_due_day(due_day)
