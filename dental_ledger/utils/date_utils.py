"""Calendar date arithmetic for installment due dates"""

from datetime import date
from typing import List

from dateutil.relativedelta import relativedelta

from dental_ledger.domain.exceptions import InvalidDueDay

MIN_DUE_DAY = 1
MAX_DUE_DAY = 28  # Every month has a 28th


def add_months(from_date: date, months: int) -> date:
    """
    Advance a date by whole calendar months.

    Day-of-month is clamped to the last day of the target month:
    2024-01-31 + 1 month = 2024-02-29.
    """
    return from_date + relativedelta(months=months)


def validate_due_day(due_day: int) -> int:
    if not MIN_DUE_DAY <= due_day <= MAX_DUE_DAY:
        raise InvalidDueDay(f"Due day must be between {MIN_DUE_DAY} and {MAX_DUE_DAY}, got {due_day}")
    return due_day


def anniversary_due_date(first_due_date: date, sequence_number: int) -> date:
    """Due date of installment n: first due date plus (n-1) months, computed from the first date"""
    return add_months(first_due_date, sequence_number - 1)


def fixed_day_due_date(start_date: date, sequence_number: int, due_day: int) -> date:
    """
    Due date of installment n of a recurring contract.

    Billing starts in the month after start_date; installment n falls n months
    after the start month with the day pinned to due_day.
    """
    validate_due_day(due_day)
    return add_months(start_date, sequence_number).replace(day=due_day)


def monthly_due_dates(first_due_date: date, count: int) -> List[date]:
    """Anniversary-mode due dates for a plan of `count` installments"""
    return [anniversary_due_date(first_due_date, n) for n in range(1, count + 1)]
