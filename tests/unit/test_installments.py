"""Unit tests for installment plan generation"""

import pytest
from datetime import date
from dateutil.relativedelta import relativedelta
from dental_ledger.domain.exceptions import InvalidAmount, InvalidCount, InvalidDueDay
from dental_ledger.domain.installments import (
    generate_installment_plan,
    generate_ortho_schedule,
    split_amount,
)
from dental_ledger.domain.models import InstallmentStatus


def test_split_amount_first_installment_absorbs_remainder():
    """100.00 / 3 = 33.333... → first takes the extra cent"""
    assert split_amount(10000, 3) == [3334, 3333, 3333]


def test_split_amount_small_total():
    """10.00 / 3: base 3.33, 3.33 * 3 = 9.99, remainder 0.01"""
    assert split_amount(1000, 3) == [334, 333, 333]


def test_split_amount_negative_remainder():
    """2.00 / 3 rounds base up to 0.67; first installment gives back the cent"""
    amounts = split_amount(200, 3)

    assert amounts == [66, 67, 67]
    assert sum(amounts) == 200


def test_split_amount_equal_split():
    assert split_amount(40000, 4) == [10000, 10000, 10000, 10000]


@pytest.mark.parametrize("total_cents", [999, 10001, 123457, 5000000])
def test_split_amount_sum_is_exact(total_cents):
    """Sum equals the total to the cent for every plan length"""
    for count in range(2, 25):
        amounts = split_amount(total_cents, count)

        assert len(amounts) == count
        assert sum(amounts) == total_cents
        assert all(amount > 0 for amount in amounts)
        assert all(amount == amounts[1] for amount in amounts[1:])


@pytest.mark.parametrize("total_cents", [0, -500])
def test_split_amount_rejects_non_positive_total(total_cents):
    with pytest.raises(InvalidAmount):
        split_amount(total_cents, 3)


@pytest.mark.parametrize("count", [1, 0, -2])
def test_split_amount_rejects_short_plans(count):
    with pytest.raises(InvalidCount):
        split_amount(10000, count)


def test_split_amount_rejects_total_too_small_for_positive_installments():
    """0.15 over 10: base rounds to 0.02, first would be -0.03"""
    with pytest.raises(InvalidAmount):
        split_amount(15, 10)


def test_split_amount_rejects_long_plan_that_zeroes_first_installment():
    """49.98 over 120: base rounds up to 0.42, leaving 0.00 for the first installment"""
    with pytest.raises(InvalidAmount):
        split_amount(4998, 120)


def test_split_amount_long_plan_without_remainder():
    assert split_amount(6000, 120) == [50] * 120


def test_generate_installment_plan_fields():
    installments = generate_installment_plan(10000, 3, date(2024, 1, 15))

    assert [i.amount_cents for i in installments] == [3334, 3333, 3333]
    assert [i.due_date for i in installments] == [
        date(2024, 1, 15),
        date(2024, 2, 15),
        date(2024, 3, 15),
    ]
    assert [i.sequence_number for i in installments] == [1, 2, 3]
    assert all(i.total_in_plan == 3 for i in installments)
    assert all(i.status == InstallmentStatus.OPEN for i in installments)
    assert all(i.paid_amount_cents == 0 for i in installments)
    assert installments[0].description == "Parcela 1/3"
    assert installments[2].description == "Parcela 3/3"


def test_generate_installment_plan_due_dates_one_month_apart():
    first = date(2024, 3, 20)
    installments = generate_installment_plan(120000, 12, first)

    for previous, current in zip(installments, installments[1:]):
        assert current.due_date > previous.due_date
        assert current.due_date == previous.due_date + relativedelta(months=1)


def test_generate_installment_plan_clamps_to_month_end():
    """Day 31 is kept in long months and clamped in short ones"""
    installments = generate_installment_plan(40000, 4, date(2024, 1, 31))

    assert [i.due_date for i in installments] == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]


def test_generate_installment_plan_custom_description_and_prefix():
    installments = generate_installment_plan(
        5000,
        2,
        date(2024, 5, 1),
        description="Implante",
        description_prefix="Renegociação - ",
    )

    assert [i.description for i in installments] == ["Renegociação - Implante"] * 2


def test_generate_ortho_schedule_end_to_end():
    """24-month contract starting 2024-01-15, R$200/month, due on the 10th"""
    schedule = generate_ortho_schedule(20000, 24, date(2024, 1, 15), 10)

    assert len(schedule) == 24
    assert schedule[0].due_date == date(2024, 2, 10)
    assert schedule[-1].due_date == date(2026, 1, 10)
    assert all(i.amount_cents == 20000 for i in schedule)
    assert sum(i.amount_cents for i in schedule) == 480000
    assert schedule[0].description == "Ortodontia - Mês 1/24"
    assert schedule[-1].description == "Ortodontia - Mês 24/24"


def test_generate_ortho_schedule_crosses_year():
    schedule = generate_ortho_schedule(15000, 3, date(2024, 11, 30), 28)

    assert [i.due_date for i in schedule] == [
        date(2024, 12, 28),
        date(2025, 1, 28),
        date(2025, 2, 28),
    ]


@pytest.mark.parametrize("due_day", [0, 29, 31])
def test_generate_ortho_schedule_rejects_due_day(due_day):
    with pytest.raises(InvalidDueDay):
        generate_ortho_schedule(20000, 24, date(2024, 1, 15), due_day)


def test_generate_ortho_schedule_rejects_non_positive_fee():
    with pytest.raises(InvalidAmount):
        generate_ortho_schedule(0, 24, date(2024, 1, 15), 10)


def test_generate_ortho_schedule_rejects_zero_months():
    with pytest.raises(InvalidCount):
        generate_ortho_schedule(20000, 0, date(2024, 1, 15), 10)
