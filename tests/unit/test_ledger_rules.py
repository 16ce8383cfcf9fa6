"""Unit tests for rateio splits, budget quotes, overdue status and period summaries"""

import pytest
import uuid
from datetime import date
from dental_ledger.domain.budgets import apply_cash_discount, quote_budget
from dental_ledger.domain.exceptions import InvalidAmount, InvalidCount, InvalidSplit
from dental_ledger.domain.models import Installment, InstallmentStatus, RateioEntry
from dental_ledger.domain.overdue import display_status, is_overdue
from dental_ledger.domain.rateio import build_rateio
from dental_ledger.domain.summary import summarize

TODAY = date(2024, 6, 15)


def test_build_rateio_defaults_to_single_entry():
    entries = build_rateio(15000, [])

    assert len(entries) == 1
    assert entries[0].amount_cents == 15000
    assert entries[0].category_id is None
    assert entries[0].cost_center_id is None


def test_build_rateio_accepts_exact_split():
    category_id = uuid.uuid4()
    entries = [
        RateioEntry(amount_cents=10000, category_id=category_id),
        RateioEntry(amount_cents=5000, cost_center_id=uuid.uuid4()),
    ]

    assert build_rateio(15000, entries) == entries


def test_build_rateio_rejects_sum_mismatch():
    """Off by a single cent is still a mismatch"""
    with pytest.raises(InvalidSplit):
        build_rateio(15000, [RateioEntry(amount_cents=10000), RateioEntry(amount_cents=4999)])


def test_build_rateio_rejects_non_positive_entries():
    with pytest.raises(InvalidAmount):
        build_rateio(10000, [RateioEntry(amount_cents=10000), RateioEntry(amount_cents=0)])


def test_build_rateio_rejects_non_positive_total():
    with pytest.raises(InvalidAmount):
        build_rateio(0, [])


def test_quote_budget_monthly():
    """Convencional model: R$119.90 x 36, 5% off upfront"""
    quote = quote_budget(11990, 36, 0.05)

    assert quote.total_cents == 431640
    assert quote.cash_value_cents == 410058
    assert quote.monthly_value_cents == 11990
    assert quote.schedule == [11990] * 36


def test_quote_budget_lump_sum_uses_split_policy():
    quote = quote_budget(0, 3, 0.05, total_cents=10000)

    assert quote.schedule == [3334, 3333, 3333]
    assert quote.total_cents == 10000
    assert quote.cash_value_cents == 9500


def test_quote_budget_single_payment():
    quote = quote_budget(0, 1, 0.0, total_cents=25000)

    assert quote.schedule == [25000]
    assert quote.cash_value_cents == 25000


def test_quote_budget_requires_a_price():
    with pytest.raises(InvalidAmount):
        quote_budget(0, 36, 0.05)


def test_quote_budget_rejects_bad_inputs():
    with pytest.raises(InvalidCount):
        quote_budget(11990, 0, 0.05)
    with pytest.raises(InvalidAmount):
        quote_budget(11990, 36, 1.0)


def test_apply_cash_discount_rounds_half_up():
    assert apply_cash_discount(1999, 0.05) == 1899  # 1899.05
    assert apply_cash_discount(10, 0.05) == 10  # 9.5


def test_overdue_is_derived_from_open_and_due_date():
    assert is_overdue(InstallmentStatus.OPEN, date(2024, 6, 14), TODAY)
    assert not is_overdue(InstallmentStatus.OPEN, TODAY, TODAY)
    assert not is_overdue(InstallmentStatus.PAID, date(2024, 1, 1), TODAY)
    assert not is_overdue(InstallmentStatus.RENEGOTIATED, date(2024, 1, 1), TODAY)


def test_display_status():
    assert display_status(InstallmentStatus.OPEN, date(2024, 6, 1), TODAY) == "overdue"
    assert display_status(InstallmentStatus.OPEN, date(2024, 7, 1), TODAY) == "open"
    assert display_status(InstallmentStatus.PAID, date(2024, 6, 1), TODAY) == "paid"


def _item(due_date, amount_cents, paid_amount_cents=0, status=InstallmentStatus.OPEN):
    return Installment(
        sequence_number=1,
        total_in_plan=1,
        due_date=due_date,
        amount_cents=amount_cents,
        paid_amount_cents=paid_amount_cents,
        status=status,
    )


def test_summarize_period():
    receivables = [
        _item(date(2024, 7, 10), 10000),
        _item(date(2024, 6, 10), 10000, paid_amount_cents=4000),
        _item(date(2024, 6, 5), 5000, paid_amount_cents=5000, status=InstallmentStatus.PAID),
        _item(date(2024, 6, 1), 7000, status=InstallmentStatus.RENEGOTIATED),
    ]
    payables = [_item(date(2024, 6, 1), 3000)]

    summary = summarize(
        [("IN", 10000), ("OUT", 3000), ("IN", 500)],
        receivables,
        payables,
        TODAY,
    )

    assert summary.income_cents == 10500
    assert summary.expense_cents == 3000
    assert summary.balance_cents == 7500
    assert summary.receivables.open_cents == 10000
    assert summary.receivables.overdue_cents == 6000
    assert summary.receivables.paid_cents == 9000
    assert summary.payables.overdue_cents == 3000
    assert summary.payables.open_cents == 0
