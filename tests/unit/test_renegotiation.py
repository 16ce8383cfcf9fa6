"""Unit tests for renegotiation and settlement"""

import pytest
from datetime import date
from dental_ledger.domain.exceptions import (
    ConcurrentModification,
    InvalidAmount,
    InvalidCount,
    NothingToRenegotiate,
)
from dental_ledger.domain.installments import apply_payment, outstanding_balance, renegotiate
from dental_ledger.domain.models import Installment, InstallmentStatus


def make_installment(amount_cents=10000, paid_amount_cents=0, status=InstallmentStatus.OPEN):
    return Installment(
        sequence_number=1,
        total_in_plan=1,
        due_date=date(2024, 1, 10),
        amount_cents=amount_cents,
        paid_amount_cents=paid_amount_cents,
        status=status,
    )


def test_renegotiate_uses_remaining_balance(open_installments):
    """3 x 100.00 with 40.00 paid on one → 260.00 in 2 installments"""
    result = renegotiate(open_installments, 2, date(2024, 6, 1))

    assert result.outstanding_cents == 26000
    assert [i.amount_cents for i in result.replacement] == [13000, 13000]
    assert [i.due_date for i in result.replacement] == [date(2024, 6, 1), date(2024, 7, 1)]
    assert all(i.status == InstallmentStatus.RENEGOTIATED for i in open_installments)
    assert result.superseded == open_installments


def test_renegotiate_replacement_is_labelled(open_installments):
    result = renegotiate(open_installments, 3, date(2024, 6, 1))

    assert [i.amount_cents for i in result.replacement] == [8666, 8667, 8667]
    assert result.replacement[0].description == "Renegociação - Parcela 1/3"
    assert all(i.status == InstallmentStatus.OPEN for i in result.replacement)


def test_renegotiate_ignores_paid_installments(open_installments):
    open_installments[0].status = InstallmentStatus.PAID
    open_installments[0].paid_amount_cents = 10000

    result = renegotiate(open_installments, 2, date(2024, 6, 1))

    assert result.outstanding_cents == 6000 + 10000
    assert open_installments[0] not in result.superseded
    assert open_installments[0].status == InstallmentStatus.PAID
    assert open_installments[1].status == InstallmentStatus.RENEGOTIATED


def test_renegotiate_nothing_open():
    items = [
        make_installment(paid_amount_cents=10000, status=InstallmentStatus.PAID),
        make_installment(status=InstallmentStatus.RENEGOTIATED),
    ]

    with pytest.raises(NothingToRenegotiate):
        renegotiate(items, 2, date(2024, 6, 1))


def test_renegotiate_empty_selection():
    with pytest.raises(NothingToRenegotiate):
        renegotiate([], 2, date(2024, 6, 1))


def test_renegotiate_invalid_count_leaves_originals_open(open_installments):
    with pytest.raises(InvalidCount):
        renegotiate(open_installments, 1, date(2024, 6, 1))

    assert all(i.status == InstallmentStatus.OPEN for i in open_installments)


def test_outstanding_balance_skips_non_open(open_installments):
    open_installments[2].status = InstallmentStatus.RENEGOTIATED

    assert outstanding_balance(open_installments) == 10000 + 6000


def test_apply_payment_partial_keeps_open():
    installment = apply_payment(make_installment(), 4000)

    assert installment.status == InstallmentStatus.OPEN
    assert installment.paid_amount_cents == 4000
    assert installment.remaining_cents == 6000


def test_apply_payment_accumulates_to_paid():
    installment = make_installment()
    apply_payment(installment, 4000)
    apply_payment(installment, 6000)

    assert installment.status == InstallmentStatus.PAID
    assert installment.paid_amount_cents == 10000


def test_apply_payment_overpayment_is_paid():
    installment = apply_payment(make_installment(), 12000)

    assert installment.status == InstallmentStatus.PAID
    assert installment.remaining_cents == 0


@pytest.mark.parametrize("status", [InstallmentStatus.PAID, InstallmentStatus.RENEGOTIATED])
def test_apply_payment_rejects_terminal_states(status):
    with pytest.raises(ConcurrentModification):
        apply_payment(make_installment(status=status), 1000)


@pytest.mark.parametrize("amount_cents", [0, -100])
def test_apply_payment_rejects_non_positive(amount_cents):
    with pytest.raises(InvalidAmount):
        apply_payment(make_installment(), amount_cents)
