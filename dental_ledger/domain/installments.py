"""Installment plan generation, renegotiation and settlement"""

from datetime import date
from typing import Iterable, List, Optional

from dental_ledger.domain.exceptions import (
    ConcurrentModification,
    InvalidAmount,
    InvalidCount,
    NothingToRenegotiate,
)
from dental_ledger.domain.models import Installment, InstallmentStatus, RenegotiationResult
from dental_ledger.utils.date_utils import fixed_day_due_date, monthly_due_dates, validate_due_day

MIN_PLAN_INSTALLMENTS = 2
RENEGOTIATION_PREFIX = "Renegociação - "


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero, for non-negative operands"""
    return (2 * numerator + denominator) // (2 * denominator)


def split_amount(total_cents: int, count: int) -> List[int]:
    """
    Split a total into `count` installment amounts.

    Policy:
    - base = total / count rounded to the cent (half up)
    - remainder = total - base * count (may be negative)
    - First installment takes base + remainder, all others are base

    Example:
        100.00 / 3 → base 33.33, remainder 0.01 → [33.34, 33.33, 33.33]
        10000 cents → [3334, 3333, 3333]

    Raises:
        InvalidAmount: total is not positive, or too small for every
            installment to stay positive
        InvalidCount: fewer than 2 installments
    """
    if total_cents <= 0:
        raise InvalidAmount(f"Total amount must be positive, got {total_cents} cents")
    if count < MIN_PLAN_INSTALLMENTS:
        raise InvalidCount(f"A plan needs at least {MIN_PLAN_INSTALLMENTS} installments, got {count}")

    base = round_half_up_div(total_cents, count)
    remainder = total_cents - base * count
    first = base + remainder

    if base <= 0 or first <= 0:
        raise InvalidAmount(f"{total_cents} cents cannot be split into {count} positive installments")

    return [first] + [base] * (count - 1)


def generate_installment_plan(
    total_cents: int,
    count: int,
    first_due_date: date,
    description: Optional[str] = None,
    description_prefix: str = "",
) -> List[Installment]:
    """
    Split a lump sum into monthly installments (anniversary mode).

    Each installment is open with nothing paid. Without an explicit
    description each one is labelled "Parcela i/count".
    """
    amounts = split_amount(total_cents, count)
    due_dates = monthly_due_dates(first_due_date, count)

    return [
        Installment(
            sequence_number=n,
            total_in_plan=count,
            due_date=due_date,
            amount_cents=amount,
            description=f"{description_prefix}{description or f'Parcela {n}/{count}'}",
        )
        for n, (amount, due_date) in enumerate(zip(amounts, due_dates), start=1)
    ]


def generate_ortho_schedule(
    monthly_amount_cents: int,
    total_months: int,
    start_date: date,
    due_day: int,
) -> List[Installment]:
    """
    Recurring monthly billing for an orthodontic contract.

    Every installment carries the same fee; there is no remainder to correct.
    Due dates are pinned to `due_day` starting the month after `start_date`.
    """
    validate_due_day(due_day)
    if monthly_amount_cents <= 0:
        raise InvalidAmount(f"Monthly amount must be positive, got {monthly_amount_cents} cents")
    if total_months < 1:
        raise InvalidCount(f"Contract needs at least 1 month, got {total_months}")

    return [
        Installment(
            sequence_number=n,
            total_in_plan=total_months,
            due_date=fixed_day_due_date(start_date, n, due_day),
            amount_cents=monthly_amount_cents,
            description=f"Ortodontia - Mês {n}/{total_months}",
        )
        for n in range(1, total_months + 1)
    ]


def outstanding_balance(installments: Iterable[Installment]) -> int:
    """Unpaid remainder across open installments; other statuses contribute nothing"""
    return sum(inst.remaining_cents for inst in installments if inst.status == InstallmentStatus.OPEN)


def renegotiate(
    installments: Iterable[Installment],
    count: int,
    first_due_date: date,
) -> RenegotiationResult:
    """
    Replace open installments with a new plan over their outstanding balance.

    Non-open installments are ignored entirely: they are neither summed nor
    superseded. Partially paid installments carry forward only what is left.

    Raises:
        NothingToRenegotiate: no open installment in the input
    """
    open_items = [inst for inst in installments if inst.status == InstallmentStatus.OPEN]
    if not open_items:
        raise NothingToRenegotiate("No open installment selected for renegotiation")

    balance = outstanding_balance(open_items)
    replacement = generate_installment_plan(
        balance,
        count,
        first_due_date,
        description_prefix=RENEGOTIATION_PREFIX,
    )

    for inst in open_items:
        inst.status = InstallmentStatus.RENEGOTIATED

    return RenegotiationResult(
        superseded=open_items,
        replacement=replacement,
        outstanding_cents=balance,
    )


def apply_payment(installment: Installment, amount_cents: int) -> Installment:
    """
    Record a (possibly partial) payment against an open installment.

    paid_amount accumulates; reaching the face amount moves the installment
    to paid. Paid and renegotiated installments accept no further payments.
    """
    if amount_cents <= 0:
        raise InvalidAmount(f"Payment must be positive, got {amount_cents} cents")
    if installment.status != InstallmentStatus.OPEN:
        raise ConcurrentModification(
            f"Installment is {installment.status}; only open installments accept payments"
        )

    installment.paid_amount_cents += amount_cents
    if installment.paid_amount_cents >= installment.amount_cents:
        installment.status = InstallmentStatus.PAID

    return installment
