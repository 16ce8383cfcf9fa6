"""Period summary of the clinic ledger"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Tuple

from dental_ledger.domain.models import Installment, InstallmentStatus
from dental_ledger.domain.overdue import is_overdue


@dataclass
class BucketTotals:
    open_cents: int = 0
    overdue_cents: int = 0
    paid_cents: int = 0


@dataclass
class FinancialSummary:
    income_cents: int
    expense_cents: int
    receivables: BucketTotals
    payables: BucketTotals

    @property
    def balance_cents(self) -> int:
        return self.income_cents - self.expense_cents


def bucket_totals(items: Iterable[Installment], today: date) -> BucketTotals:
    """
    Split installments into open / overdue / paid money.

    Open and overdue count only the unpaid remainder; paid counts everything
    received, partial payments included. Renegotiated items are excluded,
    their balance lives on in the replacement plan.
    """
    totals = BucketTotals()
    for item in items:
        if item.status == InstallmentStatus.RENEGOTIATED:
            continue
        totals.paid_cents += item.paid_amount_cents
        if item.status == InstallmentStatus.OPEN:
            if is_overdue(item.status, item.due_date, today):
                totals.overdue_cents += item.remaining_cents
            else:
                totals.open_cents += item.remaining_cents
    return totals


def summarize(
    transactions: Iterable[Tuple[str, int]],
    receivables: Iterable[Installment],
    payables: Iterable[Installment],
    today: date,
) -> FinancialSummary:
    """Aggregate (type, total_cents) transactions and receivable/payable installments"""
    income = 0
    expense = 0
    for type_, total_cents in transactions:
        if type_ == "IN":
            income += total_cents
        else:
            expense += total_cents

    return FinancialSummary(
        income_cents=income,
        expense_cents=expense,
        receivables=bucket_totals(receivables, today),
        payables=bucket_totals(payables, today),
    )
