"""GET /v1/financial/summary and GET /v1/overdue"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id
from dental_ledger.api.v1.schemas import (
    FinancialSummaryResponse,
    OverdueResponse,
    to_payable_schema,
    to_receivable_schema,
)
from dental_ledger.domain.exceptions import ValidationFailure
from dental_ledger.domain.summary import summarize
from dental_ledger.infrastructure.database.repositories import (
    PayableRepository,
    ReceivableRepository,
    TransactionRepository,
    to_installment,
)
from dental_ledger.infrastructure.database.session import get_db
from dental_ledger.infrastructure.observability.metrics import overdue_items_gauge

router = APIRouter()


@router.get("/financial/summary", response_model=FinancialSummaryResponse)
def get_financial_summary(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """
    Period dashboard: cash in/out by transaction date, receivables and
    payables by due date split into open, overdue and paid money.
    """
    if start_date > end_date:
        raise ValidationFailure("start_date must not be after end_date")

    transactions = TransactionRepository(db, clinic_id).list_between(start_date, end_date)
    receivables = ReceivableRepository(db, clinic_id).list_due_between(start_date, end_date)
    payables = PayableRepository(db, clinic_id).list_due_between(start_date, end_date)

    summary = summarize(
        [(t.type, t.total_cents) for t in transactions],
        [to_installment(r) for r in receivables],
        [to_installment(p) for p in payables],
        date.today(),
    )

    return FinancialSummaryResponse(
        start_date=start_date,
        end_date=end_date,
        income_cents=summary.income_cents,
        expense_cents=summary.expense_cents,
        balance_cents=summary.balance_cents,
        receivable_open_cents=summary.receivables.open_cents,
        receivable_overdue_cents=summary.receivables.overdue_cents,
        receivable_paid_cents=summary.receivables.paid_cents,
        payable_open_cents=summary.payables.open_cents,
        payable_overdue_cents=summary.payables.overdue_cents,
        payable_paid_cents=summary.payables.paid_cents,
    )


@router.get("/overdue", response_model=OverdueResponse)
def get_overdue_items(
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """
    Open receivables and payables past their due date.

    Overdue is derived at read time, so there is no marking job to run; the
    gauge reflects the latest check.
    """
    today = date.today()
    receivables = ReceivableRepository(db, clinic_id).list_overdue(today)
    payables = PayableRepository(db, clinic_id).list_overdue(today)

    overdue_items_gauge.labels(ledger="receivable").set(len(receivables))
    overdue_items_gauge.labels(ledger="payable").set(len(payables))

    return OverdueResponse(
        as_of=today,
        receivables=[to_receivable_schema(r, today) for r in receivables],
        payables=[to_payable_schema(p, today) for p in payables],
    )
