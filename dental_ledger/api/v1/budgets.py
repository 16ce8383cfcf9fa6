"""Treatment budgets (quotes)"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    BudgetQuoteRequest,
    BudgetQuoteResponse,
    BudgetRequest,
    BudgetSchema,
    BudgetStatusRequest,
)
from dental_ledger.config import settings
from dental_ledger.domain.budgets import quote_budget
from dental_ledger.infrastructure.database.repositories import BudgetRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event
from dental_ledger.utils.date_utils import validate_due_day

router = APIRouter()


@router.post("/budgets", response_model=BudgetSchema, status_code=201)
def create_budget(
    request_body: BudgetRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """
    Price and store a budget.

    Total and upfront (cash) value are computed here from the monthly value
    or lump sum; client-supplied totals are not trusted.
    """
    if request_body.due_day is not None:
        validate_due_day(request_body.due_day)

    quote = quote_budget(
        request_body.monthly_value_cents,
        request_body.installments,
        settings.budget_cash_discount,
        total_cents=request_body.total_cents,
    )

    with unit_of_work(db):
        budget = BudgetRepository(db, clinic_id).create_budget(
            patient_id=request_body.patient_id,
            type=request_body.type,
            ortho_type=request_body.ortho_type,
            model=request_body.model,
            monthly_value_cents=quote.monthly_value_cents,
            installments=quote.installments,
            total_cents=quote.total_cents,
            cash_value_cents=quote.cash_value_cents,
            schedule=quote.schedule,
            upsells=request_body.upsells,
            items=request_body.items,
            due_day=request_body.due_day,
            is_cash=request_body.is_cash,
            is_plan_complement=request_body.is_plan_complement,
            notes=request_body.notes,
            status=request_body.status,
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "budget_created",
        budget_id=budget.id,
        total_cents=budget.total_cents,
        cash_value_cents=budget.cash_value_cents,
    )
    return BudgetSchema.model_validate(budget)


@router.post("/budgets/quote", response_model=BudgetQuoteResponse)
def preview_budget_quote(
    request_body: BudgetQuoteRequest,
    clinic_id: str = Depends(get_clinic_id),
):
    """Price a budget without storing it; the schedule lists each installment in cents"""
    quote = quote_budget(
        request_body.monthly_value_cents,
        request_body.installments,
        settings.budget_cash_discount,
        total_cents=request_body.total_cents,
    )
    return BudgetQuoteResponse.model_validate(quote)


@router.get("/budgets", response_model=List[BudgetSchema])
def list_budgets(
    status: Optional[str] = Query(None, description="pending | approved | cancelled | all"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    budgets = BudgetRepository(db, clinic_id).list_budgets(None if status in (None, "all") else status)
    return [BudgetSchema.model_validate(b) for b in budgets]


@router.patch("/budgets/{budget_id}/status", response_model=BudgetSchema)
def update_budget_status(
    budget_id: uuid.UUID,
    request_body: BudgetStatusRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        budget = BudgetRepository(db, clinic_id).update_status(budget_id, request_body.status)
    return BudgetSchema.model_validate(budget)


@router.delete("/budgets/{budget_id}", status_code=204)
def delete_budget(
    budget_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        BudgetRepository(db, clinic_id).delete(budget_id)
    return Response(status_code=204)
