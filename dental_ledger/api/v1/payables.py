"""Payables: bills owed by the clinic"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_audit_client, get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    PayableRequest,
    PayableSchema,
    PayableSettlementResponse,
    SettleRequest,
    to_payable_schema,
)
from dental_ledger.domain.models import OVERDUE, RateioEntry
from dental_ledger.infrastructure.clients.audit import AuditClient
from dental_ledger.infrastructure.database.repositories import (
    CatalogRepository,
    PayableRepository,
    TransactionRepository,
)
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event
from dental_ledger.infrastructure.observability.metrics import record_settlement

router = APIRouter()


@router.post("/payables", response_model=PayableSchema, status_code=201)
def create_payable(
    request_body: PayableRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        CatalogRepository(db, clinic_id).require_references(
            request_body.category_id,
            request_body.cost_center_id,
        )
        payable = PayableRepository(db, clinic_id).create_payable(
            amount_cents=request_body.amount_cents,
            due_date=request_body.due_date,
            supplier=request_body.supplier,
            category_id=request_body.category_id,
            cost_center_id=request_body.cost_center_id,
            description=request_body.description,
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "payable_created",
        payable_id=payable.id,
        amount_cents=payable.amount_cents,
    )
    return to_payable_schema(payable)


@router.get("/payables", response_model=List[PayableSchema])
def list_payables(
    status: Optional[str] = Query(None, description="open | paid | overdue | all"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    repo = PayableRepository(db, clinic_id)
    today = date.today()

    if status == OVERDUE:
        rows = repo.list_overdue(today)
    else:
        rows = repo.list_payables(None if status in (None, "all") else status)

    return [to_payable_schema(p, today) for p in rows]


@router.post("/payables/{payable_id}/settle", response_model=PayableSettlementResponse)
def settle_payable(
    payable_id: uuid.UUID,
    request_body: SettleRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Pay a bill, fully or partially.

    The expense transaction inherits the payable's category and cost center.
    """
    with unit_of_work(db):
        payable = PayableRepository(db, clinic_id).settle(
            payable_id,
            request_body.amount_cents,
            expected_version=request_body.version,
        )
        transaction = TransactionRepository(db, clinic_id).create_transaction(
            type="OUT",
            total_cents=request_body.amount_cents,
            entries=[
                RateioEntry(
                    amount_cents=request_body.amount_cents,
                    category_id=payable.category_id,
                    cost_center_id=payable.cost_center_id,
                )
            ],
            transaction_date=date.today(),
            payment_method=request_body.payment_method,
            description=f"Pagamento: {payable.supplier}",
        )

    record_settlement("payable", payable.status)
    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "payable_settled",
        payable_id=payable.id,
        amount_cents=request_body.amount_cents,
        paid_amount_cents=payable.paid_amount_cents,
        status=payable.status,
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "PAYABLE_SETTLED",
            "clinic_id": clinic_id,
            "payable_id": str(payable.id),
            "transaction_id": str(transaction.id),
            "amount_cents": request_body.amount_cents,
            "status": payable.status,
        },
    )

    return PayableSettlementResponse(
        payable=to_payable_schema(payable),
        transaction_id=transaction.id,
    )


@router.delete("/payables/{payable_id}", status_code=204)
def delete_payable(
    payable_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        PayableRepository(db, clinic_id).delete(payable_id)

    log_ledger_event(get_request_id(request), clinic_id, "payable_deleted", payable_id=payable_id)
    return Response(status_code=204)
