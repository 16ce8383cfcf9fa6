"""Cash ledger: POST/DELETE /v1/transactions, GET /v1/transactions/daily"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_audit_client, get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import TransactionCreatedResponse, TransactionRequest, TransactionResponse
from dental_ledger.domain.models import RateioEntry
from dental_ledger.domain.rateio import build_rateio
from dental_ledger.infrastructure.clients.audit import AuditClient
from dental_ledger.infrastructure.database.repositories import (
    CatalogRepository,
    ReceivableRepository,
    TransactionRepository,
)
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event
from dental_ledger.infrastructure.observability.metrics import record_settlement

router = APIRouter()


@router.post("/transactions", response_model=TransactionCreatedResponse, status_code=201)
def create_transaction(
    request_body: TransactionRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Record a cash movement with its cost-center split.

    Flow:
    1. Validate rateio entries against the total (single full entry if none)
    2. Insert transaction + entries
    3. Income linked to a receivable settles it for the transaction amount
    4. Commit all of it together
    """
    request_id = get_request_id(request)
    entries = build_rateio(
        request_body.total_cents,
        [
            RateioEntry(
                amount_cents=e.amount_cents,
                category_id=e.category_id,
                cost_center_id=e.cost_center_id,
            )
            for e in request_body.entries
        ],
    )

    settled_receivable_id: Optional[uuid.UUID] = None
    settled_status: Optional[str] = None
    with unit_of_work(db):
        catalog = CatalogRepository(db, clinic_id)
        for entry in entries:
            catalog.require_references(entry.category_id, entry.cost_center_id)

        transaction = TransactionRepository(db, clinic_id).create_transaction(
            type=request_body.type,
            total_cents=request_body.total_cents,
            entries=entries,
            transaction_date=request_body.transaction_date or date.today(),
            patient_id=request_body.patient_id,
            payment_method=request_body.payment_method,
            description=request_body.description,
        )

        if request_body.receivable_id and request_body.type == "IN":
            receivable = ReceivableRepository(db, clinic_id).settle(
                request_body.receivable_id,
                request_body.total_cents,
            )
            settled_receivable_id = receivable.id
            settled_status = receivable.status

    if settled_receivable_id:
        record_settlement("receivable", settled_status)

    log_ledger_event(
        request_id,
        clinic_id,
        "transaction_created",
        transaction_id=transaction.id,
        type=transaction.type,
        total_cents=transaction.total_cents,
        entry_count=len(entries),
        settled_receivable_id=settled_receivable_id,
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "TRANSACTION_CREATED",
            "clinic_id": clinic_id,
            "transaction_id": str(transaction.id),
            "type": transaction.type,
            "amount_cents": transaction.total_cents,
        },
    )

    return TransactionCreatedResponse(
        transaction=TransactionResponse.model_validate(transaction),
        settled_receivable_id=settled_receivable_id,
    )


@router.get("/transactions/daily", response_model=List[TransactionResponse])
def get_daily_transactions(
    transaction_date: Optional[date] = Query(None, description="Day to list (default today)"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Daily cash register listing, newest first"""
    transactions = TransactionRepository(db, clinic_id).list_by_date(transaction_date or date.today())
    return [TransactionResponse.model_validate(t) for t in transactions]


@router.delete("/transactions/{transaction_id}", status_code=204)
def delete_transaction(
    transaction_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        TransactionRepository(db, clinic_id).delete(transaction_id)

    log_ledger_event(get_request_id(request), clinic_id, "transaction_deleted", transaction_id=transaction_id)
    return Response(status_code=204)
