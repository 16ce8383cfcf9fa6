"""Receivables: single charges, installment plans, settlement and renegotiation"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_audit_client, get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    InstallmentPlanRequest,
    InstallmentPlanResponse,
    ReceivableRequest,
    ReceivableSchema,
    ReceivableSettlementResponse,
    RenegotiateRequest,
    RenegotiationResponse,
    SettleRequest,
    to_receivable_schema,
)
from dental_ledger.domain.installments import generate_installment_plan, renegotiate
from dental_ledger.domain.models import OVERDUE, RateioEntry
from dental_ledger.infrastructure.clients.audit import AuditClient
from dental_ledger.infrastructure.database.repositories import (
    ReceivableRepository,
    TransactionRepository,
    to_installment,
)
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event
from dental_ledger.infrastructure.observability.metrics import record_plan, record_settlement

router = APIRouter()


@router.post("/receivables", response_model=ReceivableSchema, status_code=201)
def create_receivable(
    request_body: ReceivableRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        receivable = ReceivableRepository(db, clinic_id).create_receivable(
            amount_cents=request_body.amount_cents,
            due_date=request_body.due_date,
            patient_id=request_body.patient_id,
            description=request_body.description,
            origin_type=request_body.origin_type,
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "receivable_created",
        receivable_id=receivable.id,
        amount_cents=receivable.amount_cents,
    )
    return to_receivable_schema(receivable)


@router.post("/receivables/installment-plan", response_model=InstallmentPlanResponse, status_code=201)
def create_installment_plan(
    request_body: InstallmentPlanRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Split a lump sum into monthly receivables.

    The first installment absorbs the rounding remainder; due dates keep the
    first due date's day of month (clamped in shorter months).
    """
    installments = generate_installment_plan(
        request_body.total_cents,
        request_body.num_installments,
        request_body.first_due_date,
        description=request_body.description or None,
    )

    with unit_of_work(db):
        rows = ReceivableRepository(db, clinic_id).create_installments(
            installments,
            patient_id=request_body.patient_id,
            origin_type="installment",
        )

    record_plan("installment", len(rows))
    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "installment_plan_created",
        total_cents=request_body.total_cents,
        installment_count=len(rows),
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "INSTALLMENT_PLAN_CREATED",
            "clinic_id": clinic_id,
            "receivable_ids": [str(r.id) for r in rows],
            "amount_cents": request_body.total_cents,
        },
    )

    return InstallmentPlanResponse(
        total_cents=sum(r.amount_cents for r in rows),
        installments=[to_receivable_schema(r) for r in rows],
    )


@router.get("/receivables", response_model=List[ReceivableSchema])
def list_receivables(
    status: Optional[str] = Query(None, description="open | paid | renegotiated | overdue | all"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    repo = ReceivableRepository(db, clinic_id)
    today = date.today()

    if status == OVERDUE:
        rows = repo.list_overdue(today)
    else:
        rows = repo.list_receivables(None if status in (None, "all") else status)

    return [to_receivable_schema(r, today) for r in rows]


@router.post("/receivables/{receivable_id}/settle", response_model=ReceivableSettlementResponse)
def settle_receivable(
    receivable_id: uuid.UUID,
    request_body: SettleRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Record a full or partial payment.

    The conditional update and the matching income transaction commit
    together; a stale `version` fails with 409 and nothing is written.
    """
    with unit_of_work(db):
        receivable = ReceivableRepository(db, clinic_id).settle(
            receivable_id,
            request_body.amount_cents,
            expected_version=request_body.version,
        )
        transaction = TransactionRepository(db, clinic_id).create_transaction(
            type="IN",
            total_cents=request_body.amount_cents,
            entries=[RateioEntry(amount_cents=request_body.amount_cents)],
            transaction_date=date.today(),
            patient_id=receivable.patient_id,
            payment_method=request_body.payment_method,
            description="Baixa de conta a receber",
        )

    record_settlement("receivable", receivable.status)
    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "receivable_settled",
        receivable_id=receivable.id,
        amount_cents=request_body.amount_cents,
        paid_amount_cents=receivable.paid_amount_cents,
        status=receivable.status,
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "RECEIVABLE_SETTLED",
            "clinic_id": clinic_id,
            "receivable_id": str(receivable.id),
            "transaction_id": str(transaction.id),
            "amount_cents": request_body.amount_cents,
            "status": receivable.status,
        },
    )

    return ReceivableSettlementResponse(
        receivable=to_receivable_schema(receivable),
        transaction_id=transaction.id,
    )


@router.post("/receivables/renegotiate", response_model=RenegotiationResponse, status_code=201)
def renegotiate_receivables(
    request_body: RenegotiateRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Collapse open receivables into a new plan over their remaining balance.

    Flow:
    1. Load the referenced receivables (non-open ones are ignored)
    2. Compute the outstanding balance and the replacement plan
    3. Mark the originals renegotiated (conditional on status and version)
    4. Insert the replacement installments
    Steps 3-4 commit together or not at all.
    """
    with unit_of_work(db):
        repo = ReceivableRepository(db, clinic_id)
        rows = repo.get_many(request_body.ids)

        result = renegotiate(
            [to_installment(r) for r in rows],
            request_body.num_installments,
            request_body.first_due_date,
        )
        superseded_ids = [inst.id for inst in result.superseded]
        patient_id = next(r.patient_id for r in rows if r.id in superseded_ids)

        repo.mark_renegotiated({inst.id: inst.version for inst in result.superseded})
        new_rows = repo.create_installments(
            result.replacement,
            patient_id=patient_id,
            origin_type="renegotiation",
        )

    record_plan("renegotiation", len(new_rows))
    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "receivables_renegotiated",
        renegotiated_count=len(superseded_ids),
        outstanding_cents=result.outstanding_cents,
        installment_count=len(new_rows),
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "RECEIVABLES_RENEGOTIATED",
            "clinic_id": clinic_id,
            "renegotiated_ids": [str(i) for i in superseded_ids],
            "new_receivable_ids": [str(r.id) for r in new_rows],
            "amount_cents": result.outstanding_cents,
        },
    )

    return RenegotiationResponse(
        renegotiated_ids=superseded_ids,
        outstanding_cents=result.outstanding_cents,
        installments=[to_receivable_schema(r) for r in new_rows],
    )


@router.delete("/receivables/{receivable_id}", status_code=204)
def delete_receivable(
    receivable_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        ReceivableRepository(db, clinic_id).delete(receivable_id)

    log_ledger_event(get_request_id(request), clinic_id, "receivable_deleted", receivable_id=receivable_id)
    return Response(status_code=204)
