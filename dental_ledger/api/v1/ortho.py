"""Orthodontic contracts with recurring monthly billing"""

import uuid
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_audit_client, get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    OrthoContractCancelledResponse,
    OrthoContractCreatedResponse,
    OrthoContractRequest,
    OrthoContractSchema,
    ReceivableSchema,
    to_receivable_schema,
)
from dental_ledger.domain.installments import generate_ortho_schedule
from dental_ledger.infrastructure.clients.audit import AuditClient
from dental_ledger.infrastructure.database.repositories import OrthoContractRepository, ReceivableRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event
from dental_ledger.infrastructure.observability.metrics import record_plan

router = APIRouter()

ORIGIN_TYPE = "ortho_contract"


@router.post("/ortho-contracts", response_model=OrthoContractCreatedResponse, status_code=201)
def create_ortho_contract(
    request_body: OrthoContractRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """
    Create a contract and its full receivable schedule.

    The schedule is computed (and validated) before anything is written;
    contract and receivables then commit as one unit.
    """
    schedule = generate_ortho_schedule(
        request_body.monthly_amount_cents,
        request_body.total_months,
        request_body.start_date,
        request_body.due_day,
    )

    with unit_of_work(db):
        contract = OrthoContractRepository(db, clinic_id).create_contract(
            patient_id=request_body.patient_id,
            monthly_amount_cents=request_body.monthly_amount_cents,
            total_months=request_body.total_months,
            due_day=request_body.due_day,
            start_date=request_body.start_date,
            notes=request_body.notes,
        )
        rows = ReceivableRepository(db, clinic_id).create_installments(
            schedule,
            patient_id=request_body.patient_id,
            origin_type=ORIGIN_TYPE,
            origin_id=contract.id,
        )

    record_plan(ORIGIN_TYPE, len(rows))
    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "ortho_contract_created",
        contract_id=contract.id,
        monthly_amount_cents=contract.monthly_amount_cents,
        installment_count=len(rows),
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "ORTHO_CONTRACT_CREATED",
            "clinic_id": clinic_id,
            "contract_id": str(contract.id),
            "amount_cents": contract.monthly_amount_cents * contract.total_months,
        },
    )

    return OrthoContractCreatedResponse(
        contract=OrthoContractSchema.model_validate(contract),
        total_cents=sum(r.amount_cents for r in rows),
        installments=[to_receivable_schema(r) for r in rows],
    )


@router.get("/ortho-contracts", response_model=List[OrthoContractSchema])
def list_ortho_contracts(
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    contracts = OrthoContractRepository(db, clinic_id).list_contracts()
    return [OrthoContractSchema.model_validate(c) for c in contracts]


@router.get("/ortho-contracts/{contract_id}/receivables", response_model=List[ReceivableSchema])
def get_ortho_receivables(
    contract_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    OrthoContractRepository(db, clinic_id).get(contract_id)
    rows = ReceivableRepository(db, clinic_id).list_by_origin(ORIGIN_TYPE, contract_id)
    return [to_receivable_schema(r) for r in rows]


@router.post("/ortho-contracts/{contract_id}/cancel", response_model=OrthoContractCancelledResponse)
def cancel_ortho_contract(
    contract_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
    audit_client: AuditClient = Depends(get_audit_client),
):
    """Cancel an active contract; its still-open receivables become renegotiated, paid ones stay"""
    with unit_of_work(db):
        contract = OrthoContractRepository(db, clinic_id).cancel(contract_id)
        cancelled = ReceivableRepository(db, clinic_id).cancel_open_by_origin(ORIGIN_TYPE, contract_id)

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "ortho_contract_cancelled",
        contract_id=contract_id,
        cancelled_installments=cancelled,
    )
    background_tasks.add_task(
        audit_client.send_event,
        {
            "event": "ORTHO_CONTRACT_CANCELLED",
            "clinic_id": clinic_id,
            "contract_id": str(contract_id),
            "cancelled_installments": cancelled,
        },
    )

    return OrthoContractCancelledResponse(
        contract=OrthoContractSchema.model_validate(contract),
        cancelled_installments=cancelled,
    )
