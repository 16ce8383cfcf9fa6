"""Waitlist kanban: patients waiting for a slot, and the history of each card"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    WaitlistEntryRequest,
    WaitlistEntrySchema,
    WaitlistEventSchema,
    WaitlistStatusRequest,
)
from dental_ledger.domain.scheduling import validate_waitlist_status
from dental_ledger.infrastructure.database.repositories import WaitlistRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event

router = APIRouter()


@router.post("/waitlist", response_model=WaitlistEntrySchema, status_code=201)
def create_waitlist_entry(
    request_body: WaitlistEntryRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        entry = WaitlistRepository(db, clinic_id).create_entry(
            patient_id=request_body.patient_id,
            specialty=request_body.specialty.strip(),
            preferred_professional_id=request_body.preferred_professional_id,
            priority=request_body.priority,
            notes=request_body.notes,
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "waitlist_entry_created",
        waitlist_entry_id=entry.id,
        priority=entry.priority,
    )
    return WaitlistEntrySchema.model_validate(entry)


@router.get("/waitlist", response_model=List[WaitlistEntrySchema])
def list_waitlist(
    status: Optional[str] = Query(None, description="Kanban column, 'active' or 'all'"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Highest priority first; ties keep arrival order"""
    repo = WaitlistRepository(db, clinic_id)
    if status == "active":
        entries = repo.list_entries(active_only=True)
    elif status in (None, "all"):
        entries = repo.list_entries()
    else:
        entries = repo.list_entries(validate_waitlist_status(status))
    return [WaitlistEntrySchema.model_validate(e) for e in entries]


@router.post("/waitlist/{entry_id}/status", response_model=WaitlistEntrySchema)
def change_waitlist_status(
    entry_id: uuid.UUID,
    request_body: WaitlistStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """
    Move a card to another column.

    The move only applies while the card is still in `from_status`; a card
    someone else already moved answers 409 and the client reloads.
    """
    from_status = validate_waitlist_status(request_body.from_status)
    to_status = validate_waitlist_status(request_body.to_status)

    with unit_of_work(db):
        entry = WaitlistRepository(db, clinic_id).change_status(
            entry_id, from_status, to_status, request_body.note
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "waitlist_status_changed",
        waitlist_entry_id=entry_id,
        from_status=from_status,
        to_status=to_status,
    )
    return WaitlistEntrySchema.model_validate(entry)


@router.get("/waitlist/{entry_id}/events", response_model=List[WaitlistEventSchema])
def list_waitlist_events(
    entry_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Status history, newest first"""
    return [WaitlistEventSchema.model_validate(e) for e in WaitlistRepository(db, clinic_id).list_events(entry_id)]


@router.delete("/waitlist/{entry_id}", status_code=204)
def delete_waitlist_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        WaitlistRepository(db, clinic_id).delete(entry_id)
    return Response(status_code=204)
