"""Clinic schedule"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    AppointmentRequest,
    AppointmentSchema,
    AppointmentStatusRequest,
    AppointmentUpdateRequest,
)
from dental_ledger.domain.scheduling import (
    AppointmentStatus,
    validate_appointment_status,
    validate_appointment_window,
)
from dental_ledger.infrastructure.database.repositories import AppointmentRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event

router = APIRouter()


@router.post("/appointments", response_model=AppointmentSchema, status_code=201)
def create_appointment(
    request_body: AppointmentRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Book a slot; patient and professional must belong to the acting clinic"""
    validate_appointment_window(request_body.start_at, request_body.end_at)

    with unit_of_work(db):
        appointment = AppointmentRepository(db, clinic_id).create_appointment(
            professional_id=request_body.professional_id,
            patient_id=request_body.patient_id,
            title=request_body.title,
            start_at=request_body.start_at,
            end_at=request_body.end_at,
            notes=request_body.notes,
            status=AppointmentStatus.SCHEDULED,
        )

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "appointment_created",
        appointment_id=appointment.id,
        professional_id=appointment.professional_id,
    )
    return AppointmentSchema.model_validate(appointment)


@router.get("/appointments", response_model=List[AppointmentSchema])
def list_appointments(
    start: datetime = Query(..., description="Window start (inclusive)"),
    end: datetime = Query(..., description="Window end (inclusive)"),
    professional_id: Optional[uuid.UUID] = Query(None),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Appointments starting inside the window, earliest first"""
    appointments = AppointmentRepository(db, clinic_id).list_between(start, end, professional_id)
    return [AppointmentSchema.model_validate(a) for a in appointments]


@router.patch("/appointments/{appointment_id}", response_model=AppointmentSchema)
def update_appointment(
    appointment_id: uuid.UUID,
    request_body: AppointmentUpdateRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    fields = {
        key: value
        for key, value in request_body.model_dump(exclude_unset=True).items()
        if value is not None or key == "patient_id"
    }
    repo = AppointmentRepository(db, clinic_id)

    with unit_of_work(db):
        current = repo.get(appointment_id)
        validate_appointment_window(
            fields.get("start_at", current.start_at),
            fields.get("end_at", current.end_at),
        )
        appointment = repo.update_appointment(appointment_id, **fields)
    return AppointmentSchema.model_validate(appointment)


@router.patch("/appointments/{appointment_id}/status", response_model=AppointmentSchema)
def update_appointment_status(
    appointment_id: uuid.UUID,
    request_body: AppointmentStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    status = validate_appointment_status(request_body.status)

    with unit_of_work(db):
        appointment = AppointmentRepository(db, clinic_id).update_status(appointment_id, status)

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "appointment_status_changed",
        appointment_id=appointment_id,
        status=status,
    )
    return AppointmentSchema.model_validate(appointment)


@router.delete("/appointments/{appointment_id}", status_code=204)
def delete_appointment(
    appointment_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        AppointmentRepository(db, clinic_id).delete(appointment_id)
    return Response(status_code=204)
