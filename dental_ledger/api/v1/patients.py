"""Patient records and their anamnesis"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id, get_request_id
from dental_ledger.api.v1.schemas import (
    AnamnesisRequest,
    AnamnesisSchema,
    PatientRequest,
    PatientSchema,
    PatientUpdateRequest,
)
from dental_ledger.infrastructure.database.repositories import AnamnesisRepository, PatientRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work
from dental_ledger.infrastructure.observability.logging import log_ledger_event

router = APIRouter()


@router.post("/patients", response_model=PatientSchema, status_code=201)
def create_patient(
    request_body: PatientRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    fields = request_body.model_dump()
    fields["name"] = fields["name"].strip()

    with unit_of_work(db):
        patient = PatientRepository(db, clinic_id).create_patient(**fields)

    log_ledger_event(get_request_id(request), clinic_id, "patient_created", patient_id=patient.id)
    return PatientSchema.model_validate(patient)


@router.get("/patients", response_model=List[PatientSchema])
def list_patients(
    search: Optional[str] = Query(None, description="Matches name, phone, CPF, email or chart number"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    return [PatientSchema.model_validate(p) for p in PatientRepository(db, clinic_id).list_patients(search)]


@router.get("/patients/{patient_id}", response_model=PatientSchema)
def get_patient(
    patient_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    return PatientSchema.model_validate(PatientRepository(db, clinic_id).get(patient_id))


@router.patch("/patients/{patient_id}", response_model=PatientSchema)
def update_patient(
    patient_id: uuid.UUID,
    request_body: PatientUpdateRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    fields = {
        key: value
        for key, value in request_body.model_dump(exclude_unset=True).items()
        if value is not None or key == "birth_date"
    }
    if "name" in fields:
        fields["name"] = fields["name"].strip()

    with unit_of_work(db):
        patient = PatientRepository(db, clinic_id).update_patient(patient_id, **fields)
    return PatientSchema.model_validate(patient)


@router.delete("/patients/{patient_id}", status_code=204)
def delete_patient(
    patient_id: uuid.UUID,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        PatientRepository(db, clinic_id).delete(patient_id)

    log_ledger_event(get_request_id(request), clinic_id, "patient_deleted", patient_id=patient_id)
    return Response(status_code=204)


@router.get("/patients/{patient_id}/anamnesis", response_model=Optional[AnamnesisSchema])
def get_anamnesis(
    patient_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    """Questionnaire of the patient, or null while none was filled in"""
    anamnesis = AnamnesisRepository(db, clinic_id).get_for_patient(patient_id)
    return AnamnesisSchema.model_validate(anamnesis) if anamnesis else None


@router.put("/patients/{patient_id}/anamnesis", response_model=AnamnesisSchema)
def save_anamnesis(
    patient_id: uuid.UUID,
    request_body: AnamnesisRequest,
    request: Request,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        anamnesis = AnamnesisRepository(db, clinic_id).upsert(patient_id, request_body.model_dump())

    log_ledger_event(
        get_request_id(request),
        clinic_id,
        "anamnesis_saved",
        patient_id=patient_id,
        has_alert=anamnesis.has_alert,
    )
    return AnamnesisSchema.model_validate(anamnesis)
