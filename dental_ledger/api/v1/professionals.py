"""Dentists and other professionals who hold an agenda"""

import uuid
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id
from dental_ledger.api.v1.schemas import ProfessionalRequest, ProfessionalSchema, ProfessionalUpdateRequest
from dental_ledger.infrastructure.database.repositories import ProfessionalRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work

router = APIRouter()


@router.post("/professionals", response_model=ProfessionalSchema, status_code=201)
def create_professional(
    request_body: ProfessionalRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        professional = ProfessionalRepository(db, clinic_id).create_professional(
            request_body.name.strip(), request_body.specialty.strip()
        )
    return ProfessionalSchema.model_validate(professional)


@router.get("/professionals", response_model=List[ProfessionalSchema])
def list_professionals(
    active_only: bool = Query(False, description="Only professionals that can be booked"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    professionals = ProfessionalRepository(db, clinic_id).list_professionals(active_only)
    return [ProfessionalSchema.model_validate(p) for p in professionals]


@router.patch("/professionals/{professional_id}", response_model=ProfessionalSchema)
def update_professional(
    professional_id: uuid.UUID,
    request_body: ProfessionalUpdateRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        professional = ProfessionalRepository(db, clinic_id).update_professional(
            professional_id, **request_body.model_dump(exclude_none=True)
        )
    return ProfessionalSchema.model_validate(professional)
