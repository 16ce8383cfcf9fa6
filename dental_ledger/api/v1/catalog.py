"""Categories and cost centers used by transactions and payables"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from dental_ledger.api.dependencies import get_clinic_id
from dental_ledger.api.v1.schemas import CategoryRequest, CategorySchema, CostCenterRequest, CostCenterSchema
from dental_ledger.infrastructure.database.repositories import CatalogRepository
from dental_ledger.infrastructure.database.session import get_db, unit_of_work

router = APIRouter()


@router.post("/categories", response_model=CategorySchema, status_code=201)
def create_category(
    request_body: CategoryRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        category = CatalogRepository(db, clinic_id).create_category(request_body.name.strip(), request_body.type)
    return CategorySchema.model_validate(category)


@router.get("/categories", response_model=List[CategorySchema])
def list_categories(
    type: Optional[str] = Query(None, description="IN | OUT"),
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    return [CategorySchema.model_validate(c) for c in CatalogRepository(db, clinic_id).list_categories(type)]


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        CatalogRepository(db, clinic_id).delete_category(category_id)
    return Response(status_code=204)


@router.post("/cost-centers", response_model=CostCenterSchema, status_code=201)
def create_cost_center(
    request_body: CostCenterRequest,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        cost_center = CatalogRepository(db, clinic_id).create_cost_center(request_body.name.strip())
    return CostCenterSchema.model_validate(cost_center)


@router.get("/cost-centers", response_model=List[CostCenterSchema])
def list_cost_centers(
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    return [CostCenterSchema.model_validate(c) for c in CatalogRepository(db, clinic_id).list_cost_centers()]


@router.delete("/cost-centers/{cost_center_id}", status_code=204)
def delete_cost_center(
    cost_center_id: uuid.UUID,
    db: Session = Depends(get_db),
    clinic_id: str = Depends(get_clinic_id),
):
    with unit_of_work(db):
        CatalogRepository(db, clinic_id).delete_cost_center(cost_center_id)
    return Response(status_code=204)
