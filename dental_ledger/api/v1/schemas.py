"""Pydantic schemas for API request/response validation"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from dental_ledger.config import settings
from dental_ledger.domain.overdue import display_status
from dental_ledger.domain.scheduling import MAX_PRIORITY, MIN_PRIORITY

FinancialType = Literal["IN", "OUT"]
PaymentMethod = Literal["cash", "credit_card", "debit_card", "pix", "bank_transfer", "check", "other"]
OriginType = Literal["ortho_contract", "procedure", "manual", "installment", "renegotiation"]
BudgetStatus = Literal["pending", "approved", "cancelled"]


# ─── Transactions ───────────────────────────────────────────


class EntryRequest(BaseModel):
    """Rateio allocation of part of a transaction"""

    category_id: Optional[uuid.UUID] = None
    cost_center_id: Optional[uuid.UUID] = None
    amount_cents: int = Field(..., gt=0)


class TransactionRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    type: FinancialType
    total_cents: int = Field(..., gt=0, description="Transaction total in cents")
    patient_id: Optional[uuid.UUID] = None
    payment_method: PaymentMethod = "cash"
    transaction_date: Optional[date] = None
    description: str = Field("", max_length=500)
    receivable_id: Optional[uuid.UUID] = Field(None, description="Receivable settled by this income")
    entries: List[EntryRequest] = Field(default_factory=list)


class EntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    cost_center_id: Optional[uuid.UUID] = None
    amount_cents: int


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: str
    patient_id: Optional[uuid.UUID] = None
    total_cents: int
    payment_method: str
    transaction_date: date
    description: str
    entries: List[EntrySchema]


class TransactionCreatedResponse(BaseModel):
    transaction: TransactionResponse
    settled_receivable_id: Optional[uuid.UUID] = None


# ─── Receivables / Payables ─────────────────────────────────


class ReceivableRequest(BaseModel):
    """Request body for POST /v1/receivables"""

    patient_id: Optional[uuid.UUID] = None
    amount_cents: int = Field(..., gt=0)
    due_date: date
    description: str = Field("", max_length=500)
    origin_type: OriginType = "manual"


class InstallmentPlanRequest(BaseModel):
    """Request body for POST /v1/receivables/installment-plan"""

    patient_id: Optional[uuid.UUID] = None
    total_cents: int = Field(..., gt=0)
    num_installments: int = Field(..., ge=2, description="Minimum 2 installments")
    first_due_date: date
    description: str = Field("", max_length=500)


class SettleRequest(BaseModel):
    """Payment against an open receivable/payable"""

    amount_cents: int = Field(..., gt=0)
    version: int = Field(..., ge=1, description="Version observed when the item was loaded")
    payment_method: PaymentMethod = "cash"


class RenegotiateRequest(BaseModel):
    """Request body for POST /v1/receivables/renegotiate"""

    ids: List[uuid.UUID] = Field(..., min_length=1)
    num_installments: int = Field(..., ge=2)
    first_due_date: date


class ReceivableSchema(BaseModel):
    id: uuid.UUID
    patient_id: Optional[uuid.UUID] = None
    origin_type: str
    origin_id: Optional[uuid.UUID] = None
    installment_num: Optional[int] = None
    total_installments: Optional[int] = None
    due_date: date
    amount_cents: int
    paid_amount_cents: int
    status: str
    display_status: str
    paid_at: Optional[datetime] = None
    description: str
    version: int


class InstallmentPlanResponse(BaseModel):
    total_cents: int
    installments: List[ReceivableSchema]


class RenegotiationResponse(BaseModel):
    renegotiated_ids: List[uuid.UUID]
    outstanding_cents: int
    installments: List[ReceivableSchema]


class ReceivableSettlementResponse(BaseModel):
    receivable: ReceivableSchema
    transaction_id: uuid.UUID


class PayableRequest(BaseModel):
    """Request body for POST /v1/payables"""

    supplier: str = Field("", max_length=300)
    amount_cents: int = Field(..., gt=0)
    due_date: date
    category_id: Optional[uuid.UUID] = None
    cost_center_id: Optional[uuid.UUID] = None
    description: str = Field("", max_length=500)


class PayableSchema(BaseModel):
    id: uuid.UUID
    supplier: str
    due_date: date
    amount_cents: int
    paid_amount_cents: int
    status: str
    display_status: str
    paid_at: Optional[datetime] = None
    category_id: Optional[uuid.UUID] = None
    cost_center_id: Optional[uuid.UUID] = None
    description: str
    version: int


class PayableSettlementResponse(BaseModel):
    payable: PayableSchema
    transaction_id: uuid.UUID


# ─── Catalog ────────────────────────────────────────────────


class CategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: FinancialType


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    type: str


class CostCenterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)


class CostCenterSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str


# ─── Ortho contracts ────────────────────────────────────────


class OrthoContractRequest(BaseModel):
    """Request body for POST /v1/ortho-contracts"""

    patient_id: uuid.UUID
    monthly_amount_cents: int = Field(..., gt=0)
    total_months: int = Field(default_factory=lambda: settings.ortho_default_months, ge=1, le=120)
    due_day: int = Field(default_factory=lambda: settings.ortho_default_due_day)
    start_date: date
    notes: str = Field("", max_length=1000)


class OrthoContractSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    patient_id: uuid.UUID
    monthly_amount_cents: int
    total_months: int
    due_day: int
    start_date: date
    status: str
    notes: str


class OrthoContractCreatedResponse(BaseModel):
    contract: OrthoContractSchema
    total_cents: int
    installments: List[ReceivableSchema]


class OrthoContractCancelledResponse(BaseModel):
    contract: OrthoContractSchema
    cancelled_installments: int


# ─── Budgets ────────────────────────────────────────────────


class BudgetRequest(BaseModel):
    """Request body for POST /v1/budgets; totals are computed server-side"""

    patient_id: Optional[uuid.UUID] = None
    type: Literal["ORTHO", "SPECIALTY"]
    ortho_type: Optional[Literal["TRADICIONAL", "INVISALIGN"]] = None
    model: str = ""
    monthly_value_cents: int = Field(0, ge=0)
    installments: int = Field(default_factory=lambda: settings.budget_default_installments, ge=1)
    total_cents: int = Field(0, ge=0, description="Lump-sum price when there is no monthly value")
    upsells: List[Dict[str, Any]] = Field(default_factory=list)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    due_day: Optional[int] = None
    is_cash: bool = False
    is_plan_complement: bool = False
    notes: str = Field("", max_length=2000)
    status: BudgetStatus = "pending"


class BudgetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    patient_id: Optional[uuid.UUID] = None
    type: str
    ortho_type: Optional[str] = None
    model: str
    monthly_value_cents: int
    installments: int
    total_cents: int
    cash_value_cents: int
    schedule: List[int] = Field(default_factory=list, description="Installment amounts in cents")
    upsells: List[Dict[str, Any]]
    items: List[Dict[str, Any]]
    due_day: Optional[int] = None
    is_cash: bool
    is_plan_complement: bool
    notes: str
    status: str


class BudgetQuoteRequest(BaseModel):
    """Request body for POST /v1/budgets/quote"""

    monthly_value_cents: int = Field(0, ge=0)
    installments: int = Field(default_factory=lambda: settings.budget_default_installments, ge=1)
    total_cents: int = Field(0, ge=0)


class BudgetQuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    monthly_value_cents: int
    installments: int
    total_cents: int
    cash_value_cents: int
    schedule: List[int]


class BudgetStatusRequest(BaseModel):
    status: BudgetStatus


# ─── Patients ───────────────────────────────────────────────


class PatientRequest(BaseModel):
    """Request body for POST /v1/patients"""

    name: str = Field(..., min_length=1, max_length=300)
    codigo: str = Field("", max_length=50)
    phone: str = Field("", max_length=50)
    email: str = Field("", max_length=300)
    cpf: str = Field("", max_length=20)
    birth_date: Optional[date] = None
    address: str = Field("", max_length=500)
    responsavel_clinico_id: str = ""
    responsavel_orto_id: str = ""
    notes: str = Field("", max_length=2000)


class PatientUpdateRequest(BaseModel):
    """Partial update; only the fields sent are changed"""

    name: Optional[str] = Field(None, min_length=1, max_length=300)
    codigo: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=300)
    cpf: Optional[str] = Field(None, max_length=20)
    birth_date: Optional[date] = None
    address: Optional[str] = Field(None, max_length=500)
    responsavel_clinico_id: Optional[str] = None
    responsavel_orto_id: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=2000)


class PatientSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    codigo: str
    name: str
    phone: str
    email: str
    cpf: str
    birth_date: Optional[date] = None
    address: str
    responsavel_clinico_id: str
    responsavel_orto_id: str
    notes: str


class AnamnesisRequest(BaseModel):
    """Full questionnaire; details of unflagged conditions are discarded"""

    has_allergy: bool = False
    allergy_details: str = ""
    has_heart_disease: bool = False
    heart_details: str = ""
    has_diabetes: bool = False
    diabetes_details: str = ""
    has_hypertension: bool = False
    hypertension_details: str = ""
    has_bleeding_disorder: bool = False
    bleeding_details: str = ""
    uses_medication: bool = False
    medication_details: str = ""
    is_pregnant: bool = False
    is_smoker: bool = False
    other_conditions: str = ""
    has_alert: bool = False
    alert_message: str = ""


class AnamnesisSchema(AnamnesisRequest):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    patient_id: uuid.UUID
    updated_at: Optional[datetime] = None


# ─── Schedule ───────────────────────────────────────────────


class ProfessionalRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=300)
    specialty: str = Field("", max_length=200)


class ProfessionalUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=300)
    specialty: Optional[str] = Field(None, max_length=200)
    active: Optional[bool] = None


class ProfessionalSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    specialty: str
    active: bool


class AppointmentRequest(BaseModel):
    """Request body for POST /v1/appointments"""

    professional_id: uuid.UUID
    patient_id: Optional[uuid.UUID] = None
    title: str = Field("", max_length=300)
    start_at: datetime
    end_at: datetime
    notes: str = Field("", max_length=2000)


class AppointmentUpdateRequest(BaseModel):
    professional_id: Optional[uuid.UUID] = None
    patient_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(None, max_length=300)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)


class AppointmentStatusRequest(BaseModel):
    status: str


class AppointmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    patient_id: Optional[uuid.UUID] = None
    professional_id: uuid.UUID
    title: str
    start_at: datetime
    end_at: datetime
    status: str
    notes: str


# ─── Waitlist ───────────────────────────────────────────────


class WaitlistEntryRequest(BaseModel):
    """Request body for POST /v1/waitlist"""

    patient_id: uuid.UUID
    specialty: str = Field("", max_length=200)
    preferred_professional_id: Optional[uuid.UUID] = None
    priority: int = Field(0, ge=MIN_PRIORITY, le=MAX_PRIORITY)
    notes: str = Field("", max_length=2000)


class WaitlistStatusRequest(BaseModel):
    """Move a card: from_status is the column the client saw it in"""

    from_status: str
    to_status: str
    note: str = Field("", max_length=1000)


class WaitlistEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    patient_id: uuid.UUID
    specialty: str
    preferred_professional_id: Optional[uuid.UUID] = None
    priority: int
    status: str
    notes: str
    created_at: Optional[datetime] = None


class WaitlistEventSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    from_status: Optional[str] = None
    to_status: str
    note: str
    created_at: Optional[datetime] = None


# ─── Reporting ──────────────────────────────────────────────


class FinancialSummaryResponse(BaseModel):
    start_date: date
    end_date: date
    income_cents: int
    expense_cents: int
    balance_cents: int
    receivable_open_cents: int
    receivable_overdue_cents: int
    receivable_paid_cents: int
    payable_open_cents: int
    payable_overdue_cents: int
    payable_paid_cents: int


class OverdueResponse(BaseModel):
    as_of: date
    receivables: List[ReceivableSchema]
    payables: List[PayableSchema]


def to_receivable_schema(row, today: Optional[date] = None) -> ReceivableSchema:
    """Build response from a Receivable row, with the derived overdue status"""
    return ReceivableSchema(
        id=row.id,
        patient_id=row.patient_id,
        origin_type=row.origin_type,
        origin_id=row.origin_id,
        installment_num=row.installment_num,
        total_installments=row.total_installments,
        due_date=row.due_date,
        amount_cents=row.amount_cents,
        paid_amount_cents=row.paid_amount_cents,
        status=row.status,
        display_status=display_status(row.status, row.due_date, today),
        paid_at=row.paid_at,
        description=row.description,
        version=row.version,
    )


def to_payable_schema(row, today: Optional[date] = None) -> PayableSchema:
    """Build response from a Payable row, with the derived overdue status"""
    return PayableSchema(
        id=row.id,
        supplier=row.supplier,
        due_date=row.due_date,
        amount_cents=row.amount_cents,
        paid_amount_cents=row.paid_amount_cents,
        status=row.status,
        display_status=display_status(row.status, row.due_date, today),
        paid_at=row.paid_at,
        category_id=row.category_id,
        cost_center_id=row.cost_center_id,
        description=row.description,
        version=row.version,
    )
