"""SQLAlchemy ORM models for the clinic ledger, patient records and schedule"""

import uuid
from sqlalchemy import (
    Column,
    String,
    BigInteger,
    Boolean,
    DateTime,
    Date,
    Integer,
    ForeignKey,
    Text,
    JSON,
    Uuid,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Category(Base):
    """Income/expense category"""

    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    type = Column(String(3), nullable=False)  # IN | OUT
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class CostCenter(Base):
    """Cost center used in rateio splits"""

    __tablename__ = "cost_centers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class FinancialTransaction(Base):
    """Cash movement in the daily ledger"""

    __tablename__ = "financial_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    type = Column(String(3), nullable=False)  # IN | OUT
    patient_id = Column(Uuid, nullable=True)
    total_cents = Column(BigInteger, nullable=False)
    payment_method = Column(Text, nullable=False, default="cash")
    transaction_date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entries = relationship("FinancialEntry", back_populates="transaction", cascade="all, delete-orphan")


class FinancialEntry(Base):
    """Rateio allocation of a transaction"""

    __tablename__ = "financial_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    transaction_id = Column(Uuid, ForeignKey("financial_transactions.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    cost_center_id = Column(Uuid, ForeignKey("cost_centers.id", ondelete="SET NULL"), nullable=True)
    amount_cents = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transaction = relationship("FinancialTransaction", back_populates="entries")


class OrthoContract(Base):
    """Recurring monthly billing agreement for orthodontic treatment"""

    __tablename__ = "ortho_contracts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, nullable=False)
    monthly_amount_cents = Column(BigInteger, nullable=False)
    total_months = Column(Integer, nullable=False, default=24)
    due_day = Column(Integer, nullable=False, default=10)
    start_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="active")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Receivable(Base):
    """Money owed to the clinic; one row per installment"""

    __tablename__ = "receivables"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, nullable=True, index=True)
    origin_type = Column(Text, nullable=False, default="manual")
    origin_id = Column(Uuid, nullable=True, index=True)
    installment_num = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)
    due_date = Column(Date, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    status = Column(Text, nullable=False, default="open", index=True)
    paid_amount_cents = Column(BigInteger, nullable=False, default=0)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    description = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)  # Optimistic lock token
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Payable(Base):
    """Money owed by the clinic"""

    __tablename__ = "payables"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    supplier = Column(Text, nullable=False, default="")
    due_date = Column(Date, nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    status = Column(Text, nullable=False, default="open", index=True)
    paid_amount_cents = Column(BigInteger, nullable=False, default=0)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    cost_center_id = Column(Uuid, ForeignKey("cost_centers.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Budget(Base):
    """Treatment quote presented to a patient"""

    __tablename__ = "budgets"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, nullable=True)
    type = Column(Text, nullable=False)  # ORTHO | SPECIALTY
    ortho_type = Column(Text, nullable=True)  # TRADICIONAL | INVISALIGN
    model = Column(Text, nullable=False, default="")
    monthly_value_cents = Column(BigInteger, nullable=False, default=0)
    installments = Column(Integer, nullable=False, default=36)
    total_cents = Column(BigInteger, nullable=False, default=0)
    cash_value_cents = Column(BigInteger, nullable=False, default=0)
    schedule = Column(JSON, nullable=False, default=list)  # Installment amounts in cents
    upsells = Column(JSON, nullable=False, default=list)
    items = Column(JSON, nullable=False, default=list)
    due_day = Column(Integer, nullable=True)
    is_cash = Column(Boolean, nullable=False, default=False)
    is_plan_complement = Column(Boolean, nullable=False, default=False)
    notes = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Patient(Base):
    """Patient record"""

    __tablename__ = "patients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    codigo = Column(Text, nullable=False, default="")  # Clinic's own chart number
    name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False, default="")
    email = Column(Text, nullable=False, default="")
    cpf = Column(Text, nullable=False, default="")
    birth_date = Column(Date, nullable=True)
    address = Column(Text, nullable=False, default="")
    responsavel_clinico_id = Column(Text, nullable=False, default="")
    responsavel_orto_id = Column(Text, nullable=False, default="")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Anamnesis(Base):
    """Health questionnaire; at most one per patient"""

    __tablename__ = "anamnesis"
    __table_args__ = (UniqueConstraint("patient_id", name="uq_anamnesis_patient"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    has_allergy = Column(Boolean, nullable=False, default=False)
    allergy_details = Column(Text, nullable=False, default="")
    has_heart_disease = Column(Boolean, nullable=False, default=False)
    heart_details = Column(Text, nullable=False, default="")
    has_diabetes = Column(Boolean, nullable=False, default=False)
    diabetes_details = Column(Text, nullable=False, default="")
    has_hypertension = Column(Boolean, nullable=False, default=False)
    hypertension_details = Column(Text, nullable=False, default="")
    has_bleeding_disorder = Column(Boolean, nullable=False, default=False)
    bleeding_details = Column(Text, nullable=False, default="")
    uses_medication = Column(Boolean, nullable=False, default=False)
    medication_details = Column(Text, nullable=False, default="")
    is_pregnant = Column(Boolean, nullable=False, default=False)
    is_smoker = Column(Boolean, nullable=False, default=False)
    other_conditions = Column(Text, nullable=False, default="")
    has_alert = Column(Boolean, nullable=False, default=False)
    alert_message = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Professional(Base):
    """Dentist or other clinician who can be booked"""

    __tablename__ = "professionals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    specialty = Column(Text, nullable=False, default="")
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Appointment(Base):
    """Booked slot on a professional's schedule"""

    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="SET NULL"), nullable=True)
    professional_id = Column(Uuid, ForeignKey("professionals.id"), nullable=False, index=True)
    title = Column(Text, nullable=False, default="")
    start_at = Column(DateTime(timezone=True), nullable=False, index=True)
    end_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(Text, nullable=False, default="scheduled")
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class WaitlistEntry(Base):
    """Patient waiting for a slot, tracked on the waitlist kanban"""

    __tablename__ = "waitlist_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    patient_id = Column(Uuid, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False)
    specialty = Column(Text, nullable=False, default="")
    preferred_professional_id = Column(Uuid, ForeignKey("professionals.id", ondelete="SET NULL"), nullable=True)
    priority = Column(Integer, nullable=False, default=0)
    status = Column(Text, nullable=False, default="NEW", index=True)
    notes = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    events = relationship("WaitlistEvent", back_populates="entry", cascade="all, delete-orphan")


class WaitlistEvent(Base):
    """Status change history of a waitlist entry"""

    __tablename__ = "waitlist_events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clinic_id = Column(Text, nullable=False, index=True)
    waitlist_entry_id = Column(Uuid, ForeignKey("waitlist_entries.id", ondelete="CASCADE"), nullable=False)
    from_status = Column(Text, nullable=True)
    to_status = Column(Text, nullable=False)
    note = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entry = relationship("WaitlistEntry", back_populates="events")
