"""Data access layer for ledger entities, scoped to the acting clinic"""

import uuid
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from dental_ledger.domain.anamnesis import normalize_anamnesis
from dental_ledger.domain.exceptions import ConcurrentModification, EntityNotFound
from dental_ledger.domain.installments import apply_payment
from dental_ledger.domain.models import Installment, InstallmentStatus, RateioEntry
from dental_ledger.domain.scheduling import WaitlistStatus, transition_note
from dental_ledger.infrastructure.database.models import (
    Anamnesis,
    Appointment,
    Budget,
    Category,
    CostCenter,
    FinancialEntry,
    FinancialTransaction,
    OrthoContract,
    Patient,
    Payable,
    Professional,
    Receivable,
    WaitlistEntry,
    WaitlistEvent,
)


def to_installment(row) -> Installment:
    """Domain view of a receivable or payable row"""
    return Installment(
        id=row.id,
        sequence_number=getattr(row, "installment_num", None) or 1,
        total_in_plan=getattr(row, "total_installments", None) or 1,
        due_date=row.due_date,
        amount_cents=row.amount_cents,
        description=row.description,
        status=row.status,
        paid_amount_cents=row.paid_amount_cents,
        version=row.version,
    )


class ClinicScopedRepository:
    """Base repository: every read filters and every write stamps the clinic id"""

    model = None
    entity_name = "Record"

    def __init__(self, db: Session, clinic_id: str):
        self.db = db
        self.clinic_id = clinic_id

    def _query(self, model=None):
        model = model or self.model
        return self.db.query(model).filter(model.clinic_id == self.clinic_id)

    def get(self, entity_id: uuid.UUID):
        """Fetch one row owned by the clinic"""
        row = self._query().filter(self.model.id == entity_id).first()
        if row is None:
            raise EntityNotFound(f"{self.entity_name} {entity_id} not found")
        return row

    def delete(self, entity_id: uuid.UUID) -> None:
        self.db.delete(self.get(entity_id))
        self.db.flush()

    def require(self, model, entity_id: Optional[uuid.UUID], label: str):
        """Load a referenced row of another table, rejecting ids owned by other clinics"""
        if entity_id is None:
            return None
        row = self._query(model).filter(model.id == entity_id).first()
        if row is None:
            raise EntityNotFound(f"{label} {entity_id} not found")
        return row


class CatalogRepository:
    """Repository for categories and cost centers"""

    def __init__(self, db: Session, clinic_id: str):
        self.db = db
        self.clinic_id = clinic_id

    def create_category(self, name: str, type: str) -> Category:
        category = Category(clinic_id=self.clinic_id, name=name, type=type)
        self.db.add(category)
        self.db.flush()
        return category

    def list_categories(self, type: Optional[str] = None) -> List[Category]:
        query = self.db.query(Category).filter(Category.clinic_id == self.clinic_id)
        if type:
            query = query.filter(Category.type == type)
        return query.order_by(Category.name).all()

    def create_cost_center(self, name: str) -> CostCenter:
        cost_center = CostCenter(clinic_id=self.clinic_id, name=name)
        self.db.add(cost_center)
        self.db.flush()
        return cost_center

    def list_cost_centers(self) -> List[CostCenter]:
        return (
            self.db.query(CostCenter)
            .filter(CostCenter.clinic_id == self.clinic_id)
            .order_by(CostCenter.name)
            .all()
        )

    def _get(self, model, entity_id: uuid.UUID, label: str):
        row = (
            self.db.query(model)
            .filter(model.clinic_id == self.clinic_id, model.id == entity_id)
            .first()
        )
        if row is None:
            raise EntityNotFound(f"{label} {entity_id} not found")
        return row

    def delete_category(self, category_id: uuid.UUID) -> None:
        self.db.delete(self._get(Category, category_id, "Category"))
        self.db.flush()

    def delete_cost_center(self, cost_center_id: uuid.UUID) -> None:
        self.db.delete(self._get(CostCenter, cost_center_id, "Cost center"))
        self.db.flush()

    def require_references(
        self,
        category_id: Optional[uuid.UUID] = None,
        cost_center_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Reject catalog ids that do not belong to this clinic"""
        if category_id is not None:
            self._get(Category, category_id, "Category")
        if cost_center_id is not None:
            self._get(CostCenter, cost_center_id, "Cost center")


class TransactionRepository(ClinicScopedRepository):
    """Repository for cash transactions and their rateio entries"""

    model = FinancialTransaction
    entity_name = "Transaction"

    def create_transaction(
        self,
        type: str,
        total_cents: int,
        entries: Iterable[RateioEntry],
        transaction_date: date,
        patient_id: Optional[uuid.UUID] = None,
        payment_method: str = "cash",
        description: str = "",
    ) -> FinancialTransaction:
        """Persist transaction with its rateio entries"""
        transaction = FinancialTransaction(
            clinic_id=self.clinic_id,
            type=type,
            patient_id=patient_id,
            total_cents=total_cents,
            payment_method=payment_method,
            transaction_date=transaction_date,
            description=description,
        )
        self.db.add(transaction)
        self.db.flush()  # Get ID without committing

        for entry in entries:
            self.db.add(
                FinancialEntry(
                    clinic_id=self.clinic_id,
                    transaction_id=transaction.id,
                    category_id=entry.category_id,
                    cost_center_id=entry.cost_center_id,
                    amount_cents=entry.amount_cents,
                )
            )
        self.db.flush()
        self.db.refresh(transaction)
        return transaction

    def list_by_date(self, transaction_date: date) -> List[FinancialTransaction]:
        """Daily cash listing, newest first"""
        return (
            self._query()
            .options(selectinload(FinancialTransaction.entries))
            .filter(FinancialTransaction.transaction_date == transaction_date)
            .order_by(FinancialTransaction.created_at.desc())
            .all()
        )

    def list_between(self, start_date: date, end_date: date) -> List[FinancialTransaction]:
        return (
            self._query()
            .filter(
                FinancialTransaction.transaction_date >= start_date,
                FinancialTransaction.transaction_date <= end_date,
            )
            .all()
        )


class _SettleableRepository(ClinicScopedRepository):
    """Shared conditional-update settlement for receivables and payables"""

    def settle(
        self,
        entity_id: uuid.UUID,
        amount_cents: int,
        expected_version: Optional[int] = None,
    ):
        """
        Apply a payment with a compare-and-swap on (status, version).

        Raises:
            ConcurrentModification: the row is no longer open, or its version
                differs from the one the caller observed
        """
        row = self.get(entity_id)
        version = row.version if expected_version is None else expected_version
        installment = apply_payment(to_installment(row), amount_cents)

        values = {
            self.model.paid_amount_cents: installment.paid_amount_cents,
            self.model.status: installment.status,
            self.model.version: self.model.version + 1,
        }
        if installment.status == InstallmentStatus.PAID:
            values[self.model.paid_at] = datetime.now(timezone.utc)

        updated = (
            self._query()
            .filter(
                self.model.id == entity_id,
                self.model.status == InstallmentStatus.OPEN,
                self.model.version == version,
            )
            .update(values, synchronize_session=False)
        )
        if updated != 1:
            raise ConcurrentModification(
                f"{self.entity_name} {entity_id} changed since version {version}; reload and retry"
            )

        self.db.refresh(row)
        return row

    def delete(self, entity_id: uuid.UUID) -> None:
        """
        Delete an item nobody has paid against yet.

        Raises:
            ConcurrentModification: the item is paid, renegotiated or partially paid
        """
        row = self.get(entity_id)
        if row.status != InstallmentStatus.OPEN or row.paid_amount_cents > 0:
            raise ConcurrentModification(
                f"{self.entity_name} {entity_id} is {row.status} with {row.paid_amount_cents} cents paid; "
                "only untouched open items can be deleted"
            )
        self.db.delete(row)
        self.db.flush()

    def list_due_between(self, start_date: date, end_date: date) -> List:
        return (
            self._query()
            .filter(self.model.due_date >= start_date, self.model.due_date <= end_date)
            .all()
        )

    def list_overdue(self, today: date) -> List:
        return (
            self._query()
            .filter(self.model.status == InstallmentStatus.OPEN, self.model.due_date < today)
            .order_by(self.model.due_date)
            .all()
        )


class ReceivableRepository(_SettleableRepository):
    """Repository for receivables"""

    model = Receivable
    entity_name = "Receivable"

    def create_receivable(
        self,
        amount_cents: int,
        due_date: date,
        patient_id: Optional[uuid.UUID] = None,
        description: str = "",
        origin_type: str = "manual",
    ) -> Receivable:
        receivable = Receivable(
            clinic_id=self.clinic_id,
            patient_id=patient_id,
            origin_type=origin_type,
            due_date=due_date,
            amount_cents=amount_cents,
            status=InstallmentStatus.OPEN,
            paid_amount_cents=0,
            description=description,
        )
        self.db.add(receivable)
        self.db.flush()
        return receivable

    def create_installments(
        self,
        installments: List[Installment],
        patient_id: Optional[uuid.UUID],
        origin_type: str,
        origin_id: Optional[uuid.UUID] = None,
    ) -> List[Receivable]:
        """Persist a generated plan, one receivable per installment"""
        rows = [
            Receivable(
                clinic_id=self.clinic_id,
                patient_id=patient_id,
                origin_type=origin_type,
                origin_id=origin_id,
                installment_num=inst.sequence_number,
                total_installments=inst.total_in_plan,
                due_date=inst.due_date,
                amount_cents=inst.amount_cents,
                status=inst.status,
                paid_amount_cents=inst.paid_amount_cents,
                description=inst.description,
            )
            for inst in installments
        ]
        self.db.add_all(rows)
        self.db.flush()
        return rows

    def list_receivables(self, status: Optional[str] = None) -> List[Receivable]:
        query = self._query()
        if status:
            query = query.filter(Receivable.status == status)
        return query.order_by(Receivable.due_date, Receivable.installment_num).all()

    def get_many(self, receivable_ids: List[uuid.UUID]) -> List[Receivable]:
        if not receivable_ids:
            return []
        return (
            self._query()
            .filter(Receivable.id.in_(receivable_ids))
            .order_by(Receivable.due_date)
            .all()
        )

    def list_by_origin(self, origin_type: str, origin_id: uuid.UUID) -> List[Receivable]:
        return (
            self._query()
            .filter(Receivable.origin_type == origin_type, Receivable.origin_id == origin_id)
            .order_by(Receivable.due_date)
            .all()
        )

    def mark_renegotiated(self, observed_versions: Dict[uuid.UUID, int]) -> int:
        """
        Move open receivables to renegotiated in one conditional update.

        Args:
            observed_versions: receivable id -> version seen when it was read

        Raises:
            ConcurrentModification: any of them was paid or changed after it was read
        """
        updated = (
            self._query()
            .filter(
                Receivable.status == InstallmentStatus.OPEN,
                or_(
                    *(
                        and_(Receivable.id == receivable_id, Receivable.version == version)
                        for receivable_id, version in observed_versions.items()
                    )
                ),
            )
            .update(
                {
                    Receivable.status: InstallmentStatus.RENEGOTIATED,
                    Receivable.version: Receivable.version + 1,
                },
                synchronize_session=False,
            )
        )
        if updated != len(observed_versions):
            raise ConcurrentModification(
                f"Only {updated} of {len(observed_versions)} receivables were still open; reload and retry"
            )
        return updated

    def cancel_open_by_origin(self, origin_type: str, origin_id: uuid.UUID) -> int:
        """Supersede every still-open receivable generated by a contract"""
        return (
            self._query()
            .filter(
                Receivable.origin_type == origin_type,
                Receivable.origin_id == origin_id,
                Receivable.status == InstallmentStatus.OPEN,
            )
            .update(
                {
                    Receivable.status: InstallmentStatus.RENEGOTIATED,
                    Receivable.version: Receivable.version + 1,
                },
                synchronize_session=False,
            )
        )


class PayableRepository(_SettleableRepository):
    """Repository for payables"""

    model = Payable
    entity_name = "Payable"

    def create_payable(
        self,
        amount_cents: int,
        due_date: date,
        supplier: str = "",
        category_id: Optional[uuid.UUID] = None,
        cost_center_id: Optional[uuid.UUID] = None,
        description: str = "",
    ) -> Payable:
        payable = Payable(
            clinic_id=self.clinic_id,
            supplier=supplier,
            due_date=due_date,
            amount_cents=amount_cents,
            status=InstallmentStatus.OPEN,
            paid_amount_cents=0,
            category_id=category_id,
            cost_center_id=cost_center_id,
            description=description,
        )
        self.db.add(payable)
        self.db.flush()
        return payable

    def list_payables(self, status: Optional[str] = None) -> List[Payable]:
        query = self._query()
        if status:
            query = query.filter(Payable.status == status)
        return query.order_by(Payable.due_date).all()


class OrthoContractRepository(ClinicScopedRepository):
    """Repository for orthodontic contracts"""

    model = OrthoContract
    entity_name = "Ortho contract"

    def create_contract(
        self,
        patient_id: uuid.UUID,
        monthly_amount_cents: int,
        total_months: int,
        due_day: int,
        start_date: date,
        notes: str = "",
    ) -> OrthoContract:
        contract = OrthoContract(
            clinic_id=self.clinic_id,
            patient_id=patient_id,
            monthly_amount_cents=monthly_amount_cents,
            total_months=total_months,
            due_day=due_day,
            start_date=start_date,
            status="active",
            notes=notes,
        )
        self.db.add(contract)
        self.db.flush()
        return contract

    def list_contracts(self) -> List[OrthoContract]:
        return self._query().order_by(OrthoContract.created_at.desc()).all()

    def cancel(self, contract_id: uuid.UUID) -> OrthoContract:
        """Conditional active -> cancelled transition"""
        contract = self.get(contract_id)
        updated = (
            self._query()
            .filter(OrthoContract.id == contract_id, OrthoContract.status == "active")
            .update({OrthoContract.status: "cancelled"}, synchronize_session=False)
        )
        if updated != 1:
            raise ConcurrentModification(f"Ortho contract {contract_id} is {contract.status}, not active")
        self.db.refresh(contract)
        return contract


class BudgetRepository(ClinicScopedRepository):
    """Repository for treatment budgets"""

    model = Budget
    entity_name = "Budget"

    def create_budget(self, **fields) -> Budget:
        budget = Budget(clinic_id=self.clinic_id, **fields)
        self.db.add(budget)
        self.db.flush()
        return budget

    def list_budgets(self, status: Optional[str] = None) -> List[Budget]:
        query = self._query()
        if status:
            query = query.filter(Budget.status == status)
        return query.order_by(Budget.created_at.desc()).all()

    def update_status(self, budget_id: uuid.UUID, status: str) -> Budget:
        budget = self.get(budget_id)
        budget.status = status
        self.db.flush()
        return budget


def _search_term(search: str) -> str:
    """Drop LIKE wildcards and punctuation users paste from formatted CPFs and phones"""
    return "".join(ch for ch in search if ch not in '%_\\,.()"\'').strip()


class PatientRepository(ClinicScopedRepository):
    """Repository for patient records"""

    model = Patient
    entity_name = "Patient"

    def create_patient(self, **fields) -> Patient:
        patient = Patient(clinic_id=self.clinic_id, **fields)
        self.db.add(patient)
        self.db.flush()
        return patient

    def list_patients(self, search: Optional[str] = None) -> List[Patient]:
        query = self._query()
        term = _search_term(search or "")
        if term:
            pattern = f"%{term}%"
            query = query.filter(
                or_(
                    Patient.name.ilike(pattern),
                    Patient.phone.ilike(pattern),
                    Patient.cpf.ilike(pattern),
                    Patient.email.ilike(pattern),
                    Patient.codigo.ilike(pattern),
                )
            )
        return query.order_by(Patient.name).all()

    def update_patient(self, patient_id: uuid.UUID, **fields) -> Patient:
        patient = self.get(patient_id)
        for key, value in fields.items():
            setattr(patient, key, value)
        self.db.flush()
        return patient


class AnamnesisRepository(ClinicScopedRepository):
    """Repository for the one health questionnaire each patient has"""

    model = Anamnesis
    entity_name = "Anamnesis"

    def get_for_patient(self, patient_id: uuid.UUID) -> Optional[Anamnesis]:
        self.require(Patient, patient_id, "Patient")
        return self._query().filter(Anamnesis.patient_id == patient_id).first()

    def upsert(self, patient_id: uuid.UUID, fields: Dict) -> Anamnesis:
        """Create or overwrite the questionnaire; unflagged conditions lose their details"""
        anamnesis = self.get_for_patient(patient_id)
        if anamnesis is None:
            anamnesis = Anamnesis(clinic_id=self.clinic_id, patient_id=patient_id)
            self.db.add(anamnesis)
        for key, value in normalize_anamnesis(fields).items():
            setattr(anamnesis, key, value)
        anamnesis.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return anamnesis


class ProfessionalRepository(ClinicScopedRepository):
    """Repository for dentists and other professionals of the clinic"""

    model = Professional
    entity_name = "Professional"

    def create_professional(self, name: str, specialty: str = "") -> Professional:
        professional = Professional(clinic_id=self.clinic_id, name=name, specialty=specialty, active=True)
        self.db.add(professional)
        self.db.flush()
        return professional

    def list_professionals(self, active_only: bool = False) -> List[Professional]:
        query = self._query()
        if active_only:
            query = query.filter(Professional.active.is_(True))
        return query.order_by(Professional.name).all()

    def update_professional(self, professional_id: uuid.UUID, **fields) -> Professional:
        professional = self.get(professional_id)
        for key, value in fields.items():
            setattr(professional, key, value)
        self.db.flush()
        return professional


class AppointmentRepository(ClinicScopedRepository):
    """Repository for the schedule"""

    model = Appointment
    entity_name = "Appointment"

    def create_appointment(
        self,
        professional_id: uuid.UUID,
        start_at: datetime,
        end_at: datetime,
        patient_id: Optional[uuid.UUID] = None,
        title: str = "",
        notes: str = "",
        status: str = "scheduled",
    ) -> Appointment:
        self.require(Professional, professional_id, "Professional")
        self.require(Patient, patient_id, "Patient")
        appointment = Appointment(
            clinic_id=self.clinic_id,
            patient_id=patient_id,
            professional_id=professional_id,
            title=title,
            start_at=start_at,
            end_at=end_at,
            status=status,
            notes=notes,
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    def list_between(
        self,
        start_at: datetime,
        end_at: datetime,
        professional_id: Optional[uuid.UUID] = None,
    ) -> List[Appointment]:
        query = self._query().filter(Appointment.start_at >= start_at, Appointment.start_at <= end_at)
        if professional_id is not None:
            query = query.filter(Appointment.professional_id == professional_id)
        return query.order_by(Appointment.start_at).all()

    def update_appointment(self, appointment_id: uuid.UUID, **fields) -> Appointment:
        appointment = self.get(appointment_id)
        if "professional_id" in fields:
            self.require(Professional, fields["professional_id"], "Professional")
        if "patient_id" in fields:
            self.require(Patient, fields["patient_id"], "Patient")
        for key, value in fields.items():
            setattr(appointment, key, value)
        self.db.flush()
        return appointment

    def update_status(self, appointment_id: uuid.UUID, status: str) -> Appointment:
        appointment = self.get(appointment_id)
        appointment.status = status
        self.db.flush()
        return appointment


class WaitlistRepository(ClinicScopedRepository):
    """Repository for the waitlist kanban and its status history"""

    model = WaitlistEntry
    entity_name = "Waitlist entry"

    def _record_event(self, entry_id: uuid.UUID, from_status: Optional[str], to_status: str, note: str = "") -> None:
        self.db.add(
            WaitlistEvent(
                clinic_id=self.clinic_id,
                waitlist_entry_id=entry_id,
                from_status=from_status,
                to_status=to_status,
                note=transition_note(from_status, to_status, note),
                created_at=datetime.now(timezone.utc),
            )
        )

    def create_entry(
        self,
        patient_id: uuid.UUID,
        specialty: str = "",
        preferred_professional_id: Optional[uuid.UUID] = None,
        priority: int = 0,
        notes: str = "",
    ) -> WaitlistEntry:
        """Add a patient to the NEW column and open its history"""
        self.require(Patient, patient_id, "Patient")
        self.require(Professional, preferred_professional_id, "Professional")
        entry = WaitlistEntry(
            clinic_id=self.clinic_id,
            patient_id=patient_id,
            specialty=specialty,
            preferred_professional_id=preferred_professional_id,
            priority=priority,
            status=WaitlistStatus.NEW,
            notes=notes,
        )
        self.db.add(entry)
        self.db.flush()
        self._record_event(entry.id, None, WaitlistStatus.NEW)
        self.db.flush()
        return entry

    def list_entries(self, status: Optional[str] = None, active_only: bool = False) -> List[WaitlistEntry]:
        """Highest priority first, then oldest first"""
        query = self._query()
        if status:
            query = query.filter(WaitlistEntry.status == status)
        elif active_only:
            query = query.filter(WaitlistEntry.status.in_(WaitlistStatus.ACTIVE))
        return query.order_by(WaitlistEntry.priority.desc(), WaitlistEntry.created_at).all()

    def change_status(
        self,
        entry_id: uuid.UUID,
        from_status: str,
        to_status: str,
        note: str = "",
    ) -> WaitlistEntry:
        """
        Move a card between columns with a compare-and-swap on its current status.

        Raises:
            ConcurrentModification: someone else moved the card after the caller read it
        """
        entry = self.get(entry_id)
        updated = (
            self._query()
            .filter(WaitlistEntry.id == entry_id, WaitlistEntry.status == from_status)
            .update({WaitlistEntry.status: to_status}, synchronize_session=False)
        )
        if updated != 1:
            raise ConcurrentModification(
                f"Waitlist entry {entry_id} is no longer {from_status}; reload and retry"
            )
        self._record_event(entry_id, from_status, to_status, note)
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def list_events(self, entry_id: uuid.UUID) -> List[WaitlistEvent]:
        """Status history, newest first"""
        self.get(entry_id)
        return (
            self.db.query(WaitlistEvent)
            .filter(WaitlistEvent.clinic_id == self.clinic_id, WaitlistEvent.waitlist_entry_id == entry_id)
            .order_by(WaitlistEvent.created_at.desc())
            .all()
        )
