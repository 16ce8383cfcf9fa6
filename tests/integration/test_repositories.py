"""Repository tests: clinic scoping and conditional updates against the database"""

import pytest
from datetime import date
from sqlalchemy.orm import Session
from dental_ledger.domain.exceptions import ConcurrentModification, EntityNotFound, PersistenceFailure
from dental_ledger.domain.installments import generate_installment_plan
from dental_ledger.infrastructure.database.models import Receivable
from dental_ledger.infrastructure.database.repositories import ReceivableRepository
from dental_ledger.infrastructure.database.session import unit_of_work


@pytest.fixture
def plan_rows(db: Session) -> list[Receivable]:
    with unit_of_work(db):
        rows = ReceivableRepository(db, "clinic-a").create_installments(
            generate_installment_plan(30000, 3, date(2030, 1, 10)),
            patient_id=None,
            origin_type="installment",
        )
    return rows


def test_created_rows_are_stamped_with_clinic(db: Session, plan_rows):
    assert all(r.clinic_id == "clinic-a" for r in plan_rows)
    assert all(r.version == 1 for r in plan_rows)
    assert ReceivableRepository(db, "clinic-b").list_receivables() == []


def test_get_from_other_clinic_raises_not_found(db: Session, plan_rows):
    with pytest.raises(EntityNotFound):
        ReceivableRepository(db, "clinic-b").get(plan_rows[0].id)


def test_mark_renegotiated_rejects_stale_version(db: Session, plan_rows):
    """A payment between read and renegotiation aborts the whole batch"""
    repo = ReceivableRepository(db, "clinic-a")
    observed = {r.id: r.version for r in plan_rows}

    with unit_of_work(db):
        repo.settle(plan_rows[1].id, 4000, expected_version=1)

    with pytest.raises(ConcurrentModification):
        with unit_of_work(db):
            repo.mark_renegotiated(observed)

    assert all(r.status == "open" for r in repo.list_receivables())


def test_mark_renegotiated_bumps_versions(db: Session, plan_rows):
    repo = ReceivableRepository(db, "clinic-a")

    with unit_of_work(db):
        updated = repo.mark_renegotiated({r.id: r.version for r in plan_rows})

    assert updated == 3
    rows = repo.list_receivables()
    assert all(r.status == "renegotiated" for r in rows)
    assert all(r.version == 2 for r in rows)


def test_unit_of_work_rolls_back_on_domain_error(db: Session, plan_rows):
    repo = ReceivableRepository(db, "clinic-a")

    with pytest.raises(ConcurrentModification):
        with unit_of_work(db):
            repo.settle(plan_rows[0].id, 10000, expected_version=1)
            repo.settle(plan_rows[0].id, 100, expected_version=1)

    row = repo.get(plan_rows[0].id)
    assert row.status == "open"
    assert row.paid_amount_cents == 0


def test_unit_of_work_wraps_store_errors(db: Session):
    with pytest.raises(PersistenceFailure):
        with unit_of_work(db):
            db.add(Receivable(clinic_id="clinic-a", due_date=date(2030, 1, 10)))
            db.flush()
