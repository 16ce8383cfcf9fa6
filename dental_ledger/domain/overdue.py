"""Derived overdue status for receivables and payables"""

from datetime import date

from dental_ledger.domain.models import OVERDUE, InstallmentStatus


def is_overdue(status: str, due_date: date, today: date) -> bool:
    """Open items past their due date are overdue; the due date itself is not late yet"""
    return status == InstallmentStatus.OPEN and due_date < today


def display_status(status: str, due_date: date, today: date | None = None) -> str:
    """Status shown to users: the persisted status, or "overdue" layered over open"""
    today = today or date.today()
    return OVERDUE if is_overdue(status, due_date, today) else status
