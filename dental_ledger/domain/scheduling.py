"""Appointment and waitlist rules"""

from datetime import datetime, timezone
from typing import Optional

from dental_ledger.domain.exceptions import InvalidSchedule, InvalidStatus


class AppointmentStatus:
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    ALL = (SCHEDULED, CONFIRMED, IN_PROGRESS, COMPLETED, CANCELLED, NO_SHOW)


class WaitlistStatus:
    """Kanban columns of the waitlist"""

    NEW = "NEW"
    CONTACTING = "CONTACTING"
    SCHEDULED = "SCHEDULED"
    UNREACHABLE = "UNREACHABLE"
    NO_SHOW = "NO_SHOW"
    CANCELLED = "CANCELLED"
    DONE = "DONE"

    ALL = (NEW, CONTACTING, SCHEDULED, UNREACHABLE, NO_SHOW, CANCELLED, DONE)
    ACTIVE = (NEW, CONTACTING, SCHEDULED, UNREACHABLE, NO_SHOW)


MIN_PRIORITY = 0
MAX_PRIORITY = 10


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def validate_appointment_window(start_at: datetime, end_at: datetime) -> None:
    """Naive values are read as UTC when compared with aware ones"""
    if (start_at.tzinfo is None) != (end_at.tzinfo is None):
        start_at, end_at = _as_utc(start_at), _as_utc(end_at)
    if end_at <= start_at:
        raise InvalidSchedule(f"Appointment must end after it starts ({start_at} - {end_at})")


def validate_appointment_status(status: str) -> str:
    if status not in AppointmentStatus.ALL:
        raise InvalidStatus(f"Unknown appointment status: {status}")
    return status


def validate_waitlist_status(status: str) -> str:
    if status not in WaitlistStatus.ALL:
        raise InvalidStatus(f"Unknown waitlist status: {status}")
    return status


def transition_note(from_status: Optional[str], to_status: str, note: str = "") -> str:
    """Note stored on a waitlist event; generated when the user gives none"""
    if note.strip():
        return note.strip()
    if from_status is None:
        return "Paciente adicionado à fila"
    return f"Status alterado de {from_status} para {to_status}"
