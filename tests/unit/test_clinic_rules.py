"""Unit tests for schedule, waitlist and anamnesis rules"""

import pytest
from datetime import datetime, timezone
from dental_ledger.domain.anamnesis import normalize_anamnesis
from dental_ledger.domain.exceptions import InvalidSchedule, InvalidStatus, ValidationFailure
from dental_ledger.domain.scheduling import (
    WaitlistStatus,
    transition_note,
    validate_appointment_status,
    validate_appointment_window,
    validate_waitlist_status,
)


def test_appointment_window_accepts_forward_slot():
    validate_appointment_window(datetime(2030, 3, 10, 9, 0), datetime(2030, 3, 10, 9, 30))


@pytest.mark.parametrize("end_minute", [0, 15])
def test_appointment_window_rejects_empty_or_inverted_slot(end_minute):
    with pytest.raises(InvalidSchedule):
        validate_appointment_window(datetime(2030, 3, 10, 9, 30), datetime(2030, 3, 10, 9, end_minute))


def test_appointment_window_compares_naive_as_utc():
    start = datetime(2030, 3, 10, 12, 0, tzinfo=timezone.utc)

    with pytest.raises(InvalidSchedule):
        validate_appointment_window(start, datetime(2030, 3, 10, 11, 0))


def test_invalid_schedule_is_a_validation_failure():
    assert issubclass(InvalidSchedule, ValidationFailure)
    assert issubclass(InvalidStatus, ValidationFailure)


def test_status_validation():
    assert validate_appointment_status("no_show") == "no_show"
    assert validate_waitlist_status("CONTACTING") == "CONTACTING"

    with pytest.raises(InvalidStatus):
        validate_appointment_status("SCHEDULED")
    with pytest.raises(InvalidStatus):
        validate_waitlist_status("scheduled")


def test_active_waitlist_columns_exclude_closed_ones():
    assert WaitlistStatus.DONE not in WaitlistStatus.ACTIVE
    assert WaitlistStatus.CANCELLED not in WaitlistStatus.ACTIVE
    assert set(WaitlistStatus.ACTIVE) < set(WaitlistStatus.ALL)


def test_transition_note_defaults():
    assert transition_note(None, "NEW") == "Paciente adicionado à fila"
    assert transition_note("NEW", "CONTACTING") == "Status alterado de NEW para CONTACTING"
    assert transition_note("NEW", "CONTACTING", "  ligou 2x  ") == "ligou 2x"
    assert transition_note("NEW", "DONE", "   ") == "Status alterado de NEW para DONE"


def test_normalize_anamnesis_clears_details_of_unflagged_conditions():
    normalized = normalize_anamnesis(
        {
            "has_allergy": True,
            "allergy_details": "Penicilina",
            "has_diabetes": False,
            "diabetes_details": "tipo 2",
            "medication_details": "losartana",
            "alert_message": "Confirmar alergia",
        }
    )

    assert normalized["allergy_details"] == "Penicilina"
    assert normalized["diabetes_details"] == ""
    assert normalized["uses_medication"] is False
    assert normalized["medication_details"] == ""
    assert normalized["alert_message"] == "Confirmar alergia"


def test_normalize_anamnesis_returns_copy():
    fields = {"has_heart_disease": False, "heart_details": "sopro"}

    normalize_anamnesis(fields)

    assert fields["heart_details"] == "sopro"
