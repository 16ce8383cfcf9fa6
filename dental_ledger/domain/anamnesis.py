"""Patient health questionnaire (anamnesis)"""

from typing import Any, Dict

# Condition flag -> free-text field that only means something while the flag is set
DETAIL_FIELDS = {
    "has_allergy": "allergy_details",
    "has_heart_disease": "heart_details",
    "has_diabetes": "diabetes_details",
    "has_hypertension": "hypertension_details",
    "has_bleeding_disorder": "bleeding_details",
    "uses_medication": "medication_details",
}


def normalize_anamnesis(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Clear the detail text of every condition that is not flagged.

    Returns a new dict; unknown keys pass through untouched.
    """
    normalized = dict(fields)
    for flag, detail in DETAIL_FIELDS.items():
        if not normalized.get(flag):
            normalized[flag] = False
            normalized[detail] = ""
    return normalized
