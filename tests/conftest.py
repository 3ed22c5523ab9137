"""Shared fixtures for the consultation safety tests."""

import pytest

from consultation_safety.models import ConsultationRecord
from consultation_safety.validation import RuleLoader, ValidationEngine


@pytest.fixture(scope="session")
def catalog():
    return RuleLoader().load_catalog()


@pytest.fixture
def engine(catalog):
    return ValidationEngine(catalog=catalog)


@pytest.fixture
def complete_data():
    """A consultation with nothing to flag."""
    return {
        "current_condition": "Dolor abdominal de 3 días, cólico, irradiado a fosa iliaca derecha, con náusea",
        "diagnosis": "Apendicitis aguda",
        "treatment": "Apendicectomía de urgencia, seguimiento en 7 días",
        "vital_signs": {
            "blood_pressure": "120/80",
            "heart_rate": 88,
            "temperature": 37.9,
        },
        "physical_examination": "Signo de McBurney positivo",
        "prognosis": "Bueno",
        "medications": [],
        "patient_age": 34,
        "patient_allergies": [],
    }


@pytest.fixture
def complete_record(complete_data):
    return ConsultationRecord(**complete_data)


@pytest.fixture
def make_record(complete_data):
    """Build a record from the complete one with some fields replaced."""
    def _make(**changes):
        data = dict(complete_data)
        data.update(changes)
        return ConsultationRecord(**data)
    return _make
