"""Tests for the five field checkers."""

import pytest

from consultation_safety.config.constants import (
    ErrorSeverity,
    WarningImpact,
    SuggestionPriority,
)
from consultation_safety.models import MedicationEntry
from consultation_safety.validation.field_validators import (
    check_required_fields,
    check_diagnosis_treatment_consistency,
    check_medication_safety,
    check_completeness,
    check_clinical_quality,
    is_blank,
    contains_any,
)


# =============================================================================
# HELPERS
# =============================================================================

@pytest.mark.parametrize("value, expected", [
    (None, True),
    ("", True),
    ("   \n", True),
    ("x", False),
    ({}, True),
    ({"heart_rate": 80}, False),
    (0, True),
])
def test_is_blank(value, expected):
    assert is_blank(value) is expected


def test_contains_any_is_case_insensitive():
    assert contains_any("WARFARINA 5 mg", ["warfarina"])
    assert not contains_any("paracetamol", ["warfarina", "heparina"])


# =============================================================================
# REQUIRED FIELDS
# =============================================================================

def test_required_fields_complete_record_passes(complete_record, catalog):
    assert check_required_fields(complete_record, catalog) == []


def test_required_fields_reports_each_missing_field_in_order(make_record, catalog):
    record = make_record(current_condition="", diagnosis=None, treatment="   ")

    errors = check_required_fields(record, catalog)

    assert [e.field for e in errors] == ["current_condition", "diagnosis", "treatment"]
    assert all(e.severity == ErrorSeverity.CRITICAL for e in errors)
    assert all(e.rule_kind == "required" for e in errors)
    assert errors[1].message == "El diagnóstico es obligatorio"
    assert errors[1].rule_id == "missing_diagnosis"


def test_required_fields_single_missing(make_record, catalog):
    errors = check_required_fields(make_record(treatment=""), catalog)

    assert len(errors) == 1
    assert errors[0].field == "treatment"


# =============================================================================
# DIAGNOSIS / TREATMENT CONSISTENCY
# =============================================================================

def test_consistency_warns_when_expected_treatment_missing(make_record, catalog):
    record = make_record(diagnosis="hipertensión arterial", treatment="reposo y dieta")

    warnings = check_diagnosis_treatment_consistency(record, catalog)

    assert len(warnings) == 1
    warning = warnings[0]
    assert warning.impact == WarningImpact.QUALITY
    assert warning.field == "diagnosis_treatment"
    assert "hipertensión" in warning.message
    assert warning.suggestion == "Considerar: antihipertensivos, ieca, ara"


def test_consistency_passes_when_any_expected_treatment_present(make_record, catalog):
    record = make_record(
        diagnosis="Hipertensión arterial sistémica",
        treatment="Losartán, bloqueadores de calcio, control en 1 mes"
    )

    assert check_diagnosis_treatment_consistency(record, catalog) == []


def test_consistency_one_warning_per_unmatched_condition(make_record, catalog):
    record = make_record(
        diagnosis="Diabetes tipo 2 e hipertensión con ansiedad",
        treatment="Metformina 850 mg cada 12 horas"
    )

    warnings = check_diagnosis_treatment_consistency(record, catalog)

    conditions = [w.message for w in warnings]
    assert len(warnings) == 2
    assert "hipertensión" in conditions[0]
    assert "ansiedad" in conditions[1]


def test_consistency_ignores_uncataloged_diagnosis(complete_record, catalog):
    assert check_diagnosis_treatment_consistency(complete_record, catalog) == []


def test_consistency_skipped_without_treatment(make_record, catalog):
    record = make_record(diagnosis="Asma", treatment="")

    assert check_diagnosis_treatment_consistency(record, catalog) == []


# =============================================================================
# MEDICATION SAFETY
# =============================================================================

def test_medication_safety_no_medications(complete_record, catalog):
    assert check_medication_safety(complete_record, catalog) == []


def test_high_risk_medication_is_high_severity(make_record, catalog):
    record = make_record(medications=[MedicationEntry(name="Warfarina 5mg")])

    errors = check_medication_safety(record, catalog)

    assert len(errors) == 1
    assert errors[0].severity == ErrorSeverity.HIGH
    assert errors[0].rule_kind == "high_risk"
    assert errors[0].message.startswith("Warfarina 5mg es un medicamento de alto riesgo")
    assert errors[0].correction == "Especificar plan de monitoreo y seguimiento"


def test_allergy_contraindication_is_critical(make_record, catalog):
    record = make_record(
        patient_allergies=["penicilina"],
        medications=[MedicationEntry(name="Amoxicilina + penicilina")]
    )

    errors = check_medication_safety(record, catalog)

    assert len(errors) == 1
    assert errors[0].severity == ErrorSeverity.CRITICAL
    assert errors[0].rule_kind == "allergy_contraindication"
    assert "penicilina" in errors[0].message
    assert errors[0].correction == "Suspender medicamento y buscar alternativa"


def test_allergy_match_is_case_insensitive(make_record, catalog):
    record = make_record(
        patient_allergies=["Sulfas"],
        medications=[MedicationEntry(name="TRIMETOPRIM-SULFAS")]
    )

    errors = check_medication_safety(record, catalog)

    assert [e.rule_kind for e in errors] == ["allergy_contraindication"]


def test_blank_allergy_never_matches(make_record, catalog):
    record = make_record(
        patient_allergies=["", "  "],
        medications=[MedicationEntry(name="Paracetamol")]
    )

    assert check_medication_safety(record, catalog) == []


def test_aspirin_contraindicated_in_minors(make_record, catalog):
    record = make_record(patient_age=16, medications=[MedicationEntry(name="Aspirina 500mg")])

    errors = check_medication_safety(record, catalog)

    assert len(errors) == 1
    assert errors[0].severity == ErrorSeverity.CRITICAL
    assert errors[0].rule_kind == "pediatric_contraindication"
    assert "Reye" in errors[0].message
    assert "paracetamol" in errors[0].correction


@pytest.mark.parametrize("age", [18, 40, None])
def test_aspirin_allowed_from_pediatric_age(make_record, catalog, age):
    record = make_record(patient_age=age, medications=[MedicationEntry(name="Ácido acetilsalicílico")])

    assert check_medication_safety(record, catalog) == []


def test_benzodiazepine_flagged_in_elderly(make_record, catalog):
    record = make_record(patient_age=72, medications=[MedicationEntry(name="Diazepam 5 mg")])

    errors = check_medication_safety(record, catalog)

    assert len(errors) == 1
    assert errors[0].severity == ErrorSeverity.MEDIUM
    assert errors[0].rule_kind == "geriatric_risk"
    assert errors[0].correction == "Considerar dosis reducida y monitoreo estrecho"


def test_benzodiazepine_not_flagged_at_geriatric_age(make_record, catalog):
    record = make_record(patient_age=65, medications=[MedicationEntry(name="Lorazepam")])

    assert check_medication_safety(record, catalog) == []


def test_single_medication_can_produce_several_findings(make_record, catalog):
    record = make_record(
        patient_age=10,
        patient_allergies=["aspirina", "salicil"],
        medications=[MedicationEntry(name="Aspirina infantil")]
    )

    errors = check_medication_safety(record, catalog)

    assert [e.rule_kind for e in errors] == [
        "allergy_contraindication",
        "pediatric_contraindication",
    ]
    assert all(e.severity == ErrorSeverity.CRITICAL for e in errors)


def test_medication_findings_follow_entry_order(make_record, catalog):
    record = make_record(
        patient_age=80,
        medications=[
            MedicationEntry(name="Alprazolam"),
            MedicationEntry(name="Digoxina"),
        ]
    )

    errors = check_medication_safety(record, catalog)

    assert [e.rule_kind for e in errors] == ["geriatric_risk", "high_risk"]


def test_medication_without_name_is_ignored(make_record, catalog):
    record = make_record(patient_allergies=["penicilina"], medications=[MedicationEntry(dose="1 g")])

    assert check_medication_safety(record, catalog) == []


# =============================================================================
# COMPLETENESS
# =============================================================================

def test_completeness_complete_record_passes(complete_record, catalog):
    assert check_completeness(complete_record, catalog) == []


@pytest.mark.parametrize("vital_signs", [None, {}])
def test_missing_vital_signs_single_warning(make_record, catalog, vital_signs):
    warnings = check_completeness(make_record(vital_signs=vital_signs), catalog)

    assert len(warnings) == 1
    assert warnings[0].field == "vital_signs"
    assert warnings[0].impact == WarningImpact.COMPLETENESS
    assert warnings[0].message == "Signos vitales no registrados"
    assert warnings[0].suggestion == (
        "Registrar al menos presión arterial, frecuencia cardíaca y temperatura"
    )


def test_incomplete_vital_signs_names_missing_subset(make_record, catalog):
    warnings = check_completeness(make_record(vital_signs={"heart_rate": 80}), catalog)

    assert len(warnings) == 1
    assert warnings[0].message == "Signos vitales incompletos: faltan presión arterial, temperatura"
    assert warnings[0].rule_id == "incomplete_vital_signs"


def test_systolic_pressure_counts_as_blood_pressure(make_record, catalog):
    record = make_record(vital_signs={"systolic_pressure": 130, "heart_rate": 72, "temperature": 36.6})

    assert check_completeness(record, catalog) == []


def test_missing_exam_and_prognosis(make_record, catalog):
    warnings = check_completeness(make_record(physical_examination=None, prognosis="  "), catalog)

    assert [w.field for w in warnings] == ["physical_examination", "prognosis"]
    assert all(w.impact == WarningImpact.COMPLETENESS for w in warnings)


def test_structured_physical_examination_counts(make_record, catalog):
    record = make_record(physical_examination={"abdomen": "doloroso a la palpación"})

    assert check_completeness(record, catalog) == []


# =============================================================================
# CLINICAL QUALITY
# =============================================================================

def test_quality_complete_record_has_no_suggestions(complete_record, catalog):
    assert check_clinical_quality(complete_record, catalog) == []


def test_vague_short_diagnosis(make_record, catalog):
    suggestions = check_clinical_quality(make_record(diagnosis="Dolor lumbar"), catalog)

    assert len(suggestions) == 1
    assert suggestions[0].field == "diagnosis"
    assert suggestions[0].priority == SuggestionPriority.MEDIUM
    assert suggestions[0].suggestion == "Especificar más el diagnóstico"


def test_vague_but_long_diagnosis_is_fine(make_record, catalog):
    record = make_record(diagnosis="Dolor lumbar mecánico crónico bilateral")

    assert check_clinical_quality(record, catalog) == []


def test_short_current_condition(make_record, catalog):
    suggestions = check_clinical_quality(make_record(current_condition="Fiebre"), catalog)

    assert len(suggestions) == 1
    assert suggestions[0].field == "current_condition"
    assert suggestions[0].priority == SuggestionPriority.HIGH


def test_treatment_without_follow_up(make_record, catalog):
    suggestions = check_clinical_quality(make_record(treatment="Reposo relativo"), catalog)

    assert [s.rule_id for s in suggestions] == ["missing_follow_up"]


def test_medications_without_patient_education(make_record, catalog):
    record = make_record(medications=[MedicationEntry(name="Paracetamol 500 mg")])

    suggestions = check_clinical_quality(record, catalog)

    assert [s.rule_id for s in suggestions] == ["missing_patient_education"]


def test_patient_education_satisfies_heuristic(make_record, catalog):
    record = make_record(
        treatment="Paracetamol, control en 3 días, educación sobre signos de alarma",
        medications=[MedicationEntry(name="Paracetamol 500 mg")]
    )

    assert check_clinical_quality(record, catalog) == []


def test_quality_heuristics_fire_together(make_record, catalog):
    record = make_record(
        diagnosis="Malestar general",
        current_condition="Cansancio",
        treatment="Reposo",
        medications=[MedicationEntry(name="Complejo B")]
    )

    suggestions = check_clinical_quality(record, catalog)

    assert [s.rule_id for s in suggestions] == [
        "vague_diagnosis",
        "insufficient_symptoms",
        "missing_follow_up",
        "missing_patient_education",
    ]


def test_quality_skips_absent_fields(make_record, catalog):
    record = make_record(current_condition=None, diagnosis=None, treatment=None)

    assert check_clinical_quality(record, catalog) == []
