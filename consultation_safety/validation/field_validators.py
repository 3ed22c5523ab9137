"""
Field Checkers for Consultation Records

Five independent checkers, each evaluating one concern of a consultation:
1. Required fields (the only hard gate on validity)
2. Diagnosis/treatment consistency
3. Medication safety (high-risk drugs, allergies, age contraindications)
4. Documentation completeness
5. Clinical-quality heuristics

Every checker is a pure function of (record, catalog): no I/O, no shared
state, same output for the same input. Messages and keyword lists come
from the RuleCatalog; matching is lowercase substring search.
"""

from typing import Any, List, Optional, Sequence

from ..models.consultation import ConsultationRecord
from ..models.validation_result import ValidationError, ValidationWarning, ValidationSuggestion
from ..config.constants import (
    ErrorSeverity,
    WarningImpact,
    SuggestionPriority,
    REQUIRED_FIELDS,
    REQUIRED_FIELD_RULE_IDS,
)
from .rule_loader import RuleCatalog, ValidationRule


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def is_blank(value: Optional[Any]) -> bool:
    """
    True when a narrative field counts as not provided.

    None, empty and whitespace-only strings are blank. Non-string values are
    blank only when falsy (empty mapping, empty list, ...).
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return not value


def contains_any(text: str, keywords: Sequence[str]) -> bool:
    """Case-insensitive substring match of any keyword in text."""
    text_lower = text.lower()
    return any(keyword.lower() in text_lower for keyword in keywords)


def _create_error(
    rule: ValidationRule,
    severity: ErrorSeverity,
    **values: Any
) -> ValidationError:
    return ValidationError(
        field=rule.field,
        rule_kind=rule.rule_kind,
        message=rule.format_message(**values),
        severity=severity,
        correction=rule.format_correction(**values),
        rule_id=rule.id
    )


def _create_warning(
    rule: ValidationRule,
    impact: WarningImpact,
    **values: Any
) -> ValidationWarning:
    return ValidationWarning(
        field=rule.field,
        message=rule.format_message(**values),
        suggestion=rule.format_suggestion(**values),
        impact=impact,
        rule_id=rule.id
    )


def _create_suggestion(
    rule: ValidationRule,
    priority: SuggestionPriority
) -> ValidationSuggestion:
    # Quality rules keep the suggestion text in "message" and the rationale in "suggestion"
    return ValidationSuggestion(
        field=rule.field,
        suggestion=rule.format_message(),
        rationale=rule.format_suggestion(),
        priority=priority,
        rule_id=rule.id
    )


# =============================================================================
# FIELD CHECKERS
# =============================================================================

def check_required_fields(
    record: ConsultationRecord,
    catalog: RuleCatalog
) -> List[ValidationError]:
    """
    Check that current condition, diagnosis and treatment are filled in.

    Requirements:
    - Each of the three fields must be present and non-blank after trimming
    - A missing field yields one critical error

    Args:
        record: Consultation being edited
        catalog: Rule catalog

    Returns:
        List of critical ValidationError, in field order
    """
    errors = []

    for field_name in REQUIRED_FIELDS:
        if is_blank(getattr(record, field_name)):
            rule = catalog.get_rule(REQUIRED_FIELD_RULE_IDS[field_name])
            errors.append(_create_error(rule, ErrorSeverity.CRITICAL))

    return errors


def check_diagnosis_treatment_consistency(
    record: ConsultationRecord,
    catalog: RuleCatalog
) -> List[ValidationWarning]:
    """
    Check that the treatment covers the conditions named in the diagnosis.

    For every catalog condition keyword found in the diagnosis, at least one
    of its expected treatment keywords must appear in the treatment text.
    One quality warning per condition that has none; the suggestion lists
    the first three expected treatments.

    Args:
        record: Consultation being edited
        catalog: Rule catalog

    Returns:
        List of ValidationWarning (impact=quality)
    """
    warnings = []

    if is_blank(record.diagnosis) or is_blank(record.treatment):
        return warnings

    diagnosis_lower = record.diagnosis.lower()
    treatment_lower = record.treatment.lower()
    rule = catalog.get_rule("inconsistent_diagnosis_treatment")

    for condition, expected_treatments in catalog.diagnosis_treatment_patterns.items():
        if condition not in diagnosis_lower:
            continue

        if not any(treatment in treatment_lower for treatment in expected_treatments):
            warnings.append(_create_warning(
                rule,
                WarningImpact.QUALITY,
                condition=condition,
                expected=", ".join(expected_treatments[:3])
            ))

    return warnings


def check_medication_safety(
    record: ConsultationRecord,
    catalog: RuleCatalog
) -> List[ValidationError]:
    """
    Check every prescribed medication against the patient.

    Four independent checks per medication:
    - High-risk medication -> high (monitoring plan required)
    - Name matches a patient allergy -> critical, one per allergy
    - Aspirin family below the pediatric age -> critical (Reye's syndrome)
    - Benzodiazepine family above the geriatric age -> medium

    Args:
        record: Consultation being edited
        catalog: Rule catalog

    Returns:
        List of ValidationError, grouped by medication in entry order
    """
    errors = []

    if not record.medications:
        return errors

    thresholds = catalog.thresholds
    high_risk_rule = catalog.get_rule("high_risk_medication")
    allergy_rule = catalog.get_rule("allergy_contraindication")
    pediatric_rule = catalog.get_rule("pediatric_medication")
    geriatric_rule = catalog.get_rule("geriatric_consideration")

    for medication in record.medications:
        med_name = medication.normalized_name
        display_name = medication.name or ""

        if contains_any(med_name, catalog.high_risk_medications):
            errors.append(_create_error(
                high_risk_rule, ErrorSeverity.HIGH, medication=display_name
            ))

        for allergy in record.patient_allergies:
            allergy_lower = allergy.strip().lower()
            # An empty allergy would match every name
            if allergy_lower and allergy_lower in med_name:
                errors.append(_create_error(
                    allergy_rule, ErrorSeverity.CRITICAL,
                    medication=display_name, allergy=allergy
                ))

        if record.patient_age is None:
            continue

        if (record.patient_age < thresholds.pediatric_age
                and contains_any(med_name, catalog.pediatric_contraindicated_medications)):
            errors.append(_create_error(
                pediatric_rule, ErrorSeverity.CRITICAL, medication=display_name
            ))

        if (record.patient_age > thresholds.geriatric_age
                and contains_any(med_name, catalog.geriatric_risk_medications)):
            errors.append(_create_error(
                geriatric_rule, ErrorSeverity.MEDIUM, medication=display_name
            ))

    return errors


def check_completeness(
    record: ConsultationRecord,
    catalog: RuleCatalog
) -> List[ValidationWarning]:
    """
    Check that vital signs, physical examination and prognosis are documented.

    Vital signs produce at most one warning: either "not recorded" when the
    mapping is absent or empty, or "incomplete" naming exactly which signs of
    the minimum set are missing.

    Args:
        record: Consultation being edited
        catalog: Rule catalog

    Returns:
        List of ValidationWarning (impact=completeness)
    """
    warnings = []
    vital_groups = catalog.vital_sign_keys

    if not record.vital_signs:
        warnings.append(_create_warning(
            catalog.get_rule("missing_vital_signs"),
            WarningImpact.COMPLETENESS,
            expected=_join_labels([group.label for group in vital_groups])
        ))
    else:
        missing = [
            group.label
            for group in vital_groups
            if not any(record.vital_signs.get(key) for key in group.keys)
        ]
        if missing:
            warnings.append(_create_warning(
                catalog.get_rule("incomplete_vital_signs"),
                WarningImpact.COMPLETENESS,
                missing=", ".join(missing)
            ))

    if is_blank(record.physical_examination):
        warnings.append(_create_warning(
            catalog.get_rule("missing_physical_exam"),
            WarningImpact.COMPLETENESS
        ))

    if is_blank(record.prognosis):
        warnings.append(_create_warning(
            catalog.get_rule("missing_prognosis"),
            WarningImpact.COMPLETENESS
        ))

    return warnings


def check_clinical_quality(
    record: ConsultationRecord,
    catalog: RuleCatalog
) -> List[ValidationSuggestion]:
    """
    Suggest improvements to the clinical narrative.

    Independent heuristics, any subset may fire:
    (a) short diagnosis containing a vague term -> medium
    (b) current condition present but short -> high
    (c) treatment without a follow-up plan -> medium
    (d) medications prescribed but no patient education in treatment -> medium

    Args:
        record: Consultation being edited
        catalog: Rule catalog

    Returns:
        List of ValidationSuggestion
    """
    suggestions = []
    thresholds = catalog.thresholds

    if record.diagnosis:
        if (contains_any(record.diagnosis, catalog.vague_diagnosis_terms)
                and len(record.diagnosis) < thresholds.vague_diagnosis_max_length):
            suggestions.append(_create_suggestion(
                catalog.get_rule("vague_diagnosis"), SuggestionPriority.MEDIUM
            ))

    if record.current_condition and len(record.current_condition) < thresholds.current_condition_min_length:
        suggestions.append(_create_suggestion(
            catalog.get_rule("insufficient_symptoms"), SuggestionPriority.HIGH
        ))

    if record.treatment:
        if not contains_any(record.treatment, catalog.follow_up_terms):
            suggestions.append(_create_suggestion(
                catalog.get_rule("missing_follow_up"), SuggestionPriority.MEDIUM
            ))

        if record.medications and not contains_any(record.treatment, catalog.patient_education_terms):
            suggestions.append(_create_suggestion(
                catalog.get_rule("missing_patient_education"), SuggestionPriority.MEDIUM
            ))

    return suggestions


def _join_labels(labels: List[str]) -> str:
    """'a, b y c' style list for Spanish messages."""
    if len(labels) <= 1:
        return "".join(labels)
    return f"{', '.join(labels[:-1])} y {labels[-1]}"

