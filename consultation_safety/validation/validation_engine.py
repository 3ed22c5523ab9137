"""
Validation Engine

Core orchestrator of the clinical safety validation.
Runs every field checker against one consultation snapshot, scores the
findings, and assembles the ValidationResult the form uses to gate
submission.
"""

import time
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError as RecordShapeError

from ..models.consultation import ConsultationRecord
from ..models.validation_result import ValidationResult
from ..config.constants import MAX_DISPLAYED_SUGGESTIONS
from ..utils.error_handler import (
    EngineError,
    ErrorCode,
    ErrorHandler,
    EvaluationOutcome,
    checker_failed_error,
    invalid_record_error,
)
from ..utils.logger import get_logger

from .rule_loader import RuleCatalog, get_default_catalog
from .quality_scorer import QualityScorer, get_quality_scorer
from .field_validators import (
    check_required_fields,
    check_medication_safety,
    check_diagnosis_treatment_consistency,
    check_completeness,
    check_clinical_quality,
)

logger = get_logger(__name__)

RecordInput = Union[ConsultationRecord, Mapping[str, Any]]


class ValidationEngine:
    """
    Main validation engine for consultation records.

    Orchestrates the complete validation workflow:
    1. Coerce the input into a ConsultationRecord
    2. Run the five field checkers in a fixed order
    3. Calculate the quality and completeness scores
    4. Determine validity from critical-severity errors
    """

    def __init__(
        self,
        catalog: Optional[RuleCatalog] = None,
        scorer: Optional[QualityScorer] = None
    ):
        """
        Initialize the ValidationEngine.

        Args:
            catalog: Rule catalog (packaged catalog if None)
            scorer: QualityScorer instance (uses singleton if None)
        """
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.scorer = scorer or get_quality_scorer()
        self.error_handler = ErrorHandler(logger)

    def validate(self, record: RecordInput) -> ValidationResult:
        """
        Validate a consultation record.

        This is the main entry point for validation. Absent optional fields
        are data, not failures; only an input that cannot be read as a
        consultation, or a checker crashing, raises.

        Args:
            record: ConsultationRecord, or a mapping with its fields

        Returns:
            ValidationResult

        Raises:
            EngineError: If the validator itself could not evaluate the record
        """
        start_time = time.perf_counter()
        record = self._coerce_record(record)

        required_errors = self._run_checker(check_required_fields, record)
        medication_errors = self._run_checker(check_medication_safety, record)
        consistency_warnings = self._run_checker(check_diagnosis_treatment_consistency, record)
        completeness_warnings = self._run_checker(check_completeness, record)
        quality_suggestions = self._run_checker(check_clinical_quality, record)

        all_errors = required_errors + medication_errors
        all_warnings = consistency_warnings + completeness_warnings

        scores = self.scorer.calculate(all_errors, all_warnings, record)

        # High and medium medication findings are reported but do not block
        is_valid = not any(error.is_blocking for error in all_errors)

        result = ValidationResult(
            is_valid=is_valid,
            critical_errors=all_errors,
            warnings=all_warnings,
            suggestions=quality_suggestions,
            score=scores.score,
            completeness=scores.completeness
        )

        logger.log_evaluation(
            is_valid=result.is_valid,
            score=result.score,
            completeness=result.completeness,
            errors=len(result.critical_errors),
            warnings=len(result.warnings),
            suggestions=len(result.suggestions)
        )
        logger.log_performance("validate", time.perf_counter() - start_time)

        return result

    def evaluate(self, record: RecordInput) -> EvaluationOutcome:
        """
        Validate without raising.

        Returns:
            EvaluationOutcome.ok(ValidationResult), or EvaluationOutcome.fail(EngineError)
            when the validator could not run
        """
        return self.error_handler.wrap_operation(self.validate, record)

    def _coerce_record(self, record: RecordInput) -> ConsultationRecord:
        if isinstance(record, ConsultationRecord):
            return record

        if not isinstance(record, Mapping):
            raise EngineError(
                f"Expected a consultation record, got {type(record).__name__}",
                code=ErrorCode.INVALID_RECORD,
                details={'type': type(record).__name__}
            )

        try:
            return ConsultationRecord.model_validate(dict(record))
        except RecordShapeError as e:
            # Rejected values go through the logger's patient-data masking
            logger.warning(
                "Consultation record rejected",
                rejected={
                    str(error['loc'][0]) if error['loc'] else 'record': error.get('input')
                    for error in e.errors()
                }
            )
            raise invalid_record_error(e) from e

    def _run_checker(
        self,
        checker: Callable[[ConsultationRecord, RuleCatalog], list],
        record: ConsultationRecord
    ) -> list:
        try:
            return checker(record, self.catalog)
        except Exception as e:
            raise checker_failed_error(checker.__name__, e) from e

    def generate_validation_report(
        self,
        result: ValidationResult,
        max_suggestions: int = MAX_DISPLAYED_SUGGESTIONS
    ) -> str:
        """
        Generate a human-readable validation report.

        Args:
            result: Validation result
            max_suggestions: How many suggestions to list

        Returns:
            Formatted validation report as string
        """
        report_lines = []

        report_lines.append("=" * 80)
        report_lines.append("VALIDACIÓN MÉDICA")
        report_lines.append("=" * 80)
        report_lines.append(f"Estado: {'Consulta válida' if result.is_valid else 'Requiere corrección'}")
        report_lines.append(f"Calidad: {result.score}/100 ({result.score_level.value})")
        report_lines.append(f"Completitud: {result.completeness}% ({result.completeness_level.value})")
        report_lines.append(f"Catálogo: {self.catalog.version}")
        report_lines.append("")

        report_lines.append("-" * 80)
        report_lines.append(f"ERRORES CRÍTICOS: {len(result.critical_errors)}")
        report_lines.append("-" * 80)
        for error in result.critical_errors:
            report_lines.append(f"  ✗ [{error.severity.value}] {error.field}: {error.message}")
            if error.correction:
                report_lines.append(f"      Solución: {error.correction}")
        report_lines.append("")

        report_lines.append("-" * 80)
        report_lines.append(f"ADVERTENCIAS: {len(result.warnings)}")
        report_lines.append("-" * 80)
        for warning in result.warnings:
            report_lines.append(f"  ! [{warning.impact.value}] {warning.field}: {warning.message}")
            report_lines.append(f"      Sugerencia: {warning.suggestion}")
        report_lines.append("")

        report_lines.append("-" * 80)
        report_lines.append(f"SUGERENCIAS: {len(result.suggestions)}")
        report_lines.append("-" * 80)
        for suggestion in result.suggestions[:max_suggestions]:
            report_lines.append(f"  • [{suggestion.priority.value}] {suggestion.field}: {suggestion.suggestion}")
            report_lines.append(f"      Razón: {suggestion.rationale}")

        report_lines.append("")
        report_lines.append("=" * 80)

        return "\n".join(report_lines)

    def summarize(self, result: ValidationResult) -> Dict[str, Any]:
        """Counts and scores of a result, for logging and JSON export."""
        return {
            'is_valid': result.is_valid,
            'score': result.score,
            'completeness': result.completeness,
            'blocking_errors': len(result.blocking_errors),
            'errors': len(result.critical_errors),
            'warnings': len(result.warnings),
            'suggestions': len(result.suggestions),
            'catalog_version': self.catalog.version,
        }


_validation_engine_instance = None


def get_validation_engine() -> ValidationEngine:
    """
    Get singleton instance of ValidationEngine with the packaged catalog.

    Returns:
        ValidationEngine instance
    """
    global _validation_engine_instance
    if _validation_engine_instance is None:
        _validation_engine_instance = ValidationEngine()
    return _validation_engine_instance
