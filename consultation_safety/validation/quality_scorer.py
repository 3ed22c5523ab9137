"""
Quality Scorer

Turns checker output into the two panel gauges:
- quality score: starts at 100, penalized per error and per warning
- completeness: weighted presence of required and optional fields

The two are independent. Completeness measures what was written, the
quality score measures how correct and safe it is.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Sequence

from ..models.consultation import ConsultationRecord
from ..models.validation_result import ValidationError, ValidationWarning, get_score_level
from ..config.constants import (
    ErrorSeverity,
    WarningImpact,
    ScoreLevel,
    REQUIRED_FIELDS,
    OPTIONAL_FIELDS,
)
from .field_validators import is_blank


class QualityScores(NamedTuple):
    score: int
    completeness: int


class QualityScorer:
    """
    Calculates the quality and completeness scores for a consultation.
    """

    MAX_SCORE = 100

    # Points removed per error, by severity
    ERROR_PENALTIES = {
        ErrorSeverity.CRITICAL: 30,
        ErrorSeverity.HIGH: 20,
        ErrorSeverity.MEDIUM: 10,
    }

    # Points removed per warning, by impact
    WARNING_PENALTIES = {
        WarningImpact.SAFETY: 15,
        WarningImpact.QUALITY: 10,
        WarningImpact.COMPLETENESS: 5,
    }

    # Completeness weights (sum to 100)
    REQUIRED_WEIGHT = 70
    OPTIONAL_WEIGHT = 30

    def calculate_score(
        self,
        errors: Sequence[ValidationError],
        warnings: Sequence[ValidationWarning]
    ) -> int:
        """
        Calculate the quality score.

        Args:
            errors: All errors (any severity)
            warnings: All warnings

        Returns:
            Score in [0, 100]
        """
        score = self.MAX_SCORE

        for error in errors:
            score -= self.ERROR_PENALTIES.get(error.severity, 0)

        for warning in warnings:
            score -= self.WARNING_PENALTIES.get(warning.impact, 0)

        return max(0, score)

    def calculate_completeness(self, record: ConsultationRecord) -> int:
        """
        Calculate the completeness score.

        70% of the score is spread over the required fields and 30% over the
        optional ones; a field counts when it is filled in.

        Args:
            record: Consultation being edited

        Returns:
            Completeness in [0, 100], rounded half-up
        """
        filled_required = self._count_filled(record, REQUIRED_FIELDS)
        filled_optional = self._count_filled(record, OPTIONAL_FIELDS)

        completeness = (
            Decimal(filled_required) / len(REQUIRED_FIELDS) * self.REQUIRED_WEIGHT
            + Decimal(filled_optional) / len(OPTIONAL_FIELDS) * self.OPTIONAL_WEIGHT
        )

        return int(completeness.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def calculate(
        self,
        errors: Sequence[ValidationError],
        warnings: Sequence[ValidationWarning],
        record: ConsultationRecord
    ) -> QualityScores:
        """
        Calculate both scores.

        Args:
            errors: All errors (any severity)
            warnings: All warnings
            record: Consultation being edited

        Returns:
            QualityScores(score, completeness)
        """
        return QualityScores(
            score=self.calculate_score(errors, warnings),
            completeness=self.calculate_completeness(record)
        )

    def get_score_level(self, value: int) -> ScoreLevel:
        """Map a score to its gauge band (HIGH, MEDIUM, or LOW)."""
        return get_score_level(value)

    @staticmethod
    def _count_filled(record: ConsultationRecord, fields: List[str]) -> int:
        return sum(1 for field_name in fields if not is_blank(getattr(record, field_name)))


_quality_scorer_instance = None


def get_quality_scorer() -> QualityScorer:
    """
    Get singleton instance of QualityScorer.

    Returns:
        QualityScorer instance
    """
    global _quality_scorer_instance
    if _quality_scorer_instance is None:
        _quality_scorer_instance = QualityScorer()
    return _quality_scorer_instance
