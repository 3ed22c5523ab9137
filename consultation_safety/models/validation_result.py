"""
Validation Result Data Models

Output side of the engine: the three kinds of findings produced by the
field checkers and the ValidationResult that bundles them with the quality
and completeness scores.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from ..config.constants import (
    ErrorSeverity,
    WarningImpact,
    SuggestionPriority,
    ScoreLevel,
    RuleKind,
    SCORE_LEVEL_HIGH_THRESHOLD,
    SCORE_LEVEL_MEDIUM_THRESHOLD,
)


class ValidationError(BaseModel):
    """A blocking or near-blocking finding"""

    field: str = Field(..., description="Record field the finding is about")
    rule_kind: RuleKind = Field(..., description="Kind of check that produced it (required, high_risk, ...)")
    message: str = Field(..., description="Message shown to the clinician")
    severity: ErrorSeverity = Field(..., description="critical blocks submission; high/medium do not")
    correction: Optional[str] = Field(None, description="How to fix it")
    rule_id: Optional[str] = Field(None, description="Catalog rule the finding comes from")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "field": "medications",
                "rule_kind": "allergy_contraindication",
                "message": "Amoxicilina está contraindicado - paciente alérgico a penicilina",
                "severity": "critical",
                "correction": "Suspender medicamento y buscar alternativa",
                "rule_id": "allergy_contraindication"
            }
        }

    @property
    def is_blocking(self) -> bool:
        return self.severity == ErrorSeverity.CRITICAL


class ValidationWarning(BaseModel):
    """Non-blocking quality, safety or completeness concern"""

    field: str = Field(..., description="Record field the warning is about")
    message: str = Field(..., description="Message shown to the clinician")
    suggestion: str = Field(..., description="Suggested remedy")
    impact: WarningImpact = Field(..., description="quality, safety or completeness")
    rule_id: Optional[str] = Field(None, description="Catalog rule the warning comes from")

    class Config:
        frozen = True


class ValidationSuggestion(BaseModel):
    """Advisory improvement with no effect on validity"""

    field: str = Field(..., description="Record field the suggestion is about")
    suggestion: str = Field(..., description="What to improve")
    rationale: str = Field(..., description="Why it matters")
    priority: SuggestionPriority = Field(..., description="high, medium or low")
    rule_id: Optional[str] = Field(None, description="Catalog rule the suggestion comes from")

    class Config:
        frozen = True


def get_score_level(value: int) -> ScoreLevel:
    """
    Map a 0-100 score to its gauge band.

    Args:
        value: Quality or completeness score

    Returns:
        ScoreLevel (HIGH, MEDIUM, or LOW)
    """
    if value >= SCORE_LEVEL_HIGH_THRESHOLD:
        return ScoreLevel.HIGH
    elif value >= SCORE_LEVEL_MEDIUM_THRESHOLD:
        return ScoreLevel.MEDIUM
    else:
        return ScoreLevel.LOW


class ValidationResult(BaseModel):
    """Outcome of evaluating one consultation record"""

    is_valid: bool = Field(..., description="False when any critical-severity error is present")

    critical_errors: List[ValidationError] = Field(
        default_factory=list,
        description="Required-field and medication-safety errors, all severities"
    )

    warnings: List[ValidationWarning] = Field(
        default_factory=list,
        description="Consistency and completeness warnings"
    )

    suggestions: List[ValidationSuggestion] = Field(
        default_factory=list,
        description="Clinical-quality suggestions"
    )

    score: int = Field(..., ge=0, le=100, description="Quality score (0-100)")
    completeness: int = Field(..., ge=0, le=100, description="Completeness score (0-100)")

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "is_valid": True,
                "critical_errors": [],
                "warnings": [
                    {
                        "field": "prognosis",
                        "message": "Pronóstico no especificado",
                        "suggestion": "Agregar pronóstico estimado para el paciente",
                        "impact": "completeness",
                        "rule_id": "missing_prognosis"
                    }
                ],
                "suggestions": [],
                "score": 95,
                "completeness": 90
            }
        }

    @property
    def blocking_errors(self) -> List[ValidationError]:
        """Errors that keep the consultation from being submitted."""
        return [e for e in self.critical_errors if e.is_blocking]

    @property
    def score_level(self) -> ScoreLevel:
        return get_score_level(self.score)

    @property
    def completeness_level(self) -> ScoreLevel:
        return get_score_level(self.completeness)
