"""
Data Models Module

Pydantic models for type safety and validation.

Components:
- consultation.py: Consultation record and medication entry (engine input)
- validation_result.py: Findings and validation result (engine output)
"""

from .consultation import ConsultationRecord, MedicationEntry
from .validation_result import (
    ValidationError,
    ValidationWarning,
    ValidationSuggestion,
    ValidationResult,
    get_score_level,
)

__all__ = [
    "ConsultationRecord",
    "MedicationEntry",
    "ValidationError",
    "ValidationWarning",
    "ValidationSuggestion",
    "ValidationResult",
    "get_score_level",
]
