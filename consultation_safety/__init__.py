"""
Consultation Safety Validation

Rule-based clinical safety validation and quality scoring for in-progress
consultation records: blocking safety errors, non-blocking warnings,
improvement suggestions, and quality/completeness scores, re-evaluated
(debounced) while the clinician types.
"""

__version__ = "0.1.0"
__author__ = "Clinical Documentation Team"

from . import config
from . import models
from . import utils
from . import validation

from .models import ConsultationRecord, MedicationEntry, ValidationResult
from .validation import ValidationEngine, ReEvaluationScheduler, get_validation_engine

__all__ = [
    "config",
    "models",
    "utils",
    "validation",
    "ConsultationRecord",
    "MedicationEntry",
    "ValidationResult",
    "ValidationEngine",
    "ReEvaluationScheduler",
    "get_validation_engine",
]
