"""
Validation Module

Evaluates consultation records against the clinical rule catalog.

Components:
- validation_engine.py: Main validation orchestrator
- rule_loader.py: Loads the rule catalog from YAML
- field_validators.py: The five field checkers
- quality_scorer.py: Quality and completeness scores
- scheduler.py: Debounced real-time re-evaluation
"""

from .validation_engine import ValidationEngine, get_validation_engine
from .rule_loader import (
    RuleLoader,
    RuleCatalog,
    ValidationRule,
    get_rule_loader,
    get_default_catalog,
)
from .quality_scorer import QualityScorer, QualityScores, get_quality_scorer
from .scheduler import ReEvaluationScheduler, SchedulerState
from .field_validators import (
    check_required_fields,
    check_diagnosis_treatment_consistency,
    check_medication_safety,
    check_completeness,
    check_clinical_quality,
)

__all__ = [
    # Main components
    "ValidationEngine",
    "get_validation_engine",
    "RuleLoader",
    "RuleCatalog",
    "ValidationRule",
    "get_rule_loader",
    "get_default_catalog",
    "QualityScorer",
    "QualityScores",
    "get_quality_scorer",
    "ReEvaluationScheduler",
    "SchedulerState",

    # Field checkers
    "check_required_fields",
    "check_diagnosis_treatment_consistency",
    "check_medication_safety",
    "check_completeness",
    "check_clinical_quality",
]
