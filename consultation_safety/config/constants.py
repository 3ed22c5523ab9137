"""
Application Constants and Enumerations

Defines the enums shared by the catalog, the checkers and the result models:
rule categories, finding severities, warning impacts, suggestion priorities
and score levels.

KEY DESIGN PRINCIPLES:

1. CRITICAL ERRORS BLOCK, EVERYTHING ELSE ADVISES:
   - Only findings with severity "critical" make a consultation invalid
   - Warnings and suggestions never block submission

2. ALL-AT-ONCE VALIDATION:
   - Every checker runs on every evaluation
   - The clinician sees everything wrong in a single pass

3. RULES ARE DATA:
   - Keyword lists, thresholds and messages live in validation_rules.yaml
   - Checker code never hardcodes clinical terminology
"""

from enum import Enum


class RuleCategory(str, Enum):
    """Catalog rule categories"""
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class RuleSeverity(str, Enum):
    """Severity documented on a catalog rule"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ErrorSeverity(str, Enum):
    """Severity of a ValidationError finding"""
    CRITICAL = "critical"  # Blocks submission
    HIGH = "high"
    MEDIUM = "medium"


class WarningImpact(str, Enum):
    """What a ValidationWarning affects"""
    QUALITY = "quality"
    SAFETY = "safety"
    COMPLETENESS = "completeness"


class SuggestionPriority(str, Enum):
    """Priority of a ValidationSuggestion"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ScoreLevel(str, Enum):
    """Gauge bands for the quality and completeness scores"""
    HIGH = "high"  # >= 80
    MEDIUM = "medium"  # 60 - 79
    LOW = "low"  # < 60


class RuleKind(str, Enum):
    """Kinds of checks a catalog rule describes"""
    REQUIRED = "required"
    CONSISTENCY = "consistency"
    HIGH_RISK = "high_risk"
    ALLERGY_CONTRAINDICATION = "allergy_contraindication"
    PEDIATRIC_CONTRAINDICATION = "pediatric_contraindication"
    GERIATRIC_RISK = "geriatric_risk"
    DOSAGE_SAFETY = "dosage_safety"
    DRUG_INTERACTION = "drug_interaction"
    COMPLETENESS = "completeness"
    SPECIFICITY = "specificity"
    DETAIL_LEVEL = "detail_level"
    FOLLOW_UP = "follow_up"
    PATIENT_EDUCATION = "patient_education"


# Fields that must be filled before a consultation can be saved
REQUIRED_FIELDS = [
    "current_condition",
    "diagnosis",
    "treatment",
]


# Fields that only count towards completeness
OPTIONAL_FIELDS = [
    "vital_signs",
    "physical_examination",
    "prognosis",
]


# Catalog rule ids emitted by the required-field checker, per field
REQUIRED_FIELD_RULE_IDS = {
    "current_condition": "missing_current_condition",
    "diagnosis": "missing_diagnosis",
    "treatment": "missing_treatment",
}


# Every rule id the checkers reference. The catalog must define all of them.
ENFORCED_RULE_IDS = [
    "missing_current_condition",
    "missing_diagnosis",
    "missing_treatment",
    "inconsistent_diagnosis_treatment",
    "high_risk_medication",
    "allergy_contraindication",
    "pediatric_medication",
    "geriatric_consideration",
    "missing_vital_signs",
    "incomplete_vital_signs",
    "missing_physical_exam",
    "missing_prognosis",
    "vague_diagnosis",
    "insufficient_symptoms",
    "missing_follow_up",
    "missing_patient_education",
]


# Score thresholds for gauge bands
SCORE_LEVEL_HIGH_THRESHOLD = 80
SCORE_LEVEL_MEDIUM_THRESHOLD = 60


# Default debounce before a real-time re-evaluation (milliseconds)
DEFAULT_DEBOUNCE_MS = 1000


# Suggestions shown in the validation panel
MAX_DISPLAYED_SUGGESTIONS = 5


# Patient data to mask in logs
PHI_FIELDS = [
    "patient_allergies",
    "patient_conditions",
    "patient_age",
    "current_condition",
    "physical_examination",
]
