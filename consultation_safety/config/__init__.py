"""
Configuration Module

Manages the rule catalog data, constants and runtime settings.

Components:
- validation_rules.yaml: Clinical rule catalog (rules, keyword lists, thresholds)
- constants.py: Application constants and enums
- settings.py: Validator settings from environment variables
"""

from .constants import ErrorSeverity, WarningImpact, SuggestionPriority, ScoreLevel
from .settings import ValidatorSettings, load_settings

__all__ = [
    "ErrorSeverity",
    "WarningImpact",
    "SuggestionPriority",
    "ScoreLevel",
    "ValidatorSettings",
    "load_settings",
]
