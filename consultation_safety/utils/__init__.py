"""
Utilities Module

Helper functions and utilities used across the engine.

Components:
- logger.py: Centralized logging with patient data masking
- error_handler.py: Engine exceptions and the EvaluationOutcome wrapper
"""

from .logger import get_logger
from .error_handler import (
    ConsultationSafetyError,
    CatalogError,
    EngineError,
    ErrorCode,
    ErrorLevel,
    EvaluationOutcome,
)

__all__ = [
    "get_logger",
    "ConsultationSafetyError",
    "CatalogError",
    "EngineError",
    "ErrorCode",
    "ErrorLevel",
    "EvaluationOutcome",
]
