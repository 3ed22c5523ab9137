"""
Standardized error handling for the consultation safety engine.

Clinical findings (missing diagnosis, allergy contraindications, ...) are
ordinary return values and never pass through this module. It only covers
failures of the engine itself: a catalog that cannot be loaded, a record
that cannot be coerced, a checker that blows up on an unexpected shape.
"""

import traceback
from typing import Optional, Any, Dict, Callable
from enum import Enum
import logging

from pydantic import ValidationError as PydanticValidationError


class ErrorLevel(Enum):
    """Error severity levels."""
    CRITICAL = "critical"  # Engine cannot run at all
    ERROR = "error"  # Evaluation failed, engine can keep serving
    WARNING = "warning"  # Evaluation succeeded with issues
    INFO = "info"  # Informational message


class ErrorCode(Enum):
    """Standardized error codes for different error types."""

    # Catalog Errors (1xxx)
    CATALOG_NOT_FOUND = 1001
    CATALOG_PARSE_ERROR = 1002
    CATALOG_SCHEMA_ERROR = 1003
    CATALOG_RULE_MISSING = 1004

    # Evaluation Errors (2xxx)
    INVALID_RECORD = 2001
    EVALUATION_FAILED = 2002
    CHECKER_FAILED = 2003

    # Scheduler Errors (3xxx)
    NO_EVENT_LOOP = 3001


class ConsultationSafetyError(Exception):
    """Base exception class for consultation safety engine errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        level: ErrorLevel = ErrorLevel.ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize engine error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            level: Severity level from ErrorLevel enum
            details: Additional error details as dictionary
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.level = level
        self.details = details or {}
        self.cause = cause

        if cause:
            self.details['original_error'] = f"{type(cause).__name__}: {cause}"
            self.details['traceback'] = "".join(
                traceback.format_exception(type(cause), cause, cause.__traceback__)
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            'message': self.message,
            'code': self.code.value,
            'level': self.level.value,
            'details': self.details
        }


class CatalogError(ConsultationSafetyError):
    """Raised when the rule catalog cannot be loaded or is inconsistent."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.CATALOG_SCHEMA_ERROR, **kwargs):
        kwargs.setdefault('level', ErrorLevel.CRITICAL)
        super().__init__(message, code, **kwargs)


class EngineError(ConsultationSafetyError):
    """Raised when the validator itself could not evaluate a record."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.EVALUATION_FAILED, **kwargs):
        super().__init__(message, code, **kwargs)


class EvaluationOutcome:
    """
    Result wrapper for an evaluation that may fail.

    Lets the caller tell "the consultation is invalid" (ok, with a
    ValidationResult whose is_valid is False) apart from "the validator could
    not run" (failed, with an EngineError).
    """

    def __init__(
        self,
        success: bool,
        value: Optional[Any] = None,
        error: Optional[ConsultationSafetyError] = None
    ):
        self.success = success
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: Any) -> 'EvaluationOutcome':
        """Create a successful outcome."""
        return cls(success=True, value=value, error=None)

    @classmethod
    def fail(cls, error: ConsultationSafetyError) -> 'EvaluationOutcome':
        """Create a failed outcome."""
        return cls(success=False, value=None, error=error)

    @property
    def failed(self) -> bool:
        return not self.success

    def unwrap(self) -> Any:
        """
        Get the value or raise the error.

        Returns:
            The value if successful

        Raises:
            ConsultationSafetyError if failed
        """
        if self.success:
            return self.value
        raise self.error

    def unwrap_or(self, default: Any) -> Any:
        """Get the value or return a default."""
        return self.value if self.success else default

    def __repr__(self) -> str:
        if self.success:
            return f"EvaluationOutcome.ok({self.value!r})"
        return f"EvaluationOutcome.fail({self.error.code.name})"


class ErrorHandler:
    """Centralized error handler with logging."""

    def __init__(self, logger: Optional[Any] = None):
        """
        Initialize error handler.

        Args:
            logger: Logger to use (stdlib Logger or ConsultationLogger)
        """
        self.logger = logger or logging.getLogger(__name__)

    def handle(self, error: ConsultationSafetyError) -> None:
        """
        Handle an error by logging it appropriately.

        Args:
            error: The error to handle
        """
        log_message = f"[{error.code.name}] {error.message}"

        if error.details:
            summary = {k: v for k, v in error.details.items() if k != 'traceback'}
            if summary:
                log_message += f" | Details: {summary}"

        if error.level == ErrorLevel.CRITICAL:
            self.logger.critical(log_message)
        elif error.level == ErrorLevel.ERROR:
            self.logger.error(log_message)
        elif error.level == ErrorLevel.WARNING:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

    def wrap_operation(self, operation: Callable, *args, **kwargs) -> EvaluationOutcome:
        """
        Wrap an operation in error handling.

        Args:
            operation: The operation to execute
            *args: Arguments for the operation
            **kwargs: Keyword arguments for the operation

        Returns:
            EvaluationOutcome with the operation result or error
        """
        try:
            result = operation(*args, **kwargs)
            return EvaluationOutcome.ok(result)
        except ConsultationSafetyError as e:
            self.handle(e)
            return EvaluationOutcome.fail(e)
        except Exception as e:
            engine_error = EngineError(
                message=f"Unexpected error: {e}",
                code=ErrorCode.EVALUATION_FAILED,
                cause=e
            )
            self.handle(engine_error)
            return EvaluationOutcome.fail(engine_error)


# Convenience functions for common error scenarios

def catalog_not_found_error(path: str) -> CatalogError:
    """Create a catalog-not-found error."""
    return CatalogError(
        message=f"Validation rules file not found: {path}",
        code=ErrorCode.CATALOG_NOT_FOUND,
        details={'path': path}
    )


def invalid_record_error(cause: PydanticValidationError) -> EngineError:
    """
    Create an error for a record that could not be coerced.

    Keeps where and why each field was rejected, never the rejected value.
    """
    problems = [
        {'field': ".".join(str(part) for part in error['loc']), 'error': error['msg']}
        for error in cause.errors(include_url=False, include_input=False)
    ]
    return EngineError(
        message="Consultation record has an invalid shape",
        code=ErrorCode.INVALID_RECORD,
        details={'problems': problems}
    )


def checker_failed_error(checker_name: str, cause: Exception) -> EngineError:
    """Create an error for a checker that raised."""
    return EngineError(
        message=f"Checker '{checker_name}' failed during evaluation",
        code=ErrorCode.CHECKER_FAILED,
        details={'checker': checker_name},
        cause=cause
    )
