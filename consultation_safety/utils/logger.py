"""
Centralized logging infrastructure for the consultation safety engine.

Provides consistent log formatting across modules, structured key/value
payloads, optional rotating log files, and masking of patient data so that
allergies, conditions and clinical narrative never reach the logs in clear.
"""

import logging
import logging.handlers
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any
import json

from ..config.constants import PHI_FIELDS


class ConsultationLogger:
    """
    Centralized logger for the validation engine with consistent formatting.

    Features:
    - Structured logging: keyword arguments are appended as JSON
    - Console output, plus rotating files when enabled
    - Patient data masking for clinical fields
    """

    SENSITIVE_FIELDS = {
        field.replace('_', '') for field in PHI_FIELDS
    } | {'allergy', 'allergies', 'record'}

    def __init__(
        self,
        name: str,
        log_dir: str = "logs",
        log_level: str = "INFO",
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        enable_console: bool = True,
        enable_file: bool = False
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name (usually module name)
            log_dir: Directory for log files
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_bytes: Max size of log file before rotation
            backup_count: Number of backup files to keep
            enable_console: Whether to log to console
            enable_file: Whether to log to file
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        self.logger.handlers = []
        self.logger.propagate = True

        detailed_formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        simple_formatter = logging.Formatter(
            '%(levelname)s | %(name)s | %(message)s'
        )

        if enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(simple_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            Path(log_dir).mkdir(parents=True, exist_ok=True)

            log_file = os.path.join(log_dir, f"{name}_{datetime.now():%Y%m%d}.log")
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(file_handler)

            error_log_file = os.path.join(log_dir, f"{name}_errors_{datetime.now():%Y%m%d}.log")
            error_handler = logging.handlers.RotatingFileHandler(
                filename=error_log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(detailed_formatter)
            self.logger.addHandler(error_handler)

    def _mask_sensitive_data(self, data: Any) -> Any:
        """
        Mask patient data in log payloads.

        Args:
            data: Data to mask (dict, list, or scalar)

        Returns:
            Data with sensitive fields masked
        """
        if isinstance(data, dict):
            masked = {}
            for key, value in data.items():
                # Matches snake_case and camelCase spellings of the same field
                if str(key).replace('_', '').lower() in self.SENSITIVE_FIELDS:
                    masked[key] = "***MASKED***"
                else:
                    masked[key] = self._mask_sensitive_data(value)
            return masked
        elif isinstance(data, (list, tuple)):
            return [self._mask_sensitive_data(item) for item in data]
        elif isinstance(data, str):
            # Mexican CURP identifiers occasionally get pasted into free text
            curp_pattern = r'\b[A-Z]{4}\d{6}[HM][A-Z]{5}[A-Z0-9]\d\b'
            return re.sub(curp_pattern, '***CURP***', data)
        return data

    def _format(self, message: str, kwargs: Dict[str, Any]) -> str:
        if kwargs:
            masked_kwargs = self._mask_sensitive_data(kwargs)
            message = f"{message} | {json.dumps(masked_kwargs, ensure_ascii=False, default=str)}"
        return message

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(self._format(message, kwargs))

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._format(message, kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._format(message, kwargs))

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message with optional exception."""
        message = self._format(message, kwargs)
        if exception:
            message = f"{message} | Exception: {exception}"
        self.logger.error(message, exc_info=exception)

    def critical(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log critical message with optional exception."""
        message = self._format(message, kwargs)
        if exception:
            message = f"{message} | Exception: {exception}"
        self.logger.critical(message, exc_info=exception)

    # Specialized logging methods

    def log_evaluation(
        self,
        is_valid: bool,
        score: int,
        completeness: int,
        errors: int,
        warnings: int,
        suggestions: int
    ):
        """Log the outcome of one evaluation."""
        self.debug(
            "Evaluation finished",
            is_valid=is_valid,
            score=score,
            completeness=completeness,
            errors=errors,
            warnings=warnings,
            suggestions=suggestions
        )

    def log_performance(
        self,
        operation: str,
        duration_seconds: float,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log performance metrics."""
        self.debug(
            "Performance metric",
            operation=operation,
            duration_seconds=round(duration_seconds, 4),
            details=details if details else {}
        )


_loggers: Dict[str, ConsultationLogger] = {}


def get_logger(
    name: str,
    log_level: Optional[str] = None,
    **kwargs
) -> ConsultationLogger:
    """
    Get or create a logger instance.

    Args:
        name: Logger name (usually module name)
        log_level: Override default log level
        **kwargs: Additional arguments for ConsultationLogger

    Returns:
        ConsultationLogger instance
    """
    if name not in _loggers:
        if log_level is None:
            log_level = os.environ.get('CONSULTATION_SAFETY_LOG_LEVEL', 'INFO')

        if 'enable_file' not in kwargs:
            kwargs['enable_file'] = os.environ.get(
                'CONSULTATION_SAFETY_LOG_TO_FILE', 'false'
            ).lower() in ('1', 'true', 'yes')

        _loggers[name] = ConsultationLogger(name, log_level=log_level, **kwargs)

    return _loggers[name]
