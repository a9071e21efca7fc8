"""
Error Handler Utility
=====================

This module provides the error taxonomy of the timeline viewer together with a
small handler that logs errors and turns exceptions into user-facing messages.

Fatal errors (DataLoadError, HeaderError) stop startup. TimeExpressionError is
recoverable and is shown on the prompt line while the analyst keeps typing.

Author: Timeline Lens Development Team
Version: 1.0
"""

import logging
import traceback
from typing import List, Optional

# Configure logger
logger = logging.getLogger(__name__)


class ErrorSeverity:
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class TimelineError(Exception):
    """Base exception for timeline-related errors."""

    def __init__(self, message: str, details: Optional[str] = None,
                 severity: str = ErrorSeverity.ERROR):
        """
        Initialize timeline error.

        Args:
            message: User-friendly error message
            details: Technical details for logging
            severity: Error severity level
        """
        super().__init__(message)
        self.message = message
        self.details = details or message
        self.severity = severity


class DataLoadError(TimelineError):
    """Exception for timeline files that cannot be read."""

    def __init__(self, message: str, path: Optional[str] = None,
                 original_error: Optional[Exception] = None,
                 severity: str = ErrorSeverity.CRITICAL):
        details = f"{message}\n"
        if path:
            details += f"File: {path}\n"
        if original_error:
            details += f"Original error: {type(original_error).__name__}: {original_error}\n"

        super().__init__(message, details, severity)
        self.path = path
        self.original_error = original_error


class HeaderError(DataLoadError):
    """Exception for a missing or malformed CSV header row."""

    def __init__(self, message: str, path: Optional[str] = None,
                 unknown_columns: Optional[List[str]] = None,
                 missing_columns: Optional[List[str]] = None):
        super().__init__(message, path)
        self.unknown_columns = unknown_columns or []
        self.missing_columns = missing_columns or []
        if self.unknown_columns:
            self.details += f"Unrecognized columns: {', '.join(self.unknown_columns)}\n"
        if self.missing_columns:
            self.details += f"Missing columns: {', '.join(self.missing_columns)}\n"


class TimeExpressionError(TimelineError):
    """Exception for a typed time expression that does not parse."""

    HINT = "Try: today, yesterday, last 7 days, last 12h, after <date>, before <date>, <date> to <date>, clear"

    def __init__(self, expression: str, reason: str = "Invalid time"):
        message = f"{reason}. {self.HINT}"
        super().__init__(message, f"{reason}: {expression!r}", ErrorSeverity.WARNING)
        self.expression = expression
        self.reason = reason


class ErrorHandler:
    """
    Centralized error handler for the timeline viewer.

    Logs errors at a level matching their severity and turns them into the
    message shown to the analyst.
    """

    def handle_error(self, error: Exception, context: str = "") -> str:
        """
        Handle an error with severity-aware logging.

        Args:
            error: The exception that occurred
            context: Context description (e.g., "loading timeline")

        Returns:
            str: User-friendly message for the error
        """
        if isinstance(error, TimelineError):
            message = error.message
            details = error.details
            severity = error.severity
        else:
            message = f"An unexpected error occurred while {context}" if context else "An unexpected error occurred"
            error_traceback = traceback.format_exc()
            details = f"Context: {context}\n{type(error).__name__}: {str(error)}\n{error_traceback}"
            severity = ErrorSeverity.ERROR

        log_message = f"Error in {context}: {details}" if context else f"Error: {details}"

        if severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

        return message
