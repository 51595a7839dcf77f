"""
Error handling utilities for stack construction.

Provides structured configuration errors with error codes. Deploy-time
failures are reported by CloudFormation and never pass through here.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Configuration error with error code and message.

    Raised while reading settings or wiring resources, before anything is
    synthesized.
    """

    def __init__(self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured log output."""
        return {
            "errorCode": self.error_code,
            "message": self.message,
            **self.details,
        }


class ErrorCode:
    """Standard error codes for settings and wiring problems."""

    # Settings errors
    SETTINGS_NOT_FOUND = "SETTINGS_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"

    # Authentication errors
    INVALID_AUTH_TYPE = "INVALID_AUTH_TYPE"
    MISSING_AUTH_CONFIG = "MISSING_AUTH_CONFIG"

    # Wiring errors
    FUNCTION_NOT_FOUND = "FUNCTION_NOT_FOUND"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


def handle_error(error: Exception) -> Dict[str, Any]:
    """
    Convert exception to a standardized error dictionary.

    Args:
        error: Exception to handle

    Returns:
        Error dictionary suitable for structured logging
    """
    if isinstance(error, AppError):
        return error.to_dict()

    return {
        "errorCode": ErrorCode.INTERNAL_ERROR,
        "message": "An unexpected error occurred while building the stack.",
    }
