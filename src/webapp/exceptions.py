"""
Custom exceptions for the shipping rate web application.

Provides a hierarchy of exceptions for clean error handling in routes.
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result: Dict[str, Any] = {
            "error": self.message,
            "code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(AppException):
    """Raised when request validation fails."""

    status_code = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, details)


class ConfigurationError(AppException):
    """Raised when configuration is missing or invalid."""

    status_code = 500
    error_code = "CONFIGURATION_ERROR"


class RateLookupError(AppException):
    """Raised when rate lookup fails unexpectedly."""

    status_code = 500
    error_code = "RATE_LOOKUP_ERROR"

    def __init__(self, reason: str):
        super().__init__("Failed to fetch rates", details={"reason": reason})
