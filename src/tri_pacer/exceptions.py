"""
Custom exceptions for the triathlon pace planner.

This module defines a hierarchy of exceptions that provide clear error
handling throughout the application. Each exception includes:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Calculation errors
    UNKNOWN_COURSE = "UNKNOWN_COURSE"
    ZERO_RATE = "ZERO_RATE"

    # Strava errors
    STRAVA_NOT_CONFIGURED = "STRAVA_NOT_CONFIGURED"
    STRAVA_NOT_CONNECTED = "STRAVA_NOT_CONNECTED"
    STRAVA_AUTH_FAILED = "STRAVA_AUTH_FAILED"
    STRAVA_RATE_LIMITED = "STRAVA_RATE_LIMITED"
    STRAVA_API_ERROR = "STRAVA_API_ERROR"

    # Export errors
    EXPORT_FAILED = "EXPORT_FAILED"


class TriPacerError(Exception):
    """
    Base exception for all pace planner errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(TriPacerError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class UnknownCourseError(ValidationError):
    """Raised when a course identifier is not in the course table."""

    def __init__(self, course: str, details: Optional[Dict[str, Any]] = None) -> None:
        error_details = details or {}
        error_details["course"] = course
        super().__init__(
            message=f"Unknown course '{course}'. Expected 'olympic' or 'ironman'.",
            field="course",
            details=error_details,
        )
        self.code = ErrorCode.UNKNOWN_COURSE


class ZeroRateError(ValidationError):
    """Raised when a pace or speed of zero is used as a divisor."""

    def __init__(
        self,
        field: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message or f"'{field}' must be greater than zero",
            field=field,
            details=details,
        )
        self.code = ErrorCode.ZERO_RATE


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(TriPacerError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with ID '{resource_id}' not found"
        error_details = details or {}
        error_details["resource_type"] = resource_type
        error_details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=error_details,
        )


class StravaNotConnectedError(NotFoundError):
    """Raised when no Strava token is stored for an athlete."""

    def __init__(self, athlete_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            resource_type="Strava token",
            resource_id=athlete_id,
            details=details,
        )
        self.message = f"Athlete '{athlete_id}' is not connected to Strava"
        self.code = ErrorCode.STRAVA_NOT_CONNECTED


# ============================================================================
# Strava Errors
# ============================================================================

class StravaNotConfiguredError(TriPacerError):
    """Raised when Strava OAuth credentials are missing from settings."""

    def __init__(
        self,
        message: str = "Strava OAuth not configured. Set STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET.",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.STRAVA_NOT_CONFIGURED,
            status_code=501,
            details=details,
        )


class StravaAuthError(TriPacerError):
    """Raised when Strava rejects a code exchange or token refresh."""

    def __init__(
        self,
        message: str = "Failed to authenticate with Strava",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.STRAVA_AUTH_FAILED,
            status_code=401,
            details=details,
        )


class StravaRateLimitError(TriPacerError):
    """Raised when Strava rate limits are hit."""

    def __init__(
        self,
        retry_after: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if retry_after:
            error_details["retry_after_seconds"] = retry_after
        super().__init__(
            message="Strava rate limit exceeded. Please try again later.",
            code=ErrorCode.STRAVA_RATE_LIMITED,
            status_code=429,
            details=error_details,
        )


class StravaAPIError(TriPacerError):
    """Raised when a Strava API call fails."""

    def __init__(
        self,
        message: str = "Failed to fetch Strava activities",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.STRAVA_API_ERROR,
            status_code=502,
            details=details,
        )


# ============================================================================
# Export Errors
# ============================================================================

class ExportError(TriPacerError):
    """Raised when a training-log export fails."""

    def __init__(
        self,
        message: str = "Failed to build training log",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.EXPORT_FAILED,
            status_code=500,
            details=details,
        )
