"""
Shared error handling for the Employee Directory Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidInputError(AccessLayerException):
    """Local validation failure; the request never reaches upstream."""

    status_code = 400

    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_INPUT", message, details)


class EmployeeNotFoundError(AccessLayerException):
    """Neither upstream nor the cached directory could produce the employee."""

    status_code = 404

    def __init__(self, employee_id: Optional[str] = None, message: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if employee_id is not None:
            details.setdefault("employee_id", employee_id)
        super().__init__(
            "EMPLOYEE_NOT_FOUND",
            message or f"Employee not found with id: {employee_id}",
            details
        )


class RateLimitError(AccessLayerException):
    """Upstream answered 429, on a single call or after the retry policy gave up."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)


class UpstreamUnavailableError(AccessLayerException):
    """Transport-level or unclassified upstream failure."""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream service error",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_UNAVAILABLE", f"{service}: {message}", details)
