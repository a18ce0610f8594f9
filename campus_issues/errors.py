"""
Error taxonomy for Campus Issues.

Every error carries the HTTP status the API layer answers with and a stable
code for programmatic handling.
"""

from typing import Any, Dict, Optional


class CampusIssuesError(Exception):
    """Base class for all application errors."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, error: Optional[str] = None):
        self.message = message
        self.error = error
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "code": self.code,
            "message": self.message,
        }
        if self.error:
            body["error"] = self.error
        return body


class ValidationError(CampusIssuesError):
    """Missing, empty or oversized input."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(CampusIssuesError):
    """No principal could be resolved for the request."""

    status_code = 401
    code = "AUTHENTICATION_REQUIRED"


class ForbiddenError(CampusIssuesError):
    """Role, department or ownership mismatch."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(CampusIssuesError):
    status_code = 404
    code = "NOT_FOUND"


class InternalError(CampusIssuesError):
    """Storage failure or unexpected exception."""

    status_code = 500
    code = "INTERNAL_ERROR"
