"""
Typed exceptions raised by the finance services.

Every service operation surfaces exactly one of these. Each
carries a machine-readable code and the HTTP status the API
layer answers with, so routers never parse message strings.
"""

from typing import Any


class FinanceError(Exception):
    """Base exception for all finance service errors."""

    code: str = "FINANCE_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(FinanceError):
    """Input is malformed or violates a business rule."""

    code = "VALIDATION_ERROR"
    status_code = 400


class AuthenticationError(FinanceError):
    """The caller did not identify itself."""

    code = "UNAUTHORIZED"
    status_code = 401


class NotFoundError(FinanceError):
    """A referenced account or transfer does not exist for the caller."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource: str = "Resource", details: Any = None):
        super().__init__(f"{resource} not found", details)


class InternalServerError(FinanceError):
    """
    An unexpected failure inside a unit of work.

    The underlying cause is logged server side. Clients only ever
    see the opaque message, never the details.
    """

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}
