"""
Domain errors raised by the service layer.

Every error carries a human readable message meant to be shown to the user
as is, plus the HTTP status the API layer answers with.
"""


class CareerConnectError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CareerConnectError):
    """Missing or contradictory input, rejected before any write."""

    status_code = 400
    kind = "validation"


class AuthorizationError(CareerConnectError):
    """Wrong role, not the owner, or not connected."""

    status_code = 403
    kind = "authorization"


class NotFoundError(CareerConnectError):
    status_code = 404
    kind = "not_found"


class ConflictError(CareerConnectError):
    """Duplicate application, self connection and the like."""

    status_code = 409
    kind = "conflict"
