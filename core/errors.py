"""Domain error taxonomy.

Services raise these; the API layer maps each to an HTTP status via
``status_code``. None of them are retried internally.
"""


class MarketplaceError(Exception):
    """Base class for all domain errors surfaced to callers."""

    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotFoundError(MarketplaceError):
    """A referenced id does not exist."""

    status_code = 404
    code = "not_found"


class ForbiddenError(MarketplaceError):
    """Caller is authenticated but is not the owner or a party."""

    status_code = 403
    code = "forbidden"


class ValidationError(MarketplaceError):
    """Malformed or contradictory input."""

    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(message)
        self.details = details or [message]

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.details}


class InvalidRequestError(MarketplaceError):
    """Request is well-formed but not allowed in the current state."""

    status_code = 400
    code = "invalid_request"


class ConflictError(MarketplaceError):
    """A record that must be unique already exists."""

    status_code = 409
    code = "conflict"
