"""Domain errors raised by services and converted to JSON responses in main.py"""

from typing import Any, Optional


class DomainError(Exception):
    """Base class for errors that map to a structured client response"""

    status_code = 400

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}

    def to_response(self) -> dict[str, Any]:
        return {"detail": self.message, **self.extra}


class ValidationError(DomainError):
    """Malformed or out-of-range input"""

    status_code = 400


class AuthenticationError(DomainError):
    status_code = 401


class AuthorizationError(DomainError):
    """Role lacks the capability required by the operation"""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ReferentialIntegrityError(DomainError):
    """
    Deletion blocked by dependent rows.
    The response carries hasRecords=true so the caller can retry with cascade=true.
    """

    status_code = 400

    def __init__(self, message: str, extra: Optional[dict[str, Any]] = None):
        super().__init__(message, {"hasRecords": True, **(extra or {})})


class ConcurrencyError(DomainError):
    """A concurrent write prevented an atomic guarantee; safe to retry"""

    status_code = 409
