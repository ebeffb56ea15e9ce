"""
Domain errors raised by services and rendered by the API layer.

Services never build HTTP responses themselves; each error carries the status
code and machine-readable code the handlers in ``collabhub.main`` use.
"""
from __future__ import annotations


class DomainError(Exception):
    status_code: int = 400
    code: str = "error"

    def __init__(self, message: str, *, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class Unauthenticated(DomainError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(DomainError):
    status_code = 403
    code = "forbidden"


class NotFound(DomainError):
    status_code = 404
    code = "not_found"


class Conflict(DomainError):
    # A resolved bid or a closed listing is reported as a bad request, not 409.
    status_code = 400
    code = "conflict"


class ValidationError(DomainError):
    status_code = 400
    code = "validation_error"
