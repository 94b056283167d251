"""Error taxonomy shared by all services.

Every error carries a stable machine-readable ``kind`` and the HTTP status
class the API layer maps it to.
"""

from __future__ import annotations


class CareMatchError(Exception):
    """Base class for errors surfaced to the caller."""

    kind = "unexpected"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(CareMatchError):
    """Malformed or out-of-range input."""

    kind = "validation"
    status_code = 400


class AuthorizationError(CareMatchError):
    """Caller is authenticated but lacks rights on the resource."""

    kind = "authorization"
    status_code = 403


class NotFoundError(CareMatchError):
    """Referenced entity is absent or not visible to the caller."""

    kind = "not_found"
    status_code = 404


class InvalidStateError(CareMatchError):
    """Entity exists but its state does not permit the transition."""

    kind = "invalid_state"
    status_code = 400


class ConflictError(CareMatchError):
    """A uniqueness invariant would be violated."""

    kind = "conflict"
    status_code = 409

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint


class DuplicateApplicationError(ConflictError):
    """The caregiver already applied to the posting. Reported as a 400."""

    status_code = 400


class TransientError(CareMatchError):
    """Storage-layer failure; safe for the caller to retry."""

    kind = "transient"
    status_code = 503
