"""
Access control error taxonomy.

Only StoreError is transient; callers may retry it with backoff. Everything else is
terminal and must not be retried.
"""

from typing import Optional


class AccessControlError(Exception):
    status_code = 500
    retryable = False
    reason = "error"

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.target = target

    def to_detail(self) -> dict:
        detail = {"reason": self.reason, "message": self.message}
        if self.target:
            detail["target"] = self.target
        return detail


class AuthorizationError(AccessControlError):
    """Caller lacks the privilege required for the operation."""
    status_code = 403
    reason = "forbidden"


class ValidationError(AccessControlError):
    """Malformed input, e.g. an empty role name."""
    status_code = 422
    reason = "validation_error"


class DuplicateNameError(AccessControlError):
    """A role or permission with the same name already exists."""
    status_code = 409
    reason = "already_exists"


class NotFoundError(AccessControlError):
    """A referenced role, permission or user does not exist."""
    status_code = 404
    reason = "not_found"


class StoreError(AccessControlError):
    """The persistence layer failed or is unreachable."""
    status_code = 503
    retryable = True
    reason = "store_unavailable"

    def to_detail(self) -> dict:
        # Internal persistence details stay in the process log.
        return {"reason": self.reason, "message": "Service temporarily unavailable, please try again"}
