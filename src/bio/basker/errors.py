"""Error taxonomy for the Basker server.

Every failure a handler can report maps to exactly one of these exception
classes, and ``classify_exception`` turns an exception into an HTTP status.
The web layer applies the mapping in a single middleware.
"""

from typing import Optional


class BaskerException(Exception):
    """Base class for errors that carry their own HTTP status."""

    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingIdentityException(BaskerException):
    """No actor identifier was supplied with the request."""

    status = 401

    @staticmethod
    def header_missing() -> "MissingIdentityException":
        return MissingIdentityException("User DID required")


class NotAuthorizedException(BaskerException):
    """The actor is known but lacks the capability for the operation."""

    status = 403

    @staticmethod
    def admin_permission(permission: str) -> "NotAuthorizedException":
        return NotAuthorizedException(f"Permission '{permission}' required")

    @staticmethod
    def moderator_required() -> "NotAuthorizedException":
        return NotAuthorizedException("Moderator access required")

    @staticmethod
    def moderator_permission(permission: str) -> "NotAuthorizedException":
        return NotAuthorizedException(f"Permission '{permission}' required")

    @staticmethod
    def not_a_moderator() -> "NotAuthorizedException":
        return NotAuthorizedException("User is not a moderator")

    @staticmethod
    def action_denied(description: str) -> "NotAuthorizedException":
        return NotAuthorizedException(
            f"Moderator does not have permission to {description}"
        )


class ValidationException(BaskerException):
    """A required field is missing or a value is outside its allowed set."""

    status = 400

    @staticmethod
    def invalid_json() -> "ValidationException":
        return ValidationException("Invalid JSON")

    @staticmethod
    def missing_fields(description: str) -> "ValidationException":
        return ValidationException(description)


class NotFoundException(BaskerException):
    """The referenced verification request or moderator does not exist."""

    status = 404

    @staticmethod
    def verification_request(request_id: str) -> "NotFoundException":
        return NotFoundException(f"Verification request not found: {request_id}")

    @staticmethod
    def moderator() -> "NotFoundException":
        return NotFoundException("Moderator not found")


class ConflictException(BaskerException):
    """The operation is not allowed in the record's current state."""

    status = 409

    @staticmethod
    def already_reviewed(request_id: str, status: str) -> "ConflictException":
        return ConflictException(
            f"Verification request {request_id} was already {status}"
        )


class UpstreamException(BaskerException):
    """An AT Protocol service call failed. The upstream message is kept."""

    status = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


def classify_exception(e: BaseException) -> int:
    """Return the HTTP status for an exception raised while handling a request."""
    if isinstance(e, BaskerException):
        return e.status
    return 500
