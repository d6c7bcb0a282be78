"""Closing failures that map onto stable API error codes.

Every subclass declares its wire ``code``, HTTP status and a default
cause/action pair. Callers raise with an explicit ``message`` when they
can say something more precise than the default.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


class DomainError(Exception):
    code: ClassVar[str] = "DOMAIN_ERROR"
    status_code: ClassVar[int] = HTTPStatus.UNPROCESSABLE_ENTITY
    default_cause: ClassVar[str] = "The operation violates a closing rule."
    default_action: ClassVar[str] = "Review the request and try again."

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or compose_error_message(
            cause=self.default_cause, action=self.default_action
        )
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ValidationError(DomainError):
    """Malformed input, rejected before any mutation."""

    code = "VALIDATION_ERROR"
    status_code = HTTPStatus.BAD_REQUEST
    default_cause = "Request data violates business rules."
    default_action = "Adjust the input fields and try again."


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = HTTPStatus.NOT_FOUND
    default_cause = "The referenced resource does not exist."
    default_action = "Check the identifier and retry."


class ConflictError(DomainError):
    """The mutation collides with state changed by someone else."""

    code = "CONFLICT"
    status_code = HTTPStatus.CONFLICT
    default_cause = "The selection conflicts with the current closing state."
    default_action = "Reload the eligible records and retry with a new selection."


class AlreadyIssuedError(DomainError):
    code = "LABEL_ALREADY_ISSUED"
    status_code = HTTPStatus.CONFLICT
    default_cause = "The envelope label was already issued."
    default_action = (
        "Use the label already attached to the envelope; "
        "a second copy cannot be generated."
    )


class IntegrityFault(DomainError):
    """Envelope and record links disagree.

    A transaction boundary was broken somewhere; the caller cannot recover
    from this by retrying.
    """

    code = "INTEGRITY_FAULT"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    default_cause = "Envelope and record links are inconsistent."
    default_action = "Do not retry; escalate to the system administrator."
