"""Exceptions raised by the moderation core."""

from typing import Dict, Optional


class ValidationError(ValueError):
    """Raised when submission data are missing or malformed."""

    def __init__(self, message: str = '',
                 errors: Optional[Dict[str, str]] = None) -> None:
        """Keep field-level detail alongside the message."""
        self.errors = errors or {}
        if not message:
            message = '; '.join(f'{field}: {problem}'
                                for field, problem in self.errors.items())
        self.message = message
        super(ValidationError, self).__init__(message)


class InvalidTransition(ValidationError):
    """The requested status change is not part of the lifecycle."""

    def __init__(self, from_status: str, to_status: str) -> None:
        """Build the message from the attempted transition."""
        self.from_status = from_status
        self.to_status = to_status
        super(InvalidTransition, self).__init__(
            f'Cannot move from {from_status} to {to_status}',
            {'status': f'{from_status} -> {to_status} is not allowed'}
        )


class PermissionDenied(PermissionError):
    """The actor is not authorized to perform the operation."""

    def __init__(self, reason: str, message: str = '') -> None:
        """Carry the policy reason with the exception."""
        self.reason = reason
        super(PermissionDenied, self).__init__(message or reason)


class Forbidden(PermissionDenied):
    """The actor lacks the role required for a status transition."""

    def __init__(self, message: str = '') -> None:
        """Forbidden is always the reason."""
        super(Forbidden, self).__init__('forbidden', message)


class NoSuchSubmission(Exception):
    """An operation was performed on/for a submission that does not exist."""


class SaveError(RuntimeError):
    """Failed to persist submission state."""


class ConflictError(SaveError):
    """The submission changed since it was loaded; reload and retry."""
