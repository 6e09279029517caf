"""Base exception classes for domain-level errors.

Handlers raise these and the command dispatcher converts every one of them
into exactly one user-facing outcome.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


# === Command-facing errors ===


class UserInputError(DomainError):
    """The invoking user supplied something unusable (bad position, no results, ...)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="USER_INPUT")
        self.field = field


class PermissionDeniedError(DomainError):
    """The actor lacks the authority a command requires."""

    def __init__(self, message: str, required: str = "dj") -> None:
        super().__init__(message, code="PERMISSION_DENIED")
        self.required = required


class CooldownActiveError(DomainError):
    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message, code="COOLDOWN_ACTIVE")
        self.retry_after_seconds = retry_after_seconds


class CollaboratorUnavailableError(DomainError):
    """A required collaborator or piece of state is absent.

    Covers "music system not available" as well as "nothing is playing".
    """

    def __init__(self, message: str, collaborator: str = "audio_engine") -> None:
        super().__init__(message, code="COLLABORATOR_UNAVAILABLE")
        self.collaborator = collaborator


class CollaboratorFailureError(DomainError):
    """A collaborator was reachable but the call failed."""

    def __init__(self, collaborator: str, message: str | None = None) -> None:
        msg = message or f"{collaborator} call failed"
        super().__init__(msg, code="COLLABORATOR_FAILURE")
        self.collaborator = collaborator
