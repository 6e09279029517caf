"""
Shared Domain Kernel

Contains exceptions and constants shared across all bounded contexts.
"""

from moosek.domain.shared.exceptions import (
    CollaboratorFailureError,
    CollaboratorUnavailableError,
    CooldownActiveError,
    DomainError,
    InvalidOperationError,
    PermissionDeniedError,
    UserInputError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "UserInputError",
    "PermissionDeniedError",
    "CooldownActiveError",
    "CollaboratorUnavailableError",
    "CollaboratorFailureError",
]
