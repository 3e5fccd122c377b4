from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 500

    def __init__(self, message: str = "", *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def error_name(self) -> str:
        return type(self).__name__


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the caller is not signed in or credentials are invalid."""

    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403


class NotFoundError(DomainError):
    status_code = 404


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409


class RateLimitError(DomainError):
    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later.", *, retry_after: int = 60):
        super().__init__(message)
        self.retry_after = retry_after
