"""Error types shared by the record service, the HTTP API and the client."""
from __future__ import annotations

from typing import Optional

DUPLICATE_EMAIL_MESSAGE = "A user with that email already exists"


class RosterError(RuntimeError):
    """Base class for failures surfaced by roster operations."""

    def __init__(self, message: str, *, server_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.server_message = server_message


class ValidationError(RosterError):
    """Raised when a user payload is missing fields or carries invalid values."""


class DuplicateKeyError(ValidationError):
    """Raised when an email address is already used by another record."""

    def __init__(self, email: str = "", **kwargs) -> None:
        super().__init__(DUPLICATE_EMAIL_MESSAGE, **kwargs)
        self.email = email


class NotFoundError(RosterError):
    """Raised when no record exists for the requested identifier."""

    def __init__(self, user_id: str = "", **kwargs) -> None:
        super().__init__("User not found", **kwargs)
        self.user_id = user_id


class TransportError(RosterError):
    """Raised by the HTTP client when the API cannot be reached."""


class UnexpectedError(RosterError):
    """Raised for failures that fit no other category."""


__all__ = [
    "DUPLICATE_EMAIL_MESSAGE",
    "RosterError",
    "ValidationError",
    "DuplicateKeyError",
    "NotFoundError",
    "TransportError",
    "UnexpectedError",
]
