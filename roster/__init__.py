"""User record management: a CRUD API, its HTTP client and a browser interface."""

from __future__ import annotations

from typing import Any

from .database import Database, resolve_database_path
from .errors import (
    DuplicateKeyError,
    NotFoundError,
    RosterError,
    TransportError,
    UnexpectedError,
    ValidationError,
)
from .models import User
from .service import UserService


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the combined web + API application."""

    from .application import create_application

    return create_application(*args, **kwargs)


def create_api_app(*args: Any, **kwargs: Any):
    """Factory function for the API-only application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "resolve_database_path",
    "User",
    "UserService",
    "RosterError",
    "ValidationError",
    "DuplicateKeyError",
    "NotFoundError",
    "TransportError",
    "UnexpectedError",
    "create_app",
    "create_api_app",
]
