"""Validation rules for user payloads."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .errors import DuplicateKeyError, ValidationError

if TYPE_CHECKING:  # pragma: no cover
    from .database import Database


USER_FIELDS = ("name", "email", "age", "occupation")

# Largest value an SQLite INTEGER column can hold.
MAX_AGE = 2**63 - 1


class UserFields(BaseModel):
    """The four client-supplied fields of a user record, normalised."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    email: str
    age: int = Field(..., ge=0, le=MAX_AGE)
    occupation: str

    @field_validator("name", "occupation")
    @classmethod
    def _strip_text(cls, value: str, info) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError(f"{info.field_name} must not be empty")
        return stripped

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("email must not be empty")
        return normalized

    @field_validator("age", mode="before")
    @classmethod
    def _reject_boolean_age(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("age must be a non-negative integer")
        return value


def _describe_error(error: Dict[str, Any]) -> str:
    loc = error.get("loc") or ()
    field = str(loc[0]) if loc else "payload"
    error_type = error.get("type", "")

    if error_type == "missing":
        return f"{field} is required"
    if field == "age":
        return "age must be a non-negative integer"
    if error_type == "value_error":
        ctx = error.get("ctx") or {}
        reason = ctx.get("error")
        if reason is not None:
            return str(reason)
    if error_type == "string_type":
        return f"{field} must be text"
    return f"{field}: {error.get('msg', 'invalid value')}"


def validate_user_payload(payload: object) -> UserFields:
    """Return the normalised fields of ``payload`` or raise :class:`ValidationError`."""

    if not isinstance(payload, Mapping):
        raise ValidationError("User payload must be a JSON object")

    try:
        return UserFields.model_validate(dict(payload))
    except PydanticValidationError as exc:
        reasons: List[str] = []
        for error in exc.errors():
            reason = _describe_error(error)
            if reason not in reasons:
                reasons.append(reason)
        raise ValidationError("; ".join(reasons)) from exc


def ensure_email_available(
    database: "Database",
    email: str,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    """Raise :class:`DuplicateKeyError` when ``email`` belongs to another record."""

    existing = database.get_user_by_email(email)
    if existing is not None and existing.id != exclude_id:
        raise DuplicateKeyError(email)


__all__ = ["USER_FIELDS", "UserFields", "validate_user_payload", "ensure_email_available"]
