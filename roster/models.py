"""Domain models for the roster service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class User:
    """Represents a user record stored in the roster database."""

    id: str
    name: str
    email: str
    age: int
    occupation: str
    created_at: datetime
    updated_at: datetime

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON document form exchanged over the HTTP API."""

        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "occupation": self.occupation,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @staticmethod
    def from_document(data: Mapping[str, Any]) -> "User":
        """Create a :class:`User` from its JSON document form."""

        required_fields = {"_id", "name", "email", "age", "occupation", "createdAt", "updatedAt"}
        missing = required_fields - data.keys()
        if missing:
            raise ValueError(f"Missing required user fields: {', '.join(sorted(missing))}")

        return User(
            id=str(data["_id"]),
            name=str(data["name"]),
            email=str(data["email"]),
            age=int(data["age"]),
            occupation=str(data["occupation"]),
            created_at=_parse_timestamp(data["createdAt"]),
            updated_at=_parse_timestamp(data["updatedAt"]),
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


__all__ = ["User"]
