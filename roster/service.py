"""CRUD operations over the user record store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Mapping

from .database import Database
from .errors import NotFoundError
from .models import User
from .schema import ensure_email_available, validate_user_payload

logger = logging.getLogger("roster.service")


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """Validate user payloads and translate them into store operations.

    Every operation touches a single record in a single statement. Concurrent
    updates to the same record are last-write-wins; there is no version check.
    """

    def __init__(self, database: Database) -> None:
        self._database = database

    @property
    def database(self) -> Database:
        return self._database

    def list(self) -> List[User]:
        return self._database.list_users()

    def get(self, user_id: str) -> User:
        user = self._database.get_user(user_id)
        if user is None:
            raise NotFoundError(user_id)
        return user

    def create(self, payload: Mapping[str, object]) -> User:
        fields = validate_user_payload(payload)
        ensure_email_available(self._database, fields.email)

        user = self._database.insert_user(
            fields.name,
            fields.email,
            fields.age,
            fields.occupation,
        )
        logger.info("Created user %s <%s>", user.id, user.email)
        return user

    def update(self, user_id: str, payload: Mapping[str, object]) -> User:
        existing = self.get(user_id)
        fields = validate_user_payload(payload)
        ensure_email_available(self._database, fields.email, exclude_id=existing.id)

        # updatedAt must move forward even when the clock has not.
        updated_at = _current_timestamp()
        if updated_at <= existing.updated_at:
            updated_at = existing.updated_at + timedelta(microseconds=1)

        user = self._database.replace_user(
            existing.id,
            name=fields.name,
            email=fields.email,
            age=fields.age,
            occupation=fields.occupation,
            updated_at=updated_at,
        )
        logger.info("Updated user %s", user.id)
        return user

    def delete(self, user_id: str) -> None:
        if not self._database.delete_user(user_id):
            raise NotFoundError(user_id)
        logger.info("Deleted user %s", user_id)


__all__ = ["UserService"]
