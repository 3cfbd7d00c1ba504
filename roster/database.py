"""SQLite-backed persistence for user records."""
from __future__ import annotations

import logging
import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .errors import DuplicateKeyError, NotFoundError
from .models import User

logger = logging.getLogger("roster.database")

_SQLITE_URL_PREFIXES = ("sqlite:///", "sqlite://")


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def resolve_database_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the roster database.

    Accepts either a filesystem path or a ``sqlite:///`` connection string.
    """

    if env_value:
        value = env_value.strip()
        for prefix in _SQLITE_URL_PREFIXES:
            if value.startswith(prefix):
                value = value[len(prefix):]
                break
        if value:
            return Path(value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "roster.sqlite3").resolve(strict=False)


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _generate_user_id() -> str:
    return secrets.token_hex(12)


class Database:
    """Simple wrapper around SQLite for persisting user records."""

    def __init__(self, path: Path) -> None:
        _ensure_directory(path)
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self) -> None:
        """Create the required tables if they do not already exist."""

        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    age INTEGER NOT NULL CHECK (age >= 0),
                    occupation TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_users_created_at ON users(created_at);
                """
            )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_users(self) -> List[User]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at, id").fetchall()
        return [self._row_to_user(row) for row in rows]

    def get_user(self, user_id: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def insert_user(self, name: str, email: str, age: int, occupation: str) -> User:
        """Persist a new record and return it with its assigned identifier."""

        created_at = _current_timestamp()
        user_id = _generate_user_id()

        with self._connect() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO users (id, name, email, age, occupation, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id,
                        name,
                        email,
                        age,
                        occupation,
                        _serialize_datetime(created_at),
                        _serialize_datetime(created_at),
                    ),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateKeyError(email) from exc

        logger.debug("Inserted user %s into %s", user_id, self._path)
        return User(
            id=user_id,
            name=name,
            email=email,
            age=age,
            occupation=occupation,
            created_at=created_at,
            updated_at=created_at,
        )

    def replace_user(
        self,
        user_id: str,
        *,
        name: str,
        email: str,
        age: int,
        occupation: str,
        updated_at: datetime,
    ) -> User:
        """Overwrite the four editable fields of an existing record."""

        with self._connect() as conn:
            try:
                cursor = conn.execute(
                    """
                    UPDATE users
                    SET name = ?, email = ?, age = ?, occupation = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (name, email, age, occupation, _serialize_datetime(updated_at), user_id),
                )
            except sqlite3.IntegrityError as exc:
                raise DuplicateKeyError(email) from exc
            if cursor.rowcount == 0:
                raise NotFoundError(user_id)
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()

        if row is None:
            raise NotFoundError(user_id)
        return self._row_to_user(row)

    def delete_user(self, user_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            return cursor.rowcount > 0

    def _row_to_user(self, row: sqlite3.Row) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            age=int(row["age"]),
            occupation=row["occupation"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )


__all__ = ["Database", "resolve_database_path"]
