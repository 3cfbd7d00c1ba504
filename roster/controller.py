"""Client-side state handling for the user list and its edit form.

The state is an immutable :class:`ClientState`. Transition functions take a
state and return a new one without performing I/O; :class:`UserListController`
pairs them with calls to :class:`~roster.client.UsersAPIClient`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from .client import UsersAPIClient
from .errors import RosterError
from .models import User
from .schema import USER_FIELDS

logger = logging.getLogger("roster.controller")

FETCH_ERROR = "Error fetching users"
SAVE_ERROR = "Error saving user"
DELETE_ERROR = "Error deleting user"

DRAFT_FIELDS = USER_FIELDS


@dataclass(frozen=True)
class Draft:
    """Form values as typed by the user; ``age`` stays text until submitted."""

    name: str = ""
    email: str = ""
    age: str = ""
    occupation: str = ""

    def to_payload(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in DRAFT_FIELDS}

    @staticmethod
    def from_user(user: User) -> "Draft":
        return Draft(
            name=user.name,
            email=user.email,
            age=str(user.age),
            occupation=user.occupation,
        )


@dataclass(frozen=True)
class ClientState:
    records: Tuple[User, ...] = ()
    draft: Draft = field(default_factory=Draft)
    editing_id: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    pending_delete: Optional[str] = None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None


# ----------------------------------------------------------------------
# Pure transitions
# ----------------------------------------------------------------------
def begin_request(state: ClientState) -> ClientState:
    return replace(state, loading=True)


def records_loaded(state: ClientState, records: Tuple[User, ...]) -> ClientState:
    return replace(state, records=tuple(records), error=None, loading=False)


def request_failed(state: ClientState, message: str) -> ClientState:
    """Record a failure while keeping the previous records and draft."""

    return replace(state, error=message, loading=False)


def edit_field(state: ClientState, name: str, value: str) -> ClientState:
    if name not in DRAFT_FIELDS:
        raise KeyError(f"Unknown draft field '{name}'")
    return replace(state, draft=replace(state.draft, **{name: value}))


def start_edit(state: ClientState, record: User) -> ClientState:
    return replace(state, draft=Draft.from_user(record), editing_id=record.id)


def submit_succeeded(state: ClientState) -> ClientState:
    return replace(state, draft=Draft(), editing_id=None)


def cancel(state: ClientState) -> ClientState:
    return replace(state, draft=Draft(), editing_id=None, error=None)


def request_delete(state: ClientState, user_id: str) -> ClientState:
    return replace(state, pending_delete=user_id)


def dismiss_delete(state: ClientState) -> ClientState:
    return replace(state, pending_delete=None)


def find_record(state: ClientState, user_id: str) -> Optional[User]:
    for record in state.records:
        if record.id == user_id:
            return record
    return None


# ----------------------------------------------------------------------
# Effects
# ----------------------------------------------------------------------
class UserListController:
    """Run state transitions around calls to the user API.

    No method raises for API failures; they become ``state.error``. The
    ``loading`` flag is advisory and is not checked here.
    """

    def __init__(self, client: UsersAPIClient) -> None:
        self._client = client

    @property
    def client(self) -> UsersAPIClient:
        return self._client

    def mount(self, state: ClientState) -> ClientState:
        state = begin_request(state)
        try:
            records = self._client.list_users()
        except RosterError as exc:
            logger.warning("Error fetching users: %s", exc)
            return request_failed(state, FETCH_ERROR)
        return records_loaded(state, tuple(records))

    def submit(self, state: ClientState) -> ClientState:
        state = replace(begin_request(state), error=None)
        payload = state.draft.to_payload()
        try:
            if state.editing_id is not None:
                self._client.update_user(state.editing_id, payload)
            else:
                self._client.create_user(payload)
        except RosterError as exc:
            logger.warning("Error saving user: %s", exc)
            return request_failed(state, exc.server_message or SAVE_ERROR)
        return self.mount(submit_succeeded(state))

    def confirm_delete(self, state: ClientState) -> ClientState:
        user_id = state.pending_delete
        state = dismiss_delete(state)
        if user_id is None:
            return state

        state = begin_request(state)
        try:
            self._client.delete_user(user_id)
        except RosterError as exc:
            logger.warning("Error deleting user %s: %s", user_id, exc)
            return request_failed(state, DELETE_ERROR)
        return self.mount(state)


__all__ = [
    "ClientState",
    "Draft",
    "DRAFT_FIELDS",
    "FETCH_ERROR",
    "SAVE_ERROR",
    "DELETE_ERROR",
    "UserListController",
    "begin_request",
    "records_loaded",
    "request_failed",
    "edit_field",
    "start_edit",
    "submit_succeeded",
    "cancel",
    "request_delete",
    "dismiss_delete",
    "find_record",
]
