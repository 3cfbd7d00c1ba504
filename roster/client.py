"""HTTP client for the roster record API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .errors import (
    DUPLICATE_EMAIL_MESSAGE,
    DuplicateKeyError,
    NotFoundError,
    TransportError,
    UnexpectedError,
    ValidationError,
)
from .models import User

logger = logging.getLogger("roster.client")


def _normalize_base_url(base_url: str) -> str:
    cleaned = (base_url or "").strip()
    if not cleaned:
        raise ValueError("API base URL must not be empty")
    return cleaned.rstrip("/")


def _build_endpoint(base_url: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url}{path}"


def _extract_error_message(payload: object) -> Optional[str]:
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return None


class UsersAPIClient:
    """Perform user CRUD calls against the roster HTTP API."""

    def __init__(
        self,
        base_url: str,
        *,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        self._http = http if http is not None else httpx.Client(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._http.close()

    def list_users(self) -> List[User]:
        data = self._request("GET", "/users")
        if not isinstance(data, list):
            raise UnexpectedError("User API returned an unexpected response payload")
        return [self._to_user(item) for item in data]

    def get_user(self, user_id: str) -> User:
        return self._to_user(self._request("GET", f"/users/{user_id}"))

    def create_user(self, fields: Mapping[str, Any]) -> User:
        return self._to_user(self._request("POST", "/users", json=dict(fields)))

    def update_user(self, user_id: str, fields: Mapping[str, Any]) -> User:
        return self._to_user(self._request("PUT", f"/users/{user_id}", json=dict(fields)))

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/users/{user_id}")

    def _request(self, method: str, path: str, *, json: Dict[str, Any] | None = None) -> Any:
        url = _build_endpoint(self._base_url, path)

        try:
            response = self._http.request(method, url, json=json)
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise TransportError(f"Failed to contact the user API: {exc}") from exc

        if response.status_code >= 400:
            self._raise_for_status(response)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise UnexpectedError("User API returned an invalid response") from exc

    def _raise_for_status(self, response: httpx.Response) -> None:
        try:
            parsed = response.json()
        except ValueError:
            parsed = None

        server_message = _extract_error_message(parsed)
        fallback = f"User API request failed with status {response.status_code}"
        message = server_message or fallback

        if response.status_code == 400:
            if server_message == DUPLICATE_EMAIL_MESSAGE:
                raise DuplicateKeyError(server_message=server_message)
            raise ValidationError(message, server_message=server_message)
        if response.status_code == 404:
            raise NotFoundError(server_message=server_message)
        raise UnexpectedError(message, server_message=server_message)

    @staticmethod
    def _to_user(payload: object) -> User:
        if not isinstance(payload, dict):
            raise UnexpectedError("User API returned an unexpected response payload")
        try:
            return User.from_document(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise UnexpectedError("User API response was missing required fields") from exc


__all__ = ["UsersAPIClient"]
