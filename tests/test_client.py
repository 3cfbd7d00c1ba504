from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from roster.api import create_app
from roster.client import UsersAPIClient
from roster.database import Database
from roster.errors import (
    DUPLICATE_EMAIL_MESSAGE,
    DuplicateKeyError,
    NotFoundError,
    TransportError,
    UnexpectedError,
    ValidationError,
)


ANA = {"name": "Ana", "email": "Ana@X.com", "age": "30", "occupation": "Engineer"}


@pytest.fixture()
def api_client(tmp_path: Path) -> UsersAPIClient:
    database = Database(tmp_path / "roster.sqlite3")
    database.initialize()
    http = TestClient(create_app(database=database))
    return UsersAPIClient("http://testserver/", http=http)


def _client_for(handler) -> UsersAPIClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return UsersAPIClient("http://roster.test/api", http=http)


def test_base_url_is_normalised() -> None:
    assert UsersAPIClient("http://localhost:5000/api/").base_url == "http://localhost:5000/api"
    with pytest.raises(ValueError):
        UsersAPIClient("   ")


def test_crud_round_trip_against_the_api(api_client: UsersAPIClient) -> None:
    created = api_client.create_user(ANA)
    assert created.email == "ana@x.com"
    assert created.age == 30

    assert api_client.list_users() == [created]
    assert api_client.get_user(created.id) == created

    updated = api_client.update_user(created.id, {**ANA, "age": 31})
    assert updated.age == 31
    assert updated.created_at == created.created_at

    api_client.delete_user(created.id)
    assert api_client.list_users() == []


def test_errors_map_to_the_taxonomy(api_client: UsersAPIClient) -> None:
    created = api_client.create_user(ANA)

    with pytest.raises(DuplicateKeyError) as duplicate:
        api_client.create_user(ANA)
    assert duplicate.value.server_message == DUPLICATE_EMAIL_MESSAGE

    with pytest.raises(ValidationError) as invalid:
        api_client.create_user({**ANA, "email": "other@x.com", "age": "-1"})
    assert invalid.value.server_message == "age must be a non-negative integer"

    with pytest.raises(NotFoundError):
        api_client.update_user("0" * 24, ANA)

    api_client.delete_user(created.id)
    with pytest.raises(NotFoundError):
        api_client.delete_user(created.id)


def test_connection_failures_raise_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client_for(handler)
    with pytest.raises(TransportError):
        client.list_users()


def test_server_errors_raise_unexpected_error_with_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "An unexpected error occurred"})

    client = _client_for(handler)
    with pytest.raises(UnexpectedError) as excinfo:
        client.create_user(ANA)
    assert excinfo.value.server_message == "An unexpected error occurred"


def test_malformed_payloads_raise_unexpected_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/users"):
            return httpx.Response(200, json={"not": "a list"})
        return httpx.Response(200, content=b"<html>", headers={"Content-Type": "text/html"})

    client = _client_for(handler)
    with pytest.raises(UnexpectedError):
        client.list_users()
    with pytest.raises(UnexpectedError):
        client.get_user("abc")


def test_requests_target_the_configured_base_url() -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        return httpx.Response(204)

    client = _client_for(handler)
    client.delete_user("abc123")

    assert seen == [("DELETE", "http://roster.test/api/users/abc123")]


def test_only_the_duplicate_email_message_maps_to_duplicate_key_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "name already exists in another form"})

    with pytest.raises(ValidationError) as excinfo:
        _client_for(handler).create_user(ANA)
    assert not isinstance(excinfo.value, DuplicateKeyError)
    assert excinfo.value.server_message == "name already exists in another form"
