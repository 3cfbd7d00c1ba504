from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from roster.api import create_app
from roster.database import Database


ANA = {"name": "Ana", "email": "Ana@X.com", "age": 30, "occupation": "Engineer"}


@pytest.fixture()
def database(tmp_path: Path) -> Database:
    db = Database(tmp_path / "roster.sqlite3")
    db.initialize()
    return db


@pytest.fixture()
def client(database: Database) -> TestClient:
    return TestClient(create_app(database=database))


def test_welcome_message(client: TestClient) -> None:
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Roster API"}


def test_create_then_list_returns_normalised_record(client: TestClient) -> None:
    created = client.post("/users", json=ANA)
    assert created.status_code == 201, created.text
    body = created.json()

    assert set(body) == {"_id", "name", "email", "age", "occupation", "createdAt", "updatedAt"}
    assert body["email"] == "ana@x.com"
    assert body["name"] == "Ana"
    assert body["age"] == 30

    listing = client.get("/users")
    assert listing.status_code == 200
    records = listing.json()
    assert len(records) == 1
    assert records[0]["_id"] == body["_id"]
    assert records[0]["email"] == "ana@x.com"


def test_create_accepts_form_style_age(client: TestClient) -> None:
    response = client.post("/users", json={**ANA, "age": "30"})
    assert response.status_code == 201, response.text
    assert response.json()["age"] == 30


def test_duplicate_email_returns_400_with_message(client: TestClient) -> None:
    assert client.post("/users", json=ANA).status_code == 201

    duplicate = client.post("/users", json={**ANA, "email": "ana@x.COM"})
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "A user with that email already exists"}
    assert len(client.get("/users").json()) == 1


@pytest.mark.parametrize(
    "payload",
    [
        {**ANA, "age": -1},
        {**ANA, "age": 10**19},
        {**ANA, "name": "   "},
        {**ANA, "email": ""},
        {**ANA, "occupation": " "},
        {"name": "Ana"},
    ],
)
def test_invalid_payload_returns_400(client: TestClient, payload: dict) -> None:
    response = client.post("/users", json=payload)
    assert response.status_code == 400
    assert isinstance(response.json()["message"], str)
    assert client.get("/users").json() == []


def test_oversized_age_is_rejected_before_reaching_the_store(client: TestClient) -> None:
    response = client.post("/users", json={**ANA, "age": 10**19})
    assert response.status_code == 400
    assert response.json() == {"message": "age must be a non-negative integer"}


def test_malformed_json_returns_400(client: TestClient) -> None:
    response = client.post(
        "/users",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert "message" in response.json()


def test_read_single_record(client: TestClient) -> None:
    created = client.post("/users", json=ANA).json()

    response = client.get(f"/users/{created['_id']}")
    assert response.status_code == 200
    assert response.json() == created

    missing = client.get("/users/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"message": "User not found"}


def test_update_replaces_fields(client: TestClient) -> None:
    created = client.post("/users", json=ANA).json()

    response = client.put(f"/users/{created['_id']}", json={**ANA, "age": 31})
    assert response.status_code == 200, response.text
    updated = response.json()

    assert updated["_id"] == created["_id"]
    assert updated["age"] == 31
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] != created["updatedAt"]

    (listed,) = client.get("/users").json()
    assert listed["age"] == 31
    assert (listed["name"], listed["email"], listed["occupation"]) == ("Ana", "ana@x.com", "Engineer")


def test_update_unknown_record_returns_404(client: TestClient) -> None:
    client.post("/users", json=ANA)

    response = client.put("/users/" + "0" * 24, json=ANA)
    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


def test_update_with_invalid_payload_returns_400(client: TestClient) -> None:
    created = client.post("/users", json=ANA).json()

    response = client.put(f"/users/{created['_id']}", json={**ANA, "age": -5})
    assert response.status_code == 400
    assert client.get(f"/users/{created['_id']}").json()["age"] == 30


def test_delete_then_delete_again(client: TestClient) -> None:
    created = client.post("/users", json=ANA).json()

    deleted = client.delete(f"/users/{created['_id']}")
    assert deleted.status_code == 204
    assert deleted.content == b""
    assert client.get("/users").json() == []

    again = client.delete(f"/users/{created['_id']}")
    assert again.status_code == 404


def test_unexpected_errors_return_generic_500(database: Database, monkeypatch) -> None:
    app = create_app(database=database)

    def explode():
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(app.state.service, "list", explode)

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/users")

    assert response.status_code == 500
    assert response.json() == {"message": "An unexpected error occurred"}
    assert "disk on fire" not in response.text


def test_cors_headers_are_returned(client: TestClient) -> None:
    response = client.get("/users", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == 200
    assert response.headers.get("access-control-allow-origin") == "*"
