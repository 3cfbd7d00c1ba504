"""Tests for the combined API + web application and package imports."""

from __future__ import annotations

import importlib
import sys
import unittest
from pathlib import Path
from unittest import mock

import httpx
from fastapi.testclient import TestClient

from roster.application import create_application
from roster.client import UsersAPIClient
from roster.config import Settings


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _offline_client() -> UsersAPIClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return UsersAPIClient("http://roster.test/api", http=httpx.Client(transport=httpx.MockTransport(handler)))


def test_api_is_mounted_under_api_prefix(tmp_path: Path) -> None:
    settings = Settings(database_path=tmp_path / "app.sqlite3", session_secret="tests-secret")
    app = create_application(settings=settings, api_client=_offline_client())

    with TestClient(app) as client:
        welcome = client.get("/api/")
        assert welcome.status_code == 200
        assert welcome.json()["message"] == "Welcome to the Roster API"

        created = client.post(
            "/api/users",
            json={"name": "Ana", "email": "Ana@X.com", "age": 30, "occupation": "Engineer"},
        )
        assert created.status_code == 201, created.text

        listing = client.get("/api/users")
        assert [record["email"] for record in listing.json()] == ["ana@x.com"]

        page = client.get("/")
        assert page.status_code == 200
        assert "Error fetching users" in page.text

    assert (tmp_path / "app.sqlite3").exists()


class PackageImportTests(unittest.TestCase):
    def test_import_database_without_web_stack(self) -> None:
        """Importing roster.database should not require FastAPI."""

        with mock.patch.dict(sys.modules):
            for name in [m for m in list(sys.modules) if m == "roster" or m.startswith("roster.")]:
                sys.modules.pop(name, None)
            sys.modules["fastapi"] = None

            database_module = importlib.import_module("roster.database")
            self.assertTrue(hasattr(database_module, "Database"))

            package = sys.modules.get("roster")
            self.assertIsNotNone(package)
            self.assertTrue(hasattr(package, "UserService"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
