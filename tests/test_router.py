"""
Tests for the route table and the error boundary of the dispatcher.
"""

import pytest
from fastapi.testclient import TestClient

from tests.conftest import API
from user_api.app.api.v1.router import ROUTES, parse_id
from user_api.app.services.user_handler import UserHandler
from user_api.app.services.user_store import StoreError, UserStore
from user_api.app.services.validation import Ruleset


ANN = {"name": "Ann", "email": "ann@example.com", "age": 30}


def _store_down(*args, **kwargs):
    raise StoreError("database is locked")


class TestRouteTable:
    """Tests for the static ROUTES table."""

    def test_routes(self):
        table = {(r.method, r.path): (r.name, r.ruleset) for r in ROUTES}

        assert table == {
            ("GET", "/users"): ("list_users", None),
            ("GET", "/users/{user_id}"): ("get_user", None),
            ("POST", "/users"): ("create_user", Ruleset.CREATE),
            ("PUT", "/users/{user_id}"): ("update_user", Ruleset.UPDATE),
            ("DELETE", "/users/{user_id}"): ("delete_user", None),
        }

    @pytest.mark.parametrize(
        "raw,expected",
        [("1", 1), ("0042", 42), ("abc", None), ("-1", None), ("", None), (None, None), ("٣", None)],
    )
    def test_parse_id(self, raw, expected):
        assert parse_id(raw) == expected

    def test_parse_id_rejects_out_of_range(self):
        assert parse_id(str(2 ** 63)) is None
        assert parse_id(str(2 ** 63 - 1)) == 2 ** 63 - 1


class TestStoreFailures:
    """Store errors are answered with a generic 500 body."""

    @pytest.mark.parametrize(
        "method,path,json,error",
        [
            ("GET", API, None, "Failed to retrieve users"),
            ("GET", f"{API}/1", None, "Failed to retrieve user"),
            ("POST", API, ANN, "Failed to create user"),
            ("PUT", f"{API}/1", {"name": "Annie"}, "Failed to update user"),
            ("DELETE", f"{API}/1", None, "Failed to delete user"),
        ],
    )
    def test_store_failure(self, client: TestClient, monkeypatch, method, path, json, error):
        for name in ("list_users", "get_user", "insert_user", "update_user", "delete_user"):
            monkeypatch.setattr(UserStore, name, _store_down)

        response = client.request(method, path, json=json)

        assert response.status_code == 500
        assert response.json() == {"error": error}

    def test_failure_in_uniqueness_check(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(UserStore, "email_taken", _store_down)

        response = client.post(API, json=ANN)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestUnhandledErrors:
    """Unexpected exceptions never escape without a JSON body."""

    def test_handler_crash(self, client: TestClient, monkeypatch):
        async def crash(self, user_id):
            raise RuntimeError("boom")

        monkeypatch.setattr(UserHandler, "get_user", crash)

        response = client.get(f"{API}/1")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestValidationShortCircuit:
    """A failed validation never reaches the handler."""

    def test_handler_not_called(self, client: TestClient, monkeypatch):
        calls = []

        async def record(self, fields):
            calls.append(fields)

        monkeypatch.setattr(UserHandler, "create_user", record)

        response = client.post(API, json={"name": "Ann"})

        assert response.status_code == 422
        assert calls == []

    def test_store_constraint_backs_up_validation(self, client: TestClient, monkeypatch):
        # Two creates that both passed validation before either inserted.
        async def never_taken(self, email, exclude_id=None):
            return False

        monkeypatch.setattr(UserStore, "email_taken", never_taken)

        assert client.post(API, json=ANN).status_code == 201
        response = client.post(API, json={**ANN, "name": "Ann Again"})

        assert response.status_code == 422
        assert response.json() == {
            "message": "Validation failed",
            "errors": {"email": ["The email has already been taken."]},
        }
