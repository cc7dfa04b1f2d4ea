"""Tests for the FastAPI routes.

Covers:
- POST /register and POST /login — credential store
- GET /me — bearer token resolution
- POST /distribution and GET /distributions/{user_id} — record store
- POST /send-distribution-email — dispatch with a fake transport
"""
from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.db.repositories import UserRepository
from tests.fakes import FakeTransport


def _register(client: TestClient, username: str = "alice", password: str = "pw", email: str | None = None):
    body = {"username": username, "password": password}
    if email is not None:
        body["email"] = email
    return client.post("/register", json=body)


def _token(client: TestClient, username: str = "alice", password: str = "pw") -> str:
    _register(client, username, password)
    return client.post("/login", json={"username": username, "password": password}).json()["token"]


def _email_body(**overrides) -> dict:
    body = {
        "friends": ["Alice"],
        "friendEmails": ["a@x.com"],
        "distribution": {
            "Alice": {"Bob": [{"description": "lunch", "amount": 10.0, "paid": False}]},
        },
    }
    body.update(overrides)
    return body


# ===========================================================================
# Auth
# ===========================================================================

class TestRegister:
    def test_register_success(self, client: TestClient, db_session: Session) -> None:
        resp = _register(client, email="Alice@Example.com")

        assert resp.status_code == 200
        assert resp.json() == {"message": "User registered successfully"}
        user = UserRepository(db_session).get_by_username("alice")
        assert user is not None
        assert user.email == "alice@example.com"
        assert user.password_hash != "pw"

    def test_missing_fields(self, client: TestClient) -> None:
        resp = client.post("/register", json={"username": "alice"})
        assert resp.status_code == 400

    def test_duplicate_username(self, client: TestClient) -> None:
        _register(client)
        resp = _register(client)
        assert resp.status_code == 409

    def test_duplicate_email(self, client: TestClient) -> None:
        _register(client, "alice", email="shared@example.com")
        resp = _register(client, "bob", email="shared@example.com")
        assert resp.status_code == 409


class TestLogin:
    def test_login_returns_token(self, client: TestClient) -> None:
        _register(client)
        resp = client.post("/login", json={"username": "alice", "password": "pw"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["auth"] is True
        assert data["token"]

    def test_unknown_user(self, client: TestClient) -> None:
        resp = client.post("/login", json={"username": "nobody", "password": "pw"})
        assert resp.status_code == 404

    def test_wrong_password(self, client: TestClient) -> None:
        _register(client)
        resp = client.post("/login", json={"username": "alice", "password": "nope"})
        assert resp.status_code == 401


class TestMe:
    def test_current_user(self, client: TestClient) -> None:
        token = _token(client)
        resp = client.get("/me", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"

    def test_missing_token(self, client: TestClient) -> None:
        assert client.get("/me").status_code == 401

    def test_invalid_token(self, client: TestClient) -> None:
        resp = client.get("/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401


# ===========================================================================
# Distributions
# ===========================================================================

class TestDistributions:
    def test_save_and_list(self, client: TestClient, db_session: Session) -> None:
        _register(client)
        user = UserRepository(db_session).get_by_username("alice")

        resp = client.post(
            "/distribution",
            json={
                "user_id": str(user.id),
                "amount": 30,
                "friends": ["Bob", "Carol"],
                "spender": "Alice",
                "description": "groceries",
                "distribution": {"Bob": {"Alice": [{"description": "groceries", "amount": 15, "paid": False}]}},
            },
        )
        assert resp.status_code == 200
        assert resp.json() == {"message": "Distribution saved successfully"}

        resp = client.get(f"/distributions/{user.id}")
        assert resp.status_code == 200
        records = resp.json()
        assert len(records) == 1
        assert records[0]["amount"] == 30.0
        assert records[0]["friends"] == ["Bob", "Carol"]
        assert records[0]["distribution"]["Bob"]["Alice"][0]["amount"] == 15

    def test_list_for_user_without_records(self, client: TestClient) -> None:
        resp = client.get(f"/distributions/{uuid4()}")
        assert resp.status_code == 200
        assert resp.json() == []


# ===========================================================================
# POST /send-distribution-email
# ===========================================================================

class TestSendDistributionEmail:
    def test_success(self, client: TestClient, transport: FakeTransport) -> None:
        resp = client.post("/send-distribution-email", json=_email_body())

        assert resp.status_code == 200
        assert resp.json() == {"message": "Emails sent successfully."}
        assert len(transport.calls) == 1
        call = transport.calls[0]
        assert call["to"] == "a@x.com"
        assert call["subject"] == "Money Distribution Details for Alice"
        assert "Total amount due by Bob: 10.00" in call["body_text"]
        assert call["attachment"].filename == "distribution_details.pdf"

    def test_missing_data(self, client: TestClient, transport: FakeTransport) -> None:
        resp = client.post("/send-distribution-email", json={"friends": ["Alice"]})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required data."}
        assert transport.calls == []

    def test_empty_lists_are_missing_data(self, client: TestClient, transport: FakeTransport) -> None:
        resp = client.post("/send-distribution-email", json=_email_body(friends=[], friendEmails=[]))

        assert resp.status_code == 400
        assert transport.calls == []

    def test_transport_failure(self, client: TestClient, transport: FakeTransport) -> None:
        transport.fail_for = {"c@x.com"}
        body = _email_body(
            friends=["Alice", "Carol"],
            friendEmails=["a@x.com", "c@x.com"],
            distribution={
                "Alice": {"Bob": [{"description": "lunch", "amount": 10, "paid": False}]},
                "Carol": {"Bob": [{"description": "lunch", "amount": 10, "paid": True}]},
            },
        )

        resp = client.post("/send-distribution-email", json=body)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to send emails."}
        assert len(transport.calls) == 2

    def test_length_mismatch_fails(self, client: TestClient) -> None:
        body = _email_body(
            friends=["Alice", "Carol"],
            distribution={"Alice": {}, "Carol": {}},
        )
        resp = client.post("/send-distribution-email", json=body)
        assert resp.status_code == 500

    def test_negative_amount_rejected(self, client: TestClient, transport: FakeTransport) -> None:
        body = _email_body(
            distribution={"Alice": {"Bob": [{"description": "refund", "amount": -1, "paid": False}]}},
        )
        resp = client.post("/send-distribution-email", json=body)

        assert resp.status_code == 422
        assert transport.calls == []
