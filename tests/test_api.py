"""
API integration tests

Tests end-to-end flows using FastAPI TestClient against an in-memory store.
"""

import pytest
from fastapi.testclient import TestClient

from core_ledger.api import create_app
from core_ledger.api.system import LedgerSystem
from core_ledger.storage import InMemoryLedgerStore


@pytest.fixture
def client():
    app = create_app(LedgerSystem(InMemoryLedgerStore()))
    with TestClient(app) as test_client:
        yield test_client


def _create(client, account_id, balance):
    response = client.post("/accounts", json={"account_id": account_id, "initial_balance": balance})
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_request_id_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self, client):
        assert client.get("/health").headers.get("X-Request-ID")

    def test_error_bodies_documented(self, client):
        schema = client.get("/openapi.json").json()
        assert "ErrorResponse" in schema["components"]["schemas"]
        transfer = schema["paths"]["/transactions"]["post"]["responses"]
        for code in ("400", "404", "409"):
            ref = transfer[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref.endswith("/ErrorResponse")
        assert "404" in schema["paths"]["/accounts/{account_id}"]["get"]["responses"]


class TestAccountEndpoints:

    def test_create_account(self, client):
        body = _create(client, 1, "1000")
        assert body == {"account_id": 1, "balance": "1000.0000000000"}

    def test_get_account(self, client):
        _create(client, 7, "12.34")
        response = client.get("/accounts/7")
        assert response.status_code == 200
        assert response.json() == {"account_id": 7, "balance": "12.3400000000"}

    def test_duplicate_account(self, client):
        _create(client, 1, "1")
        response = client.post("/accounts", json={"account_id": 1, "initial_balance": "2"})
        assert response.status_code == 400
        assert response.json()["error"] == "already_exists"

    def test_negative_initial_balance(self, client):
        response = client.post("/accounts", json={"account_id": 1, "initial_balance": "-1"})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_missing_account(self, client):
        response = client.get("/accounts/404")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "account_not_found"
        assert body["retryable"] is False

    def test_non_numeric_account_id(self, client):
        response = client.get("/accounts/abc")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_malformed_body(self, client):
        response = client.post("/accounts", json={"account_id": 1})
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request body"

    def test_account_transactions(self, client):
        _create(client, 1, "100")
        _create(client, 2, "0")
        client.post("/transactions", json={
            "source_account_id": 1, "destination_account_id": 2, "amount": "5"
        })
        response = client.get("/accounts/2/transactions")
        assert response.status_code == 200
        transactions = response.json()["transactions"]
        assert len(transactions) == 1
        assert transactions[0]["amount"] == "5.0000000000"

    def test_transactions_for_missing_account(self, client):
        assert client.get("/accounts/9/transactions").status_code == 404


class TestTransactionEndpoints:

    def test_transfer_flow(self, client):
        _create(client, 1, "1000")
        _create(client, 2, "100")

        response = client.post("/transactions", json={
            "source_account_id": 2, "destination_account_id": 1, "amount": "30.5"
        })
        assert response.status_code == 201
        transaction = response.json()
        assert transaction["status"] == "completed"
        assert transaction["amount"] == "30.5000000000"

        assert client.get("/accounts/1").json()["balance"] == "1030.5000000000"
        assert client.get("/accounts/2").json()["balance"] == "69.5000000000"

        fetched = client.get(f"/transactions/{transaction['transaction_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["source_account_id"] == 2

        response = client.post("/transactions", json={
            "source_account_id": 2, "destination_account_id": 1, "amount": "1000"
        })
        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_funds"
        assert client.get("/accounts/2").json()["balance"] == "69.5000000000"

    def test_same_account_transfer(self, client):
        _create(client, 1, "10")
        response = client.post("/transactions", json={
            "source_account_id": 1, "destination_account_id": 1, "amount": "1"
        })
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_argument"

    def test_transfer_to_missing_account(self, client):
        _create(client, 1, "10")
        response = client.post("/transactions", json={
            "source_account_id": 1, "destination_account_id": 2, "amount": "1"
        })
        assert response.status_code == 404

    def test_missing_transaction(self, client):
        response = client.get("/transactions/999")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_conflict_maps_to_409(self):
        store = InMemoryLedgerStore(pool_size=1, pool_timeout=0.01)
        app = create_app(LedgerSystem(store))
        store.insert_account(1, "10")
        store.insert_account(2, "0")
        held = store.begin_unit_of_work()
        try:
            with TestClient(app) as client:
                response = client.post("/transactions", json={
                    "source_account_id": 1, "destination_account_id": 2, "amount": "1"
                })
        finally:
            held.abort()
        assert response.status_code == 409
        assert response.json()["retryable"] is True
