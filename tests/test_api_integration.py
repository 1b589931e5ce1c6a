"""
Integration tests for the Bank Ledger API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from bank_ledger.api import create_app
from bank_ledger.ledger import Ledger


@pytest.fixture
def ledger():
    """Ledger seeded with alice and bob"""
    ledger = Ledger()
    ledger.add_account("alice", Decimal('100'))
    ledger.add_account("bob", Decimal('50'))
    return ledger


@pytest.fixture
def client(ledger):
    """Test client bound to the seeded ledger"""
    return TestClient(create_app(ledger))


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        """Test health endpoint"""
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_default_ledger_is_empty(self):
        """Test create_app without a ledger starts empty"""
        r = TestClient(create_app()).get("/transactions")
        assert r.json() == {"count": 0, "transactions": []}


class TestAccountFlow:
    """Account registration and lookup"""

    def test_create_account(self, client, ledger):
        """Test creating a new account"""
        r = client.post("/accounts", json={"name": "carol", "initial_balance": "12.34"})
        assert r.status_code == 201
        assert r.json() == {"name": "carol", "balance": "12.34"}
        assert ledger.get_balance("carol") == Decimal('12.34')

    def test_create_duplicate_account(self, client):
        """Test duplicate names conflict"""
        r = client.post("/accounts", json={"name": "alice"})
        assert r.status_code == 409

    def test_create_account_bad_balance(self, client):
        """Test unparsable balances are rejected"""
        r = client.post("/accounts", json={"name": "carol", "initial_balance": "abc"})
        assert r.status_code == 422

    def test_get_account(self, client):
        """Test account lookup"""
        r = client.get("/accounts/bob")
        assert r.status_code == 200
        assert r.json()["balance"] == "50"

    def test_get_unknown_account(self, client):
        """Test unknown accounts return 404"""
        assert client.get("/accounts/nobody").status_code == 404


class TestTransactionFlow:
    """Deposit, withdraw, transfer and rollback over HTTP"""

    def test_deposit(self, client, ledger):
        """Test deposit endpoint"""
        r = client.post("/transactions/deposit", json={"account": "alice", "amount": "20"})
        assert r.status_code == 201
        data = r.json()
        assert data["index"] == 0
        assert data["transaction"]["success"] is True
        assert data["transaction"]["transaction_type"] == "deposit"
        assert ledger.get_balance("alice") == Decimal('120')

    def test_withdraw_insufficient_funds(self, client, ledger):
        """Test failed withdrawals are logged with success false"""
        r = client.post("/transactions/withdraw", json={"account": "bob", "amount": "60"})
        assert r.status_code == 201
        assert r.json()["transaction"]["success"] is False
        assert ledger.get_balance("bob") == Decimal('50')

    def test_transfer_and_rollback(self, client, ledger):
        """Test rollback restores both sides of a transfer"""
        r = client.post("/transactions/transfer", json={
            "from_account": "alice", "to_account": "bob", "amount": "70"
        })
        assert r.status_code == 201
        index = r.json()["index"]
        assert ledger.get_balance("alice") == Decimal('30')

        r = client.post(f"/transactions/{index}/rollback")
        assert r.status_code == 200
        assert r.json()["reversed"] is True
        assert ledger.get_balance("alice") == Decimal('100')
        assert ledger.get_balance("bob") == Decimal('50')

        r = client.post(f"/transactions/{index}/rollback")
        assert r.status_code == 409

    def test_rollback_failed_transaction(self, client):
        """Test failed transactions cannot be rolled back"""
        client.post("/transactions/withdraw", json={"account": "bob", "amount": "60"})
        r = client.post("/transactions/0/rollback")
        assert r.status_code == 409

    def test_rollback_unknown_index(self, client):
        """Test bad index returns 404"""
        assert client.post("/transactions/5/rollback").status_code == 404

    def test_unknown_account(self, client):
        """Test unknown account returns 404"""
        r = client.post("/transactions/deposit", json={"account": "nobody", "amount": "1"})
        assert r.status_code == 404

    def test_invalid_amount(self, client):
        """Test non-positive amounts return 422"""
        r = client.post("/transactions/deposit", json={"account": "alice", "amount": "0"})
        assert r.status_code == 422
        r = client.post("/transactions/withdraw", json={"account": "alice", "amount": "x"})
        assert r.status_code == 422

    @pytest.mark.parametrize("amount", ["1e30", "1e999999999", "0.001", "NaN"])
    def test_out_of_range_amount(self, client, ledger, amount):
        """Test huge, too precise and non-finite amounts return 422"""
        r = client.post("/transactions/deposit", json={"account": "alice", "amount": amount})
        assert r.status_code == 422
        r = client.post("/transactions/transfer",
                        json={"from_account": "alice", "to_account": "bob", "amount": amount})
        assert r.status_code == 422
        assert ledger.get_balance("alice") == Decimal('100')
        assert ledger.transaction_count() == 0

    def test_out_of_range_starting_balance(self, client):
        """Test account creation refuses balances over the maximum"""
        r = client.post("/accounts", json={"name": "carol", "initial_balance": "1e30"})
        assert r.status_code == 422
        assert "exceeds the maximum" in r.json()["detail"]

    def test_overflowing_balance(self, client, ledger):
        """Test inexact balance updates return 400 and leave nothing logged"""
        ledger.get_account("alice").balance = Decimal('9' * 28)
        r = client.post("/transactions/deposit", json={"account": "alice", "amount": "0.01"})
        assert r.status_code == 400
        assert ledger.transaction_count() == 0

    def test_history(self, client):
        """Test transaction listing and lookup"""
        client.post("/transactions/deposit", json={"account": "alice", "amount": "1"})
        client.post("/transactions/withdraw", json={"account": "alice", "amount": "2"})

        r = client.get("/transactions")
        data = r.json()
        assert data["count"] == 2
        assert [t["index"] for t in data["transactions"]] == [0, 1]

        r = client.get("/transactions/1")
        assert r.status_code == 200
        assert r.json()["transaction_type"] == "withdraw"
        assert client.get("/transactions/2").status_code == 404
