"""
API tests for the account endpoints.
"""

from decimal import Decimal

HEADERS = {"X-User-Id": "user-1"}


def test_create_account_returns_201(client):
    response = client.post("/accounts", json={
        "name": "Main checking",
        "account_type": "CHECKING",
        "initial_balance": "250.00",
    }, headers=HEADERS)

    assert response.status_code == 201
    data = response.json()
    assert data["owner_id"] == "user-1"
    assert data["currency"] == "BRL"
    assert Decimal(data["current_balance"]) == Decimal("250.00")


def test_create_credit_card_without_limit_is_400(client):
    response = client.post("/accounts", json={
        "name": "Visa",
        "account_type": "CREDIT_CARD",
    }, headers=HEADERS)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_list_accounts_is_scoped_to_user(client, make_account):
    make_account("Mine")
    make_account("Theirs", owner_id="user-2")

    response = client.get("/accounts", headers=HEADERS)

    assert [a["name"] for a in response.json()] == ["Mine"]


def test_get_other_users_account_is_404(client, make_account):
    account = make_account("Theirs", owner_id="user-2")

    response = client.get(f"/accounts/{account.id}", headers=HEADERS)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == f"Account {account.id} not found"


def test_account_entries_show_transfer_legs(client, make_account):
    a = make_account("Account A", "100.00")
    b = make_account("Account B", "0.00")
    client.post("/transfers", json={
        "from_account_id": a.id, "to_account_id": b.id, "amount": "30.00",
    }, headers=HEADERS)

    entries = client.get(f"/accounts/{a.id}/entries", headers=HEADERS).json()

    assert len(entries) == 1
    assert entries[0]["entry_type"] == "DEBIT"
    assert entries[0]["category"] == "Transfer"
    assert entries[0]["subcategory"] == "To: Account B"


def test_recalculate_keeps_consistent_balance(client, make_account):
    a = make_account("Account A", "100.00")
    b = make_account("Account B", "0.00")
    client.post("/transfers", json={
        "from_account_id": a.id, "to_account_id": b.id, "amount": "30.00",
    }, headers=HEADERS)

    first = client.post(f"/accounts/{a.id}/recalculate", headers=HEADERS)
    second = client.post(f"/accounts/{a.id}/recalculate", headers=HEADERS)

    assert first.status_code == 200
    assert Decimal(first.json()["current_balance"]) == Decimal("70.00")
    assert first.json()["current_balance"] == second.json()["current_balance"]


def test_close_account_then_transfer_is_rejected(client, make_account):
    a = make_account("Account A", "100.00")
    b = make_account("Account B", "0.00")

    closed = client.patch(
        f"/accounts/{b.id}/status", json={"new_status": "CLOSED"}, headers=HEADERS
    )
    response = client.post("/transfers", json={
        "from_account_id": a.id, "to_account_id": b.id, "amount": "30.00",
    }, headers=HEADERS)

    assert closed.status_code == 200
    assert closed.json()["status"] == "CLOSED"
    assert response.status_code == 400
    assert response.json()["error"]["message"] == f"Account {b.id} is not active"


def test_reopen_closed_account_is_400(client, make_account):
    a = make_account("Account A")
    client.patch(f"/accounts/{a.id}/status", json={"new_status": "CLOSED"}, headers=HEADERS)

    response = client.patch(
        f"/accounts/{a.id}/status", json={"new_status": "ACTIVE"}, headers=HEADERS
    )

    assert response.status_code == 400
    assert response.json()["error"]["details"] == {
        "status": "CLOSED", "new_status": "ACTIVE",
    }


def test_reconcile_against_statement(client, make_account):
    a = make_account("Account A", "100.00")

    response = client.post(
        f"/accounts/{a.id}/reconcile",
        json={"statement_balance": "95.00"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["is_reconciled"] is False
    assert Decimal(data["difference"]) == Decimal("5.00")
