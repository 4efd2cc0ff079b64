from decimal import Decimal

import pytest

from chon.db import models


@pytest.fixture
def pending_transaction(db_session, player_factory):
    player = player_factory()
    db_session.add(models.PaymentMethod(name="ZainCash", code="zaincash", fee_percentage=Decimal("10")))
    tx = models.Transaction(
        player_id=player.id,
        amount=Decimal("20.00"),
        transaction_type="entry_fee",
        status="pending",
        payment_method="zaincash",
    )
    db_session.add(tx)
    db_session.commit()
    return tx


def test_list_describes_fees(client, admin_headers, pending_transaction):
    (row,) = client.get("/api/admin/transactions", params={"status": "pending"}, headers=admin_headers).json()["data"]
    assert row["fee_amount"] == "2.00"
    assert row["total_with_fee"] == "22.00"
    assert row["payment_method"] == "ZainCash"


def test_complete_then_conflict(client, admin_headers, db_session, pending_transaction):
    url = f"/api/admin/transactions/{pending_transaction.id}"
    response = client.post(f"{url}/complete", json={"reason": "verified"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "completed"

    assert client.post(f"{url}/fail", json={}, headers=admin_headers).status_code == 409

    db_session.expire_all()
    logs = db_session.query(models.TransactionLog).all()
    assert [(log.action, log.reason) for log in logs] == [("completed", "verified")]


def test_fail_without_reason(client, admin_headers, pending_transaction):
    response = client.post(f"/api/admin/transactions/{pending_transaction.id}/fail", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "failed"


def test_missing_transaction(client, admin_headers):
    assert client.post("/api/admin/transactions/404/complete", headers=admin_headers).status_code == 404
